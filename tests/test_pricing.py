from decimal import Decimal
from types import SimpleNamespace

from app.domain.enums import FAN_VERSION, PLAYER_VERSION
from app.domain.pricing import compute_order_totals, line_total, money, resolve_unit_price, variant_key


def _product(**kw):
    data = {"price": Decimal("50.00"), "has_versions": False, "price_fan": Decimal("0"), "price_player": Decimal("0")}
    data.update(kw)
    return SimpleNamespace(**data)


def test_money_rounds_half_up():
    assert money("1.005") == Decimal("1.01")
    assert money(None) == Decimal("0.00")
    assert money(3) == Decimal("3.00")


def test_line_total_includes_customization_fee_per_unit():
    assert line_total(Decimal("10.00"), Decimal("1.00"), 2) == Decimal("22.00")


def test_order_totals_with_tax_and_delivery():
    totals = compute_order_totals([Decimal("22.00")], Decimal("5"), Decimal("0.08"))
    assert totals.subtotal == Decimal("22.00")
    assert totals.tax_amount == Decimal("1.76")
    assert totals.delivery_fee == Decimal("5.00")
    assert totals.total_amount == Decimal("28.76")


def test_order_totals_empty_lines():
    totals = compute_order_totals([], 0, Decimal("0.08"))
    assert totals.total_amount == Decimal("0.00")


def test_version_prices_only_when_product_has_versions():
    versioned = _product(has_versions=True, price_fan=Decimal("45"), price_player=Decimal("80"))
    assert resolve_unit_price(versioned, FAN_VERSION) == Decimal("45.00")
    assert resolve_unit_price(versioned, PLAYER_VERSION) == Decimal("80.00")
    assert resolve_unit_price(versioned, None) == Decimal("50.00")

    plain = _product(price_fan=Decimal("45"))
    assert resolve_unit_price(plain, FAN_VERSION) == Decimal("50.00")


def test_variant_key_ignores_dict_key_order():
    a = variant_key("M", FAN_VERSION, {"name": "SMITH", "number": 9})
    b = variant_key("M", FAN_VERSION, {"number": 9, "name": "SMITH"})
    assert a == b
    assert a != variant_key("L", FAN_VERSION, {"name": "SMITH", "number": 9})
    assert variant_key(None, None, None) != variant_key("M", None, None)
