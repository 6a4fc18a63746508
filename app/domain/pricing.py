# app/domain/pricing.py
"""
Czyste funkcje liczace ceny: cena jednostkowa wariantu, wartosc pozycji,
sumy zamowienia. Wszystko na Decimal, zaokraglenie do groszy ROUND_HALF_UP.
"""
import hashlib
import json
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, NamedTuple

from app.domain.enums import FAN_VERSION, PLAYER_VERSION

CENT = Decimal("0.01")


def money(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_unit_price(product, variant_type: str | None) -> Decimal:
    """Cena bazowa albo cena wersji (Fan/Player) gdy produkt ma wersje."""
    if product.has_versions:
        if variant_type == FAN_VERSION:
            return money(product.price_fan)
        if variant_type == PLAYER_VERSION:
            return money(product.price_player)
    return money(product.price)


def line_total(price, customization_fee, quantity: int) -> Decimal:
    return money((money(price) + money(customization_fee)) * quantity)


def variant_key(size: str | None, variant_type: str | None, customization: Any) -> str:
    """
    Stabilny klucz wariantu pozycji koszyka. Ta sama kombinacja
    (size, type, customization) zawsze daje ten sam klucz, niezaleznie
    od kolejnosci kluczy w slowniku customization.
    """
    payload = json.dumps(
        [size, variant_type, customization],
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class OrderTotals(NamedTuple):
    subtotal: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    total_amount: Decimal


def compute_order_totals(line_subtotals: Iterable[Decimal], delivery_fee, tax_rate: Decimal) -> OrderTotals:
    subtotal = money(sum(line_subtotals, Decimal("0")))
    tax = money(subtotal * tax_rate)
    fee = money(delivery_fee)
    return OrderTotals(subtotal, tax, fee, money(subtotal + fee + tax))
