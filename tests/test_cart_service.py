from decimal import Decimal

import pytest

from app.domain.enums import FAN_VERSION
from app.domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.services.cart_service import CartService


@pytest.fixture
def carts(session, lock_service):
    return CartService(session, lock_service)


def test_same_variant_merges_into_one_line(carts, users, make_product):
    product = make_product()
    alice = users["alice"]

    carts.add_item(alice.id, product.id, 1)
    item = carts.add_item(alice.id, product.id, 3)

    cart = carts.get_cart(alice.id)
    assert len(cart["items"]) == 1
    assert item["quantity"] == 4
    assert cart["total_amount"] == Decimal("40.00")


def test_different_variant_is_separate_line(carts, users, make_product):
    product = make_product()
    alice = users["alice"]

    carts.add_item(alice.id, product.id, 1, size="M")
    carts.add_item(alice.id, product.id, 1, size="L")
    carts.add_item(alice.id, product.id, 1, size="M", customization={"name": "SMITH", "number": 9})

    assert len(carts.get_cart(alice.id)["items"]) == 3


def test_price_is_snapshot_from_first_add(session, carts, users, make_product):
    product = make_product(price=Decimal("10.00"))
    alice = users["alice"]
    carts.add_item(alice.id, product.id, 1)

    product.price = Decimal("99.00")
    session.commit()

    item = carts.add_item(alice.id, product.id, 1)
    assert item["price"] == Decimal("10.00")
    assert carts.get_cart(alice.id)["total_amount"] == Decimal("20.00")


def test_version_price_used_for_fan_version(carts, users, make_product):
    product = make_product(has_versions=True, price_fan=Decimal("45.00"), price_player=Decimal("80.00"))
    item = carts.add_item(users["alice"].id, product.id, 2, variant_type=FAN_VERSION)
    assert item["price"] == Decimal("45.00")
    assert item["line_total"] == Decimal("90.00")


def test_customization_fee_counts_per_unit(carts, users, make_product):
    product = make_product()
    item = carts.add_item(users["alice"].id, product.id, 2, customization={"name": "A"}, customization_fee="1.00")
    assert item["line_total"] == Decimal("22.00")


def test_add_rejects_bad_input(carts, users, make_product):
    product = make_product()
    alice = users["alice"]

    with pytest.raises(ValidationError):
        carts.add_item(alice.id, product.id, 0)
    with pytest.raises(ValidationError):
        carts.add_item(alice.id, product.id, 1, customization_fee="-1")
    with pytest.raises(NotFoundError):
        carts.add_item(alice.id, 9999, 1)


def test_add_inactive_product_is_not_found(carts, users, make_product):
    product = make_product(is_active=False)
    with pytest.raises(NotFoundError):
        carts.add_item(users["alice"].id, product.id, 1)


def test_update_quantity_below_one_removes_line(carts, users, make_product):
    product = make_product()
    alice = users["alice"]
    item = carts.add_item(alice.id, product.id, 2)

    assert carts.update_item_quantity(alice.id, item["id"], 5)["quantity"] == 5
    assert carts.update_item_quantity(alice.id, item["id"], 0) is None

    cart = carts.get_cart(alice.id)
    assert cart["items"] == []
    assert cart["total_amount"] == Decimal("0.00")


def test_foreign_item_is_forbidden(carts, users, make_product):
    product = make_product()
    item = carts.add_item(users["alice"].id, product.id, 1)

    with pytest.raises(ForbiddenError):
        carts.update_item_quantity(users["bob"].id, item["id"], 3)
    with pytest.raises(ForbiddenError):
        carts.remove_item(users["bob"].id, item["id"])


def test_missing_item_is_not_found(carts, users):
    with pytest.raises(NotFoundError):
        carts.remove_item(users["alice"].id, 12345)


def test_clear_cart(carts, users, make_product):
    alice = users["alice"]
    assert carts.clear_cart(alice.id) == 0

    carts.add_item(alice.id, make_product().id, 1)
    carts.add_item(alice.id, make_product(name="Away").id, 1)
    assert carts.clear_cart(alice.id) == 2
    assert carts.get_cart(alice.id)["items"] == []


def test_deactivated_product_is_flagged_and_excluded_from_total(session, carts, users, make_product):
    alice = users["alice"]
    keep = make_product(price=Decimal("10.00"))
    gone = make_product(name="Old", price=Decimal("30.00"))
    carts.add_item(alice.id, keep.id, 1)
    carts.add_item(alice.id, gone.id, 1)

    gone.is_active = False
    session.commit()

    cart = carts.get_cart(alice.id)
    assert cart["unavailable_count"] == 1
    assert cart["total_amount"] == Decimal("10.00")
    assert [i["available"] for i in cart["items"]] == [True, False]


def test_one_active_cart_per_user(carts, users):
    first = carts.get_or_create_active_cart(users["alice"].id)
    second = carts.get_or_create_active_cart(users["alice"].id)
    assert first.id == second.id


def test_busy_cart_lock_raises_conflict(carts, lock_service, users, make_product):
    alice = users["alice"]
    lock_service.redis.set(lock_service.cart_key(alice.id), "someone-else", ex=10)

    with pytest.raises(ConflictError):
        with lock_service.cart_lock(alice.id, wait_seconds=0.2):
            pass

    lock_service.redis.delete(lock_service.cart_key(alice.id))
    carts.add_item(alice.id, make_product().id, 1)
    assert lock_service.redis.get(lock_service.cart_key(alice.id)) is None
