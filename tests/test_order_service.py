from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.data.models import CartItemModel, CartModel, OrderModel
from app.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from app.domain.errors import ConflictError, InvalidStateError, NotFoundError
from app.domain.schemas import OrderCreate, OrderStatusUpdate, Principal
from app.repos.cart_repo import CartRepo
from app.services.cart_service import CartService
from app.services.order_service import OrderService, generate_order_number


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def orders(session, lock_service, notifier):
    return OrderService(session, lock_service, notification_service=notifier, lock_wait_seconds=0.2)


@pytest.fixture
def carts(session, lock_service):
    return CartService(session, lock_service)


def _checkout(**kw):
    data = {"customer_name": "Alice", "customer_phone": "200", "payment_method": PaymentMethod.MPESA}
    data.update(kw)
    return OrderCreate(**data)


def _place_order(orders, carts, user, product):
    carts.add_item(user.id, product.id, 1)
    return orders.create_order(user.id, _checkout())


def test_order_number_format():
    prefix, millis, suffix = generate_order_number().split("-")
    assert prefix == "ORD"
    assert millis.isdigit()
    assert len(suffix) == 8


def test_create_order_totals_and_cart_completion(session, orders, carts, notifier, users, make_product):
    alice = users["alice"]
    product = make_product(price=Decimal("10.00"))
    carts.add_item(alice.id, product.id, 2, customization={"name": "A"}, customization_fee="1.00")
    cart_id = carts.get_or_create_active_cart(alice.id).id

    order = orders.create_order(alice.id, _checkout(delivery_fee=Decimal("5")))

    assert order.subtotal == Decimal("22.00")
    assert order.tax_amount == Decimal("1.76")
    assert order.total_amount == Decimal("28.76")
    assert sum(i.subtotal for i in order.items) == order.subtotal
    assert order.payment_status == PaymentStatus.PENDING
    assert order.order_status == OrderStatus.PENDING
    assert order.payment_phone == "200"

    item = order.items[0]
    assert item.product_name == "Home Jersey"
    assert item.price == Decimal("10.00")
    assert item.customization == {"name": "A"}

    assert session.get(CartModel, cart_id).status == "completed"
    assert session.execute(select(func.count(CartItemModel.id))).scalar_one() == 0

    notifier.send_order_notification.assert_called_once_with(alice.id, order.id, order.order_number)


def test_order_keeps_snapshot_after_product_changes(session, orders, carts, users, make_product):
    product = make_product(price=Decimal("10.00"))
    order = _place_order(orders, carts, users["alice"], product)

    product.name = "Renamed"
    product.price = Decimal("99.00")
    session.commit()

    again = orders.get_order(order.id, Principal(id=users["alice"].id))
    assert again.items[0].product_name == "Home Jersey"
    assert again.total_amount == order.total_amount


def test_empty_cart_is_rejected(orders, carts, users):
    alice = users["alice"]
    with pytest.raises(InvalidStateError):
        orders.create_order(alice.id, _checkout())

    carts.get_or_create_active_cart(alice.id)
    with pytest.raises(InvalidStateError):
        orders.create_order(alice.id, _checkout())


def test_unavailable_items_are_skipped(session, orders, carts, users, make_product):
    alice = users["alice"]
    keep = make_product(price=Decimal("10.00"))
    gone = make_product(name="Old", price=Decimal("30.00"))
    carts.add_item(alice.id, keep.id, 1)
    carts.add_item(alice.id, gone.id, 1)
    gone.is_active = False
    session.commit()

    order = orders.create_order(alice.id, _checkout())
    assert [i.product_id for i in order.items] == [keep.id]
    assert order.subtotal == Decimal("10.00")


def test_only_unavailable_items_is_rejected(session, orders, carts, users, make_product):
    alice = users["alice"]
    gone = make_product()
    carts.add_item(alice.id, gone.id, 1)
    gone.is_active = False
    session.commit()

    with pytest.raises(InvalidStateError):
        orders.create_order(alice.id, _checkout())


def test_new_cart_after_checkout(orders, carts, users, make_product):
    alice = users["alice"]
    first = _place_order(orders, carts, alice, make_product())
    assert carts.get_cart(alice.id)["items"] == []
    second = _place_order(orders, carts, alice, make_product(name="Scarf"))
    assert first.order_number != second.order_number


def test_get_order_visibility(orders, carts, users, make_product):
    order = _place_order(orders, carts, users["alice"], make_product())

    assert orders.get_order(order.id, Principal(id=users["admin"].id, role="admin")).id == order.id
    with pytest.raises(NotFoundError):
        orders.get_order(order.id, Principal(id=users["bob"].id))


def test_cancel_rules(orders, carts, users, make_product):
    alice = users["alice"]
    order = _place_order(orders, carts, alice, make_product())

    with pytest.raises(NotFoundError):
        orders.cancel_order(order.id, users["bob"].id)

    cancelled = orders.cancel_order(order.id, alice.id)
    assert cancelled.order_status == OrderStatus.CANCELLED
    assert orders.cancel_order(order.id, alice.id).order_status == OrderStatus.CANCELLED


def test_cancel_after_shipping_conflicts(orders, carts, users, make_product):
    alice = users["alice"]
    order = _place_order(orders, carts, alice, make_product())
    orders.update_status(order.id, OrderStatusUpdate(order_status=OrderStatus.SHIPPED))

    with pytest.raises(ConflictError):
        orders.cancel_order(order.id, alice.id)


def test_payment_and_fulfilment_timestamps(orders, carts, users, make_product):
    order = _place_order(orders, carts, users["alice"], make_product())

    paid = orders.update_status(order.id, OrderStatusUpdate(payment_status=PaymentStatus.PAID, transaction_id="TX1"))
    assert paid.payment_status == PaymentStatus.PAID
    assert paid.paid_at is not None
    assert paid.transaction_id == "TX1"
    assert paid.order_status == OrderStatus.PENDING

    delivered = orders.update_status(order.id, OrderStatusUpdate(order_status=OrderStatus.DELIVERED))
    assert delivered.delivered_at is not None
    assert delivered.shipped_at is not None

    with pytest.raises(InvalidStateError):
        orders.update_status(order.id, OrderStatusUpdate(order_status=OrderStatus.PROCESSING))
    with pytest.raises(InvalidStateError):
        orders.update_status(order.id, OrderStatusUpdate(payment_status=PaymentStatus.FAILED))


def test_invalid_transition_changes_nothing(orders, carts, users, make_product):
    order = _place_order(orders, carts, users["alice"], make_product())

    with pytest.raises(InvalidStateError):
        orders.update_status(
            order.id,
            OrderStatusUpdate(payment_status=PaymentStatus.REFUNDED, order_status=OrderStatus.CONFIRMED),
        )
    current = orders.get_order(order.id, Principal(id=users["alice"].id))
    assert current.order_status == OrderStatus.PENDING
    assert current.payment_status == PaymentStatus.PENDING


def test_list_and_delete_orders(orders, carts, users, make_product):
    alice, bob = users["alice"], users["bob"]
    first = _place_order(orders, carts, alice, make_product())
    _place_order(orders, carts, bob, make_product(name="Cap"))
    orders.update_status(first.id, OrderStatusUpdate(payment_status=PaymentStatus.PAID))

    assert [o.id for o in orders.list_user_orders(alice.id)] == [first.id]

    page = orders.list_orders(page=1, limit=10, payment_status="paid")
    assert page["total"] == 1
    assert page["items"][0].id == first.id
    assert orders.list_orders(user_id=bob.id)["total"] == 1

    orders.delete_order(first.id)
    with pytest.raises(NotFoundError):
        orders.get_order(first.id, Principal(id=alice.id))


def test_notification_failure_does_not_fail_order(orders, carts, notifier, users, make_product):
    notifier.send_order_notification.return_value = False
    order = _place_order(orders, carts, users["alice"], make_product())
    assert order.id is not None


def _count(session, model):
    return session.execute(select(func.count(model.id))).scalar_one()


def test_checkout_cannot_close_cart_while_item_is_being_added(
    session, orders, carts, users, make_product, monkeypatch
):
    alice = users["alice"]
    product = make_product(price=Decimal("10.00"))
    carts.add_item(alice.id, product.id, 1)

    outcome = {}
    find_matching_item = CartRepo.find_matching_item

    #checkout wchodzi pomiedzy odczyt koszyka a zapis pozycji
    def checkout_midway(repo, *args):
        try:
            orders.create_order(alice.id, _checkout())
        except ConflictError:
            outcome["conflict"] = True
        return find_matching_item(repo, *args)

    monkeypatch.setattr(CartRepo, "find_matching_item", checkout_midway)
    item = carts.add_item(alice.id, product.id, 1)
    monkeypatch.undo()

    assert outcome == {"conflict": True}
    assert item["quantity"] == 2
    assert _count(session, OrderModel) == 0

    order = orders.create_order(alice.id, _checkout())
    assert order.items[0].quantity == 2
    assert order.subtotal == Decimal("20.00")


def test_failed_checkout_rolls_back_everything(session, orders, carts, notifier, users, make_product, monkeypatch):
    alice = users["alice"]
    carts.add_item(alice.id, make_product().id, 1)

    def broken_clear(repo, cart_id):
        raise RuntimeError("storage failure")

    monkeypatch.setattr(CartRepo, "clear_items", broken_clear)
    with pytest.raises(RuntimeError):
        orders.create_order(alice.id, _checkout())
    monkeypatch.undo()

    assert _count(session, OrderModel) == 0
    assert _count(session, CartItemModel) == 1
    cart = CartRepo(session).get_active_cart_by_user(alice.id)
    assert cart is not None and cart.status == "active"
    notifier.send_order_notification.assert_not_called()

    #po bledzie koszyk nadal nadaje sie do zamowienia
    assert orders.create_order(alice.id, _checkout()).subtotal == Decimal("10.00")


def test_cart_creation_race_is_retried(session, carts, users, monkeypatch):
    alice = users["alice"]
    attempts = []
    create_cart = CartRepo.create_cart

    #pierwsza proba przegrywa z rownoleglym utworzeniem koszyka
    def racing_create(repo, cart):
        attempts.append(cart)
        if len(attempts) == 1:
            create_cart(repo, CartModel(user_id=cart.user_id, status="active", total_amount=0))
        return create_cart(repo, cart)

    monkeypatch.setattr(CartRepo, "create_cart", racing_create)
    cart = carts.get_or_create_active_cart(alice.id)

    assert len(attempts) == 2
    assert cart.status == "active"
    assert _count(session, CartModel) == 1


def test_add_item_insert_race_is_retried(session, carts, users, make_product, monkeypatch):
    alice = users["alice"]
    product = make_product()
    carts.get_or_create_active_cart(alice.id)
    attempts = []
    add_cart_item = CartRepo.add_cart_item

    #rownolegly insert tej samej pozycji wygrywa wyscig o unikalny klucz
    def racing_add(repo, item):
        attempts.append(item)
        if len(attempts) == 1:
            add_cart_item(
                repo,
                CartItemModel(
                    cart_id=item.cart_id,
                    product_id=item.product_id,
                    quantity=1,
                    price=item.price,
                    variant_key=item.variant_key,
                ),
            )
        return add_cart_item(repo, item)

    monkeypatch.setattr(CartRepo, "add_cart_item", racing_add)
    item = carts.add_item(alice.id, product.id, 1)

    assert len(attempts) == 2
    assert item["quantity"] == 1
    assert _count(session, CartItemModel) == 1


def test_integrity_error_gives_up_after_retry(carts, users, monkeypatch):
    def always_conflicting(repo, cart):
        raise IntegrityError("INSERT INTO carts", {}, Exception("uq_carts_active_user"))

    monkeypatch.setattr(CartRepo, "create_cart", always_conflicting)
    with pytest.raises(IntegrityError):
        carts.get_or_create_active_cart(users["alice"].id)
