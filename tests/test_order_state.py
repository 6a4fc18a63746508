import pytest

from app.domain.enums import OrderStatus, PaymentStatus
from app.domain.errors import ConflictError, InvalidStateError
from app.domain.order_state import check_cancel, check_order_transition, check_payment_transition


@pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING])
def test_cancel_allowed_before_shipping(status):
    assert check_cancel(status) is True


@pytest.mark.parametrize("status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED])
def test_cancel_rejected_after_shipping(status):
    with pytest.raises(ConflictError):
        check_cancel(status)


def test_cancel_of_cancelled_is_noop():
    assert check_cancel(OrderStatus.CANCELLED) is False


def test_order_status_moves_forward_and_may_skip():
    assert check_order_transition(OrderStatus.PENDING, OrderStatus.SHIPPED) is True
    assert check_order_transition(OrderStatus.SHIPPED, OrderStatus.SHIPPED) is False


def test_order_status_cannot_move_back():
    with pytest.raises(InvalidStateError):
        check_order_transition(OrderStatus.SHIPPED, OrderStatus.CONFIRMED)


def test_cancelled_order_is_terminal():
    with pytest.raises(InvalidStateError):
        check_order_transition(OrderStatus.CANCELLED, OrderStatus.PROCESSING)


def test_payment_transitions():
    assert check_payment_transition(PaymentStatus.PENDING, PaymentStatus.PAID) is True
    assert check_payment_transition(PaymentStatus.PENDING, PaymentStatus.FAILED) is True
    assert check_payment_transition(PaymentStatus.PAID, PaymentStatus.REFUNDED) is True
    assert check_payment_transition(PaymentStatus.PAID, PaymentStatus.PAID) is False

    with pytest.raises(InvalidStateError):
        check_payment_transition(PaymentStatus.PENDING, PaymentStatus.REFUNDED)
    with pytest.raises(InvalidStateError):
        check_payment_transition(PaymentStatus.FAILED, PaymentStatus.PAID)
