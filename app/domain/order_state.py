# app/domain/order_state.py
from app.domain.enums import OrderStatus, PaymentStatus
from app.domain.errors import InvalidStateError, ConflictError

#kolejnosc realizacji, ruch tylko do przodu
FULFILMENT_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

CANCELLABLE = {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING}

PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),
    PaymentStatus.REFUNDED: set(),
}


def check_cancel(current: OrderStatus) -> bool:
    """
    True gdy anulowanie ma cos zmienic, False gdy zamowienie juz jest
    anulowane. Wysylka/dostarczenie -> ConflictError.
    """
    if current == OrderStatus.CANCELLED:
        return False
    if current not in CANCELLABLE:
        raise ConflictError("Nie mozna anulowac zamowienia, ktore zostalo wyslane lub dostarczone")
    return True


def check_order_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Zwraca False dla no-op (ten sam status), True dla legalnej zmiany."""
    if current == target:
        return False
    if target == OrderStatus.CANCELLED:
        return check_cancel(current)
    if current == OrderStatus.CANCELLED:
        raise InvalidStateError("Zamowienie anulowane nie moze zmienic statusu")
    if FULFILMENT_FLOW.index(target) < FULFILMENT_FLOW.index(current):
        raise InvalidStateError(f"Niedozwolona zmiana statusu {current.value} -> {target.value}")
    return True


def check_payment_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    if current == target:
        return False
    if target not in PAYMENT_TRANSITIONS[current]:
        raise InvalidStateError(f"Niedozwolona zmiana platnosci {current.value} -> {target.value}")
    return True
