# app/services/order_service.py
import secrets
import time
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.domain.enums import CartStatus, OrderStatus, PaymentStatus
from app.domain.errors import InvalidStateError, NotFoundError
from app.domain.order_state import check_cancel, check_order_transition, check_payment_transition
from app.domain.pricing import compute_order_totals, line_total, money
from app.domain.schemas import OrderCreate, OrderOut, OrderStatusUpdate, Principal
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.utils.pagination import normalize_paging, page_offset, total_pages
from app.utils.settings import TAX_RATE
from app.utils.logging import get_logger

logger = get_logger(__name__)


def generate_order_number() -> str:
    """ORD-<epoch ms>-<8 hex>, 32 bity losowosci na kazda milisekunde."""
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Separacja od CartService: koszyk jest tylko zrodlem pozycji,
    zamowienie trzyma wlasna kopie (snapshot) wszystkiego co potrzebne.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
        tax_rate: Decimal = TAX_RATE,
        lock_wait_seconds: float = 5.0,
    ):
        self.db = db
        self.lock_service = lock_service
        self.lock_wait_seconds = lock_wait_seconds
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.notification_service = notification_service or NotificationService()
        self.tax_rate = tax_rate

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_order(self, user_id: int, payload: OrderCreate) -> OrderOut:
        """
        Use Case: Tworzenie zamowienia z aktywnego koszyka.

        1. Blokuje aktywny koszyk (brak / pusty -> InvalidState)
        2. Kopiuje pozycje do OrderItem (nazwa, obraz, cena, wariant)
        3. Liczy subtotal, podatek, total
        4. Zapisuje zamowienie, koszyk -> completed, pozycje koszyka usuwane
        Wszystko w jednej transakcji, pod tym samym lockiem koszyka co
        add_item, wiec pozycja nie trafi do koszyka zamykanego w trakcie.
        Powiadomienie dopiero po commicie.
        """
        with self.lock_service.cart_lock(user_id, wait_seconds=self.lock_wait_seconds), transaction(self.db):
            cart = self.carts.get_active_cart_by_user(user_id, for_update=True)
            if not cart:
                raise InvalidStateError("Brak aktywnego koszyka")

            items = self.carts.get_cart_items(cart.id)
            if not items:
                raise InvalidStateError("Koszyk jest pusty")

            snapshots = []
            for item in items:
                product = item.product
                if product is None or not product.is_active:
                    logger.warning(f"Pomijam pozycje {item.id}: produkt {item.product_id} niedostepny")
                    continue

                snapshots.append(
                    OrderItemModel(
                        product_id=product.id,
                        product_name=product.name,
                        product_image=self.products.primary_image_url(product.id),
                        quantity=item.quantity,
                        price=money(item.price),
                        subtotal=line_total(item.price, item.customization_fee, item.quantity),
                        size=item.size,
                        type=item.type,
                        customization=item.customization,
                        customization_fee=money(item.customization_fee),
                    )
                )

            if not snapshots:
                raise InvalidStateError("Zaden produkt z koszyka nie jest juz dostepny")

            totals = compute_order_totals([s.subtotal for s in snapshots], payload.delivery_fee, self.tax_rate)

            order = OrderModel(
                user_id=user_id,
                order_number=self._unique_order_number(),
                customer_name=payload.customer_name,
                customer_phone=payload.customer_phone,
                customer_email=payload.customer_email,
                delivery_type=payload.delivery_type.value,
                delivery_zone=payload.delivery_zone,
                delivery_address=payload.delivery_address,
                delivery_fee=totals.delivery_fee,
                subtotal=totals.subtotal,
                tax_amount=totals.tax_amount,
                total_amount=totals.total_amount,
                payment_method=payload.payment_method.value,
                payment_status=PaymentStatus.PENDING.value,
                payment_phone=payload.payment_phone or payload.customer_phone,
                order_status=OrderStatus.PENDING.value,
                notes=payload.notes,
                items=snapshots,
            )
            created = self.repo.create_order(order)

            #koszyk zamkniety i oprozniony w tej samej transakcji
            cart.status = CartStatus.COMPLETED.value
            cart.total_amount = Decimal("0.00")
            self.carts.clear_items(cart.id)

        logger.info(
            f"Order {created.order_number} (id={created.id}) created from cart {cart.id}: "
            f"{len(snapshots)} items, total {created.total_amount}"
        )

        self.notification_service.send_order_notification(user_id, created.id, created.order_number)

        return OrderOut.model_validate(created)

    def update_status(self, order_id: int, update: OrderStatusUpdate) -> OrderOut:
        """
        Zmiana statusu przez admina. paid nie przesuwa automatycznie
        order_status, to wymaga recznego potwierdzenia.
        """
        with transaction(self.db):
            order = self.repo.get_order_for_update(order_id)
            if not order:
                raise NotFoundError("Zamowienie nie istnieje")

            #najpierw walidacja obu przejsc, potem zmiany
            payment_changes = update.payment_status is not None and check_payment_transition(
                PaymentStatus(order.payment_status), update.payment_status
            )
            status_changes = update.order_status is not None and check_order_transition(
                OrderStatus(order.order_status), update.order_status
            )

            now = datetime.now(timezone.utc)

            if payment_changes:
                order.payment_status = update.payment_status.value
                if update.payment_status == PaymentStatus.PAID:
                    order.paid_at = now

            if update.transaction_id:
                order.transaction_id = update.transaction_id

            if status_changes:
                order.order_status = update.order_status.value
                if update.order_status == OrderStatus.SHIPPED:
                    order.shipped_at = now
                elif update.order_status == OrderStatus.DELIVERED:
                    order.delivered_at = now
                    if order.shipped_at is None:
                        order.shipped_at = now

        logger.info(
            f"Order {order.order_number}: payment={order.payment_status}, status={order.order_status}"
        )
        return OrderOut.model_validate(order)

    def cancel_order(self, order_id: int, user_id: int) -> OrderOut:
        """Anulowanie przez wlasciciela. Ponowne anulowanie to no-op."""
        with transaction(self.db):
            order = self.repo.get_order_for_update(order_id)
            if not order or order.user_id != user_id:
                raise NotFoundError("Zamowienie nie istnieje")

            if check_cancel(OrderStatus(order.order_status)):
                order.order_status = OrderStatus.CANCELLED.value
                logger.info(f"Order {order.order_number} cancelled by user {user_id}")

        return OrderOut.model_validate(order)

    def delete_order(self, order_id: int) -> None:
        with transaction(self.db):
            order = self.repo.get_order(order_id)
            if not order:
                raise NotFoundError("Zamowienie nie istnieje")
            self.repo.delete_order(order)
        logger.info(f"Order {order.order_number} deleted")

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, order_id: int, principal: Principal) -> OrderOut:
        """Wlasciciel albo admin, dla reszty zamowienie nie istnieje."""
        order = self.repo.get_order(order_id)
        if not order or (order.user_id != principal.id and not principal.is_admin):
            raise NotFoundError("Zamowienie nie istnieje")
        return OrderOut.model_validate(order)

    def list_user_orders(self, user_id: int) -> list[OrderOut]:
        return [OrderOut.model_validate(o) for o in self.repo.list_by_user(user_id)]

    def list_orders(self, page: int = 1, limit: int = 10, **filters) -> dict:
        p, size = normalize_paging(page, limit)
        rows, total = self.repo.list_orders(page_offset(p, size), size, **filters)
        return {
            "items": [OrderOut.model_validate(o) for o in rows],
            "total": total,
            "page": p,
            "total_pages": total_pages(total, size),
        }

    # =====================================================
    # HELPERS
    # =====================================================
    def _unique_order_number(self, attempts: int = 5) -> str:
        for _ in range(attempts):
            number = generate_order_number()
            if not self.repo.order_number_exists(number):
                return number
        #unikalny indeks na order_number i tak zatrzyma duplikat przy zapisie
        return generate_order_number()
