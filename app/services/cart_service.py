# app/services/cart_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.enums import CartStatus
from app.domain.errors import ForbiddenError, NotFoundError, ValidationError
from app.domain.pricing import line_total, money, resolve_unit_price, variant_key
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.services.lock_service import LockService
from app.utils.retry import integrity_retry
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Serwis obslugujacy Use Case'y dla domeny Cart.
    Komendy (add, update, remove, clear) modyfikuja stan,
    zapytania (get) tylko czytaja (poza leniwym utworzeniem koszyka).
    Jeden aktywny koszyk na uzytkownika.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.lock_service = lock_service

    # =====================================================
    # QUERY
    # =====================================================
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        """
        Koszyk z pozycjami i aktualnym podgladem produktu.
        Pozycje z produktem usunietym/nieaktywnym sa oznaczone
        available=False i nie wchodza do sumy.
        """
        cart = self.get_or_create_active_cart(user_id)
        return self._serialize_cart(cart)

    @integrity_retry()
    def get_or_create_active_cart(self, user_id: int) -> CartModel:
        with transaction(self.db):
            cart = self._ensure_active_cart(user_id)
        return cart

    # =====================================================
    # COMMANDS
    # =====================================================
    @integrity_retry()
    def add_item(
        self,
        user_id: int,
        product_id: int,
        quantity: int = 1,
        size: str | None = None,
        variant_type: str | None = None,
        customization: Any = None,
        customization_fee: Decimal | int | str = 0,
    ) -> Dict[str, Any]:
        """
        Dodaje produkt do aktywnego koszyka.
        Ta sama kombinacja (produkt, size, type, customization) zwieksza
        ilosc istniejacej pozycji, inna tworzy nowa pozycje z cena z chwili
        dodania. Caly merge/insert pod lockiem koszyka.
        """
        if quantity is None or int(quantity) < 1:
            raise ValidationError("Ilosc musi byc wieksza niz 0")
        fee = money(customization_fee)
        if fee < 0:
            raise ValidationError("Oplata za personalizacje nie moze byc ujemna")

        size = size or None
        variant_type = variant_type or None
        key = variant_key(size, variant_type, customization)

        with self.lock_service.cart_lock(user_id):
            with transaction(self.db):
                product = self.products.get_active_product(product_id)
                if not product:
                    raise NotFoundError("Produkt nie istnieje")

                #wiersz koszyka zablokowany, checkout nie zamknie go w trakcie
                cart = self._ensure_active_cart(user_id, for_update=True)
                item = self.repo.find_matching_item(cart.id, product_id, key)

                if item:
                    logger.info(
                        f"Produkt {product_id} juz jest w koszyku {cart.id}, zwiekszam ilosc "
                        f"z {item.quantity} do {item.quantity + int(quantity)}"
                    )
                    #cena zostaje ta z pierwszego dodania
                    item.quantity += int(quantity)
                    self.db.flush()
                else:
                    price = resolve_unit_price(product, variant_type)
                    logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id} po cenie {price}")
                    item = self.repo.add_cart_item(
                        CartItemModel(
                            cart_id=cart.id,
                            product_id=product_id,
                            quantity=int(quantity),
                            price=price,
                            size=size,
                            type=variant_type,
                            customization=customization,
                            customization_fee=fee,
                            variant_key=key,
                        )
                    )
                    item.product = product

                self._refresh_total(cart)

        return self._serialize_item(item)

    def update_item_quantity(self, user_id: int, item_id: int, quantity: int) -> Dict[str, Any] | None:
        """quantity < 1 usuwa pozycje i zwraca None."""
        with transaction(self.db):
            item = self._owned_item(user_id, item_id)
            cart = item.cart

            if quantity < 1:
                self.repo.delete_cart_item(item)
                self._refresh_total(cart)
                logger.info(f"Pozycja {item_id} usunieta z koszyka {cart.id} (ilosc {quantity})")
                return None

            item.quantity = quantity
            self.db.flush()
            self._refresh_total(cart)

        return self._serialize_item(item)

    def remove_item(self, user_id: int, item_id: int) -> None:
        with transaction(self.db):
            item = self._owned_item(user_id, item_id)
            cart = item.cart
            self.repo.delete_cart_item(item)
            self._refresh_total(cart)
        logger.info(f"Pozycja {item_id} usunieta z koszyka {cart.id}")

    def clear_cart(self, user_id: int) -> int:
        """Usuwa wszystkie pozycje aktywnego koszyka, brak koszyka = no-op."""
        with transaction(self.db):
            cart = self.repo.get_active_cart_by_user(user_id)
            if not cart:
                return 0
            removed = self.repo.clear_items(cart.id)
            self._refresh_total(cart)
        logger.info(f"Koszyk {cart.id} wyczyszczony ({removed} pozycji)")
        return removed

    # =====================================================
    # HELPERS
    # =====================================================
    def _ensure_active_cart(self, user_id: int, for_update: bool = False) -> CartModel:
        cart = self.repo.get_active_cart_by_user(user_id, for_update=for_update)
        if cart:
            return cart

        #rownolegle utworzenie konczy sie IntegrityError na indeksie
        #uq_carts_active_user, integrity_retry powtarza wtedy cala operacje
        cart = self.repo.create_cart(
            CartModel(user_id=user_id, status=CartStatus.ACTIVE.value, total_amount=Decimal("0.00"))
        )
        logger.info(f"Utworzono nowy koszyk {cart.id} dla uzytkownika {user_id}")
        return cart

    def _owned_item(self, user_id: int, item_id: int) -> CartItemModel:
        item = self.repo.get_cart_item(item_id)
        if not item:
            raise NotFoundError("Pozycja koszyka nie istnieje")

        cart = item.cart
        if cart is None or cart.user_id != user_id or cart.status != CartStatus.ACTIVE.value:
            raise ForbiddenError("Brak dostepu do koszyka")
        return item

    @staticmethod
    def _is_available(item: CartItemModel) -> bool:
        return item.product is not None and bool(item.product.is_active)

    def _refresh_total(self, cart: CartModel) -> Decimal:
        items = self.repo.get_cart_items(cart.id)
        total = sum(
            (line_total(i.price, i.customization_fee, i.quantity) for i in items if self._is_available(i)),
            Decimal("0.00"),
        )
        cart.total_amount = money(total)
        cart.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return cart.total_amount

    def _serialize_item(self, item: CartItemModel) -> Dict[str, Any]:
        product = item.product
        available = self._is_available(item)
        return {
            "id": item.id,
            "product_id": item.product_id,
            "quantity": item.quantity,
            "price": money(item.price),
            "size": item.size,
            "type": item.type,
            "customization": item.customization,
            "customization_fee": money(item.customization_fee),
            "line_total": line_total(item.price, item.customization_fee, item.quantity),
            "available": available,
            "product": (
                {
                    "id": product.id,
                    "name": product.name,
                    "price": money(product.price),
                    "category": product.category,
                    "image": self.products.primary_image_url(product.id),
                    "is_active": bool(product.is_active),
                }
                if product is not None
                else None
            ),
        }

    def _serialize_cart(self, cart: CartModel) -> Dict[str, Any]:
        items = [self._serialize_item(i) for i in self.repo.get_cart_items(cart.id)]
        total = sum((i["line_total"] for i in items if i["available"]), Decimal("0.00"))

        return {
            "id": cart.id,
            "user_id": cart.user_id,
            "status": cart.status,
            "items": items,
            "total_amount": money(total),
            "unavailable_count": sum(1 for i in items if not i["available"]),
        }
