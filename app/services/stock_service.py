# app/services/stock_service.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.stock_movement import StockMovementModel
from app.domain.enums import MovementType
from app.domain.errors import InsufficientStockError, NotFoundError, ValidationError
from app.domain.pricing import money
from app.repos.product_repo import ProductRepo
from app.repos.stock_repo import StockRepo
from app.utils.pagination import normalize_paging, page_offset, total_pages
from app.utils.logging import get_logger

logger = get_logger(__name__)


class StockService:
    """
    Ledger ruchow magazynowych. Kazdy zapis/usuniecie ruchu zmienia
    products.stock_quantity w tej samej transakcji, przy zablokowanym
    wierszu produktu, wiec licznik == suma ruchow ze znakiem.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = StockRepo(db)
        self.products = ProductRepo(db)

    # =====================================================
    # COMMANDS
    # =====================================================
    def record_movement(
        self,
        product_id: int,
        quantity: int,
        movement_type: MovementType | str,
        unit_price: Decimal | None = None,
        reference: str | None = None,
        notes: str | None = None,
    ) -> Dict[str, Any]:
        movement_type = self._validate(quantity, movement_type, unit_price)

        with transaction(self.db):
            product = self.products.get_product_for_update(product_id)
            if not product:
                raise NotFoundError("Produkt nie istnieje")

            change = quantity if movement_type == MovementType.IN else -quantity
            new_quantity = product.stock_quantity + change
            if new_quantity < 0:
                raise InsufficientStockError(
                    f"Niewystarczajacy stan magazynowy: dostepne {product.stock_quantity}, zadane {quantity}"
                )

            movement = self.repo.add_movement(
                StockMovementModel(
                    product_id=product_id,
                    quantity=quantity,
                    type=movement_type.value,
                    unit_price=money(unit_price) if unit_price is not None else None,
                    reference=reference,
                    notes=notes,
                )
            )
            product.stock_quantity = new_quantity
            movement.product = product

        logger.info(
            f"Stock {movement_type.value} {quantity} for product {product_id}: "
            f"{new_quantity - change} -> {new_quantity} (movement {movement.id})"
        )
        return self._serialize(movement)

    def update_movement(self, movement_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Zmieniac mozna tylko reference i notes, ilosci sa niezmienne."""
        with transaction(self.db):
            movement = self._get(movement_id)
            if "reference" in changes:
                movement.reference = changes["reference"]
            if "notes" in changes:
                movement.notes = changes["notes"]
        return self._serialize(movement)

    def delete_movement(self, movement_id: int) -> None:
        """
        Cofa wplyw ruchu na licznik i usuwa ruch. Licznik nie spada
        ponizej 0 (max(0, ...)), wiec przy niezaleznych zmianach licznika
        odwrocenie jest przyblizone.
        """
        with transaction(self.db):
            movement = self._get(movement_id)
            product = self.products.get_product_for_update(movement.product_id)

            if product:
                reverted = product.stock_quantity - movement.signed_quantity
                if reverted < 0:
                    logger.warning(
                        f"Reverting movement {movement.id} would drive product {product.id} "
                        f"to {reverted}, clamping to 0"
                    )
                product.stock_quantity = max(0, reverted)

            self.repo.delete_movement(movement)

        logger.info(f"Stock movement {movement_id} deleted")

    # =====================================================
    # QUERY
    # =====================================================
    def get_movement(self, movement_id: int) -> Dict[str, Any]:
        return self._serialize(self._get(movement_id))

    def list_movements(
        self,
        page: int = 1,
        limit: int = 10,
        product_id: int | None = None,
        movement_type: str | None = None,
        reference: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Dict[str, Any]:
        p, size = normalize_paging(page, limit)
        rows, total = self.repo.list_movements(
            page_offset(p, size),
            size,
            product_id=product_id,
            movement_type=movement_type,
            reference=reference,
            start_date=start_date,
            end_date=end_date,
        )
        return {
            "items": [self._serialize(m) for m in rows],
            "total": total,
            "page": p,
            "total_pages": total_pages(total, size),
        }

    def product_history(
        self,
        product_id: int,
        page: int = 1,
        limit: int = 10,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Dict[str, Any]:
        """
        Historia produktu od najnowszych. running_balance to stan po danym
        ruchu liczony z calego ledgera, nie tylko z biezacej strony.
        """
        if not self.products.get_product(product_id):
            raise NotFoundError("Produkt nie istnieje")

        p, size = normalize_paging(page, limit)
        rows, total = self.repo.list_movements(
            page_offset(p, size),
            size,
            product_id=product_id,
            start_date=start_date,
            end_date=end_date,
        )

        #strona jest ciaglym fragmentem ledgera, wiec saldo schodzi w dol od najnowszego
        history = []
        balance = self.repo.balance_through(rows[0]) if rows else 0
        for movement in rows:
            history.append({**self._serialize(movement), "running_balance": balance})
            balance -= movement.signed_quantity

        return {"items": history, "total": total, "page": p, "total_pages": total_pages(total, size)}

    def current_levels(self, min_quantity: int | None = None, max_quantity: int | None = None) -> List[Dict[str, Any]]:
        return [
            {"id": p.id, "name": p.name, "stock_quantity": p.stock_quantity}
            for p in self.products.list_levels(min_quantity, max_quantity)
        ]

    def ledger_levels(self) -> List[Dict[str, Any]]:
        """Stan liczony od zera z ledgera, do porownania z licznikiem."""
        sums = self.repo.ledger_sums()
        return [
            {"id": p.id, "name": p.name, "stock_quantity": sums.get(p.id, 0)}
            for p in self.repo.all_products()
        ]

    def reconcile(self) -> List[Dict[str, Any]]:
        """Produkty, dla ktorych licznik nie zgadza sie z suma ruchow."""
        sums = self.repo.ledger_sums()
        mismatches = []
        for p in self.repo.all_products():
            ledger = sums.get(p.id, 0)
            if ledger != p.stock_quantity:
                mismatches.append(
                    {"id": p.id, "name": p.name, "stock_quantity": p.stock_quantity, "ledger_quantity": ledger}
                )
        if mismatches:
            logger.warning(f"Stock counter/ledger mismatch for {len(mismatches)} products")
        return mismatches

    # =====================================================
    # HELPERS
    # =====================================================
    @staticmethod
    def _validate(quantity: int, movement_type: MovementType | str, unit_price: Decimal | None) -> MovementType:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Ilosc musi byc dodatnia liczba calkowita")
        try:
            movement_type = MovementType(movement_type)
        except ValueError:
            raise ValidationError("Typ ruchu musi byc 'in' albo 'out'")
        if unit_price is not None and Decimal(str(unit_price)) < 0:
            raise ValidationError("Cena jednostkowa nie moze byc ujemna")
        return movement_type

    def _get(self, movement_id: int) -> StockMovementModel:
        movement = self.repo.get_movement(movement_id)
        if not movement:
            raise NotFoundError("Ruch magazynowy nie istnieje")
        return movement

    @staticmethod
    def _serialize(movement: StockMovementModel) -> Dict[str, Any]:
        return {
            "id": movement.id,
            "product_id": movement.product_id,
            "product_name": movement.product.name if movement.product is not None else None,
            "quantity": movement.quantity,
            "type": movement.type,
            "unit_price": money(movement.unit_price) if movement.unit_price is not None else None,
            "total_value": money(movement.total_value),
            "reference": movement.reference,
            "notes": movement.notes,
            "date": movement.date,
        }
