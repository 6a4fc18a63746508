# app/repos/stock_repo.py
from datetime import datetime

from sqlalchemy import case, func, or_, and_, select
from sqlalchemy.orm import Session, selectinload

from app.data.models.product import ProductModel
from app.data.models.stock_movement import StockMovementModel

#ruch ze znakiem: in = +quantity, out = -quantity
SIGNED_QUANTITY = case(
    (StockMovementModel.type == "in", StockMovementModel.quantity),
    else_=-StockMovementModel.quantity,
)


class StockRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_movement(self, movement: StockMovementModel) -> StockMovementModel:
        self.db.add(movement)
        self.db.flush()
        return movement

    def get_movement(self, movement_id: int) -> StockMovementModel | None:
        return self.db.execute(
            select(StockMovementModel)
            .where(StockMovementModel.id == movement_id)
            .options(selectinload(StockMovementModel.product))
        ).scalar_one_or_none()

    def delete_movement(self, movement: StockMovementModel) -> None:
        self.db.delete(movement)
        self.db.flush()

    def _filtered(
        self,
        product_id: int | None = None,
        movement_type: str | None = None,
        reference: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ):
        stmt = select(StockMovementModel)
        if product_id is not None:
            stmt = stmt.where(StockMovementModel.product_id == product_id)
        if movement_type:
            stmt = stmt.where(StockMovementModel.type == movement_type)
        if reference:
            stmt = stmt.where(func.lower(StockMovementModel.reference).like(f"%{reference.lower()}%"))
        if start_date:
            stmt = stmt.where(StockMovementModel.date >= start_date)
        if end_date:
            stmt = stmt.where(StockMovementModel.date <= end_date)
        return stmt

    def list_movements(self, offset: int, limit: int, **filters):
        stmt = self._filtered(**filters)
        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        rows = self.db.execute(
            stmt.options(selectinload(StockMovementModel.product))
            .order_by(StockMovementModel.date.desc(), StockMovementModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars()
        return list(rows), total

    def balance_through(self, movement: StockMovementModel) -> int:
        """Suma ze znakiem wszystkich ruchow produktu do danego ruchu wlacznie."""
        stmt = select(func.coalesce(func.sum(SIGNED_QUANTITY), 0)).where(
            StockMovementModel.product_id == movement.product_id,
            or_(
                StockMovementModel.date < movement.date,
                and_(StockMovementModel.date == movement.date, StockMovementModel.id <= movement.id),
            ),
        )
        return int(self.db.execute(stmt).scalar_one())

    def ledger_sums(self) -> dict[int, int]:
        rows = self.db.execute(
            select(StockMovementModel.product_id, func.sum(SIGNED_QUANTITY)).group_by(StockMovementModel.product_id)
        ).all()
        return {product_id: int(total or 0) for product_id, total in rows}

    def all_products(self) -> list[ProductModel]:
        return list(self.db.execute(select(ProductModel).order_by(ProductModel.id)).scalars())
