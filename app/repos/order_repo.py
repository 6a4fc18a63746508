# app/repos/order_repo.py
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id).options(selectinload(OrderModel.items))
        ).scalar_one_or_none()

    def get_order_for_update(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id).with_for_update()
        ).scalar_one_or_none()

    def order_number_exists(self, order_number: str) -> bool:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.order_number == order_number).limit(1)
        ).first() is not None

    def list_by_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .options(selectinload(OrderModel.items))
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def list_orders(
        self,
        offset: int,
        limit: int,
        order_status: str | None = None,
        payment_status: str | None = None,
        user_id: int | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ):
        stmt = select(OrderModel)
        if order_status:
            stmt = stmt.where(OrderModel.order_status == order_status)
        if payment_status:
            stmt = stmt.where(OrderModel.payment_status == payment_status)
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if start_date:
            stmt = stmt.where(OrderModel.created_at >= start_date)
        if end_date:
            stmt = stmt.where(OrderModel.created_at <= end_date)

        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        rows = self.db.execute(
            stmt.options(selectinload(OrderModel.items))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars()
        return list(rows), total

    def delete_order(self, order: OrderModel) -> None:
        self.db.delete(order)
        self.db.flush()
