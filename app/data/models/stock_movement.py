from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, Text, Numeric, DateTime, CheckConstraint
from sqlalchemy.orm import relationship

from app.data.database import Base


class StockMovementModel(Base):
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    type = Column(String(3), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=True)
    reference = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)

    product = relationship("ProductModel")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movement_quantity_positive"),
        CheckConstraint("type IN ('in', 'out')", name="ck_stock_movement_type"),
    )

    @property
    def signed_quantity(self) -> int:
        return self.quantity if self.type == "in" else -self.quantity

    @property
    def total_value(self):
        return self.quantity * (self.unit_price or 0)
