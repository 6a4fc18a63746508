from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, JSON
from sqlalchemy.orm import relationship

from app.data.database import Base


class OrderItemModel(Base):
    """Pelna kopia pozycji z chwili zamowienia, bez relacji do produktu."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)

    product_name = Column(String(255), nullable=False)
    product_image = Column(String(500), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    size = Column(String(20), nullable=True)
    type = Column(String(50), nullable=True)
    customization = Column(JSON, nullable=True)
    customization_fee = Column(Numeric(12, 2), nullable=False, default=0)

    order = relationship("OrderModel", back_populates="items")
