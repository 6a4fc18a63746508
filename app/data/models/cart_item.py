from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, JSON, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship

from app.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False, default=1)
    #cena z chwili dodania, pozniej juz nie czytana z produktu
    price = Column(Numeric(12, 2), nullable=False)

    size = Column(String(20), nullable=True)
    type = Column(String(50), nullable=True)
    customization = Column(JSON, nullable=True)
    customization_fee = Column(Numeric(12, 2), nullable=False, default=0)
    variant_key = Column(String(64), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    cart = relationship("CartModel", back_populates="items")
    product = relationship("ProductModel")

    __table_args__ = (UniqueConstraint("cart_id", "product_id", "variant_key", name="u_cart_product_variant"),)
