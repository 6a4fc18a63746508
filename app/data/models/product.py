from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, DateTime
from sqlalchemy.orm import relationship

from app.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    size = Column(String(20), nullable=True)
    description = Column(Text, nullable=False)

    has_versions = Column(Boolean, nullable=False, default=False)
    price_fan = Column(Numeric(12, 2), nullable=False, default=0)
    price_player = Column(Numeric(12, 2), nullable=False, default=0)

    has_customization = Column(Boolean, nullable=False, default=False)
    customization_details = Column(Text, nullable=True)

    #licznik utrzymywany wylacznie przez ledger ruchow magazynowych
    stock_quantity = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    images = relationship(
        "ProductImageModel",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImageModel.position",
    )
