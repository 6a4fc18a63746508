from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, LargeBinary, ForeignKey, DateTime
from sqlalchemy.orm import relationship, deferred

from app.data.database import Base


class ProductImageModel(Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String(500), nullable=False)
    #binarka ladowana tylko na zadanie
    data = deferred(Column(LargeBinary, nullable=True))
    content_type = Column(String(100), nullable=True)
    #co najwyzej jedno True na produkt, pilnowane przez serwis (reset + set)
    is_primary = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    product = relationship("ProductModel", back_populates="images")
