# app/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.enums import (
    DeliveryType,
    MovementType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProductSize,
    UserRole,
)

T = TypeVar("T")


# =====================================================
# KOPERTA ODPOWIEDZI
# =====================================================
class ApiResponse(BaseModel, Generic[T]):
    """{ success, message, data } dla kazdej udanej odpowiedzi."""

    success: bool = True
    message: str = "OK"
    data: Optional[T] = None


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    total_pages: int


class Principal(BaseModel):
    """Uwierzytelniony uzytkownik z tokenu, ufamy mu bez dalszej weryfikacji."""

    id: int
    role: UserRole = UserRole.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


# =====================================================
# USERS
# =====================================================
class UserCreate(BaseModel):
    """Schema dla tworzenia uzytkownika."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$")
    phone: str = Field(..., min_length=3, max_length=30)
    role: UserRole = UserRole.CUSTOMER

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# CATALOG
# =====================================================
class ProductImageIn(BaseModel):
    """Obraz jako URL albo binarka w base64 (+ content_type)."""

    url: Optional[str] = Field(None, max_length=500)
    data_base64: Optional[str] = None
    content_type: Optional[str] = Field(None, max_length=100)


class ProductImageOut(BaseModel):
    id: int
    url: str
    content_type: Optional[str] = None
    is_primary: bool
    position: int

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    size: Optional[ProductSize] = None
    description: str = Field(..., min_length=1)
    has_versions: bool = False
    price_fan: Decimal = Field(Decimal("0"), ge=0)
    price_player: Decimal = Field(Decimal("0"), ge=0)
    has_customization: bool = False
    customization_details: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    size: Optional[ProductSize] = None
    description: Optional[str] = Field(None, min_length=1)
    has_versions: Optional[bool] = None
    price_fan: Optional[Decimal] = Field(None, ge=0)
    price_player: Optional[Decimal] = Field(None, ge=0)
    has_customization: Optional[bool] = None
    customization_details: Optional[str] = None


class ProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    category: str
    size: Optional[str] = None
    description: str
    has_versions: bool
    price_fan: Decimal
    price_player: Decimal
    has_customization: bool
    customization_details: Optional[str] = None
    stock_quantity: int
    is_active: bool
    images: List[ProductImageOut] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)


class CategoryOut(BaseModel):
    id: int
    name: str
    slug: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BadgeIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    icon: Optional[str] = None
    description: Optional[str] = None


class BadgeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    icon: Optional[str] = None
    description: Optional[str] = None


class BadgeOut(BaseModel):
    id: int
    name: str
    slug: str
    icon: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


def _split_tags(v: Any) -> Any:
    if isinstance(v, str):
        return [t.strip() for t in v.split(",") if t.strip()]
    return v


class BlogCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: str = Field(..., min_length=1)
    author: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    tags: List[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return _split_tags(v)


class BlogUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None
    excerpt: Optional[str] = None
    author: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return _split_tags(v)


class BlogOut(BaseModel):
    id: int
    title: str
    slug: str
    content: str
    excerpt: str
    author: str
    image_url: Optional[str] = None
    tags: List[str]
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# CART
# =====================================================
class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, ge=1)
    size: Optional[str] = Field(None, max_length=20)
    type: Optional[str] = Field(None, max_length=50)
    customization: Optional[Any] = None
    customization_fee: Decimal = Field(Decimal("0"), ge=0)


class QuantityIn(BaseModel):
    #quantity < 1 usuwa pozycje
    quantity: int


class CartProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    category: str
    image: Optional[str] = None
    is_active: bool


class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: Decimal
    size: Optional[str] = None
    type: Optional[str] = None
    customization: Optional[Any] = None
    customization_fee: Decimal
    line_total: Decimal
    available: bool = True
    product: Optional[CartProductOut] = None


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    id: int
    user_id: int
    status: str
    items: List[CartItemOut]
    total_amount: Decimal
    unavailable_count: int = 0


# =====================================================
# ORDERS
# =====================================================
class OrderCreate(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=100)
    customer_phone: str = Field(..., min_length=3, max_length=30)
    customer_email: Optional[str] = Field(None, max_length=255)
    delivery_type: DeliveryType = DeliveryType.DELIVERY
    delivery_zone: Optional[str] = Field(None, max_length=100)
    delivery_address: Optional[str] = None
    delivery_fee: Decimal = Field(Decimal("0"), ge=0)
    payment_method: PaymentMethod
    payment_phone: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    payment_status: Optional[PaymentStatus] = None
    transaction_id: Optional[str] = Field(None, max_length=100)
    order_status: Optional[OrderStatus] = None


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    product_image: Optional[str] = None
    quantity: int
    price: Decimal
    subtotal: Decimal
    size: Optional[str] = None
    type: Optional[str] = None
    customization: Optional[Any] = None
    customization_fee: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamowienia (response)."""

    id: int
    user_id: int
    order_number: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    delivery_type: DeliveryType
    delivery_zone: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_fee: Decimal
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    payment_phone: Optional[str] = None
    transaction_id: Optional[str] = None
    order_status: OrderStatus
    notes: Optional[str] = None
    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# STOCK
# =====================================================
class StockMovementIn(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    type: MovementType
    unit_price: Optional[Decimal] = Field(None, ge=0)
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class StockMovementUpdate(BaseModel):
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class StockMovementOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    type: MovementType
    unit_price: Optional[Decimal] = None
    total_value: Decimal
    reference: Optional[str] = None
    notes: Optional[str] = None
    date: datetime


class StockHistoryOut(StockMovementOut):
    running_balance: int


class StockLevelOut(BaseModel):
    id: int
    name: str
    stock_quantity: int


class StockDiscrepancyOut(BaseModel):
    id: int
    name: str
    stock_quantity: int
    ledger_quantity: int
