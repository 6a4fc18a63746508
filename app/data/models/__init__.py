#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from app.data.models.user import UserModel
from app.data.models.category import CategoryModel
from app.data.models.badge import BadgeModel
from app.data.models.blog import BlogModel
from app.data.models.product import ProductModel
from app.data.models.product_image import ProductImageModel
from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.data.models.stock_movement import StockMovementModel

__all__ = [
    "UserModel",
    "CategoryModel",
    "BadgeModel",
    "BlogModel",
    "ProductModel",
    "ProductImageModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "StockMovementModel",
]
