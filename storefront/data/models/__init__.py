#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w Base.metadata

from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.favorite import FavoriteModel
from storefront.data.models.order import OrderModel
from storefront.data.models.payment_verification import PaymentVerificationModel
from storefront.data.models.order_status_history import OrderStatusHistoryModel

__all__ = [
    "ProductModel",
    "UserModel",
    "CartItemModel",
    "FavoriteModel",
    "OrderModel",
    "PaymentVerificationModel",
    "OrderStatusHistoryModel",
]
