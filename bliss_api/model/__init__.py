# ------ bliss_api/model/__init__.py ------

from .category import Category
from .product import Product, ProductVariant
from .topping import Topping
from .order import Order, OrderItem, OrderItemTopping
from .checkout_attempt import CheckoutAttempt
from .admin import AdminUser

__all__ = [
    "Category",
    "Product",
    "ProductVariant",
    "Topping",
    "Order",
    "OrderItem",
    "OrderItemTopping",
    "CheckoutAttempt",
    "AdminUser",
]
