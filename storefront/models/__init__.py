"""Models package initialization"""

from .base import Base
from .user import User, UserRole
from .category import Category
from .product import Product, DEFAULT_PRODUCT_IMAGE
from .cart import Cart, CartItem
from .order import Order, OrderItem, OrderStatus, PaymentMethod
from .review import Review

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Category",
    "Product",
    "DEFAULT_PRODUCT_IMAGE",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "Review",
]
