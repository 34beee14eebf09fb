"""Database models"""

from app.models.user import User, UserRole
from app.models.address import Address
from app.models.motoboy import Motoboy
from app.models.order import Order, OrderItem, OrderStatus, OrderType, PaymentMethod
from app.models.store import StoreSettings

__all__ = [
    "User",
    "UserRole",
    "Address",
    "Motoboy",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "PaymentMethod",
    "StoreSettings",
]
