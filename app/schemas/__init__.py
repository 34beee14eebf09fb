"""Pydantic schemas for request/response validation"""

from app.schemas.auth import (
    Token,
    LoginRequest,
    WhatsappLoginRequest,
    UserCreate,
    UserResponse,
)
from app.schemas.address import (
    AddressCreate,
    AddressUpdate,
    AddressResponse,
)
from app.schemas.motoboy import (
    MotoboyCreate,
    MotoboyUpdate,
    MotoboyResponse,
)
from app.schemas.order import (
    OrderCreate,
    OrderItemCreate,
    OrderStatusUpdate,
    OrderAssign,
    DeliveryFeeUpdate,
    OrderResponse,
    OrderItemResponse,
)
from app.schemas.delivery import (
    DeliveryCalculateRequest,
    DeliveryCalculateResponse,
    ZoneResponse,
)
from app.schemas.store import (
    StoreSettingsUpdate,
    StoreSettingsResponse,
)

__all__ = [
    "Token",
    "LoginRequest",
    "WhatsappLoginRequest",
    "UserCreate",
    "UserResponse",
    "AddressCreate",
    "AddressUpdate",
    "AddressResponse",
    "MotoboyCreate",
    "MotoboyUpdate",
    "MotoboyResponse",
    "OrderCreate",
    "OrderItemCreate",
    "OrderStatusUpdate",
    "OrderAssign",
    "DeliveryFeeUpdate",
    "OrderResponse",
    "OrderItemResponse",
    "DeliveryCalculateRequest",
    "DeliveryCalculateResponse",
    "ZoneResponse",
    "StoreSettingsUpdate",
    "StoreSettingsResponse",
]
