"""Order lifecycle"""

from app.orders.exceptions import (
    AddressNotFound,
    AddressNotOwned,
    DeliveryFeeLocked,
    InvalidOrder,
    InvalidTransition,
    MotoboyNotFound,
    OrderError,
    OrderNotFound,
)
from app.orders.service import OrderService
from app.orders.state_machine import (
    TIMESTAMP_FIELDS,
    TRANSITIONS,
    allowed_transitions,
    can_transition,
    check_transition,
    is_terminal,
)

__all__ = [
    "AddressNotFound",
    "AddressNotOwned",
    "DeliveryFeeLocked",
    "InvalidOrder",
    "InvalidTransition",
    "MotoboyNotFound",
    "OrderError",
    "OrderNotFound",
    "OrderService",
    "TIMESTAMP_FIELDS",
    "TRANSITIONS",
    "allowed_transitions",
    "can_transition",
    "check_transition",
    "is_terminal",
]
