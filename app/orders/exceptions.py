"""Order domain errors"""

from typing import Iterable


class OrderError(Exception):
    """Base class for order errors reported back to the caller"""


class OrderNotFound(OrderError):
    def __init__(self, order_id):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class MotoboyNotFound(OrderError):
    def __init__(self, motoboy_id):
        super().__init__(f"Motoboy {motoboy_id} not found")
        self.motoboy_id = motoboy_id


class InvalidTransition(OrderError):
    """Requested status is not reachable from the current one"""

    def __init__(self, current_status: str, requested_status: str, allowed: Iterable[str]):
        self.current_status = current_status
        self.requested_status = requested_status
        self.allowed = sorted(allowed)
        super().__init__(
            f"Cannot move order from {current_status} to {requested_status}"
        )

    def to_dict(self) -> dict:
        return {
            "error": "invalid_transition",
            "message": (
                f"O pedido já está em '{self.current_status}' e não pode ir para "
                f"'{self.requested_status}'. Atualize a tela e tente novamente."
            ),
            "current_status": self.current_status,
            "requested_status": self.requested_status,
            "allowed": self.allowed,
        }


class DeliveryFeeLocked(OrderError):
    """The single delivery fee correction was already used, or the order is closed"""

    def __init__(self, order_id, reason: str):
        super().__init__(reason)
        self.order_id = order_id
        self.reason = reason


class AddressNotFound(OrderError):
    def __init__(self, address_id):
        super().__init__(f"Address {address_id} not found")
        self.address_id = address_id


class AddressNotOwned(OrderError):
    """Customer tried to order to someone else's address"""

    def __init__(self, address_id):
        super().__init__(f"Address {address_id} belongs to another customer")
        self.address_id = address_id


class InvalidOrder(OrderError):
    """Order input that validates field by field but not as a whole"""
