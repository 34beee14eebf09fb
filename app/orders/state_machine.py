"""Order lifecycle transition table.

    pending    -> accepted | cancelled
    accepted   -> preparing | cancelled
    preparing  -> ready | cancelled
    ready      -> dispatched | cancelled
    dispatched -> delivered | cancelled
    delivered, cancelled: terminal

The graph is acyclic with no self-loops, so each state (and its timestamp)
is entered at most once per order. "arrived" is a courier-screen display
hint and is not a persisted state.
"""

from typing import Dict, FrozenSet

from app.models.order import OrderStatus
from app.orders.exceptions import InvalidTransition

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    OrderStatus.PENDING.value: frozenset({OrderStatus.ACCEPTED.value, OrderStatus.CANCELLED.value}),
    OrderStatus.ACCEPTED.value: frozenset({OrderStatus.PREPARING.value, OrderStatus.CANCELLED.value}),
    OrderStatus.PREPARING.value: frozenset({OrderStatus.READY.value, OrderStatus.CANCELLED.value}),
    OrderStatus.READY.value: frozenset({OrderStatus.DISPATCHED.value, OrderStatus.CANCELLED.value}),
    OrderStatus.DISPATCHED.value: frozenset({OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value}),
    OrderStatus.DELIVERED.value: frozenset(),
    OrderStatus.CANCELLED.value: frozenset(),
}

# Column stamped when an order enters each status
TIMESTAMP_FIELDS: Dict[str, str] = {
    OrderStatus.PENDING.value: "created_at",
    OrderStatus.ACCEPTED.value: "accepted_at",
    OrderStatus.PREPARING.value: "preparing_at",
    OrderStatus.READY.value: "ready_at",
    OrderStatus.DISPATCHED.value: "dispatched_at",
    OrderStatus.DELIVERED.value: "delivered_at",
    OrderStatus.CANCELLED.value: "cancelled_at",
}

TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def allowed_transitions(status: str) -> FrozenSet[str]:
    return TRANSITIONS.get(status, frozenset())


def can_transition(current: str, target: str) -> bool:
    return target in allowed_transitions(current)


def check_transition(current: str, target: str) -> None:
    """Raise InvalidTransition unless ``current -> target`` is in the table"""
    if not can_transition(current, target):
        raise InvalidTransition(current, target, allowed_transitions(current))


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES
