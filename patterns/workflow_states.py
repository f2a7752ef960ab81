"""Enum-based order status lifecycle.

Statuses only move forward. In the current scope an order header is written
once, already advanced from ``created`` to ``success``; a failed placement
rolls back before anything is persisted, so ``failed`` is never stored.
"""

from enum import Enum


# ---------------------------------------------------------------------------
# State definitions
# ---------------------------------------------------------------------------

class OrderStatus(str, Enum):
    """Order lifecycle states."""

    CREATED = "created"
    SUCCESS = "success"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Transition rules
# ---------------------------------------------------------------------------

# Allowed transitions: {current_state: [allowed_next_states]}
_ORDER_TRANSITIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.CREATED: [OrderStatus.SUCCESS, OrderStatus.FAILED],
    OrderStatus.SUCCESS: [],  # terminal
    OrderStatus.FAILED: [],   # terminal
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Check if a transition is allowed from the current state."""
    return target in _ORDER_TRANSITIONS.get(current, [])


def advance(current: OrderStatus, target: OrderStatus) -> OrderStatus:
    """Return ``target`` if reachable from ``current``.

    Raises ValueError if the transition is not allowed.
    """
    if not can_transition(current, target):
        allowed = [s.value for s in _ORDER_TRANSITIONS.get(current, [])]
        raise ValueError(
            f"Cannot transition from {current.value} to {target.value}. "
            f"Allowed: {allowed}"
        )
    return target


def is_terminal(status: OrderStatus) -> bool:
    return len(_ORDER_TRANSITIONS.get(status, [])) == 0
