"""
Order lifecycle state machine. Valid transitions enforce business rules;
the database enforces them again through the WHERE clause of each update.
"""
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in-progress"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class FuelType(str, Enum):
    PETROL = "petrol"
    DIESEL = "diesel"
    CNG = "cng"


# An agent holding an order in one of these is not available for assignment
ACTIVE_STATES = (OrderStatus.ACCEPTED, OrderStatus.IN_PROGRESS)

TERMINAL_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

# Current state -> allowed next states. in-progress -> accepted is the
# agent-reject edge; accepted -> accepted is the dealer assigning an agent.
VALID_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.ACCEPTED, OrderStatus.CANCELLED}),
    OrderStatus.ACCEPTED: frozenset({OrderStatus.ACCEPTED, OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.ACCEPTED, OrderStatus.DELIVERED}),
}
VALID_TRANSITIONS.update({state: frozenset() for state in TERMINAL_STATES})


def is_valid_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """True if new is allowed after current."""
    return new in VALID_TRANSITIONS.get(current, frozenset())
