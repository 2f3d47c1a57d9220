"""Order status state machine shared by the storefront and the order store.

State Machine (6 states):
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from PENDING, CONFIRMED, PROCESSING, SHIPPED)

DELIVERED and CANCELLED are terminal. Customer tracking, the admin console
and the ``Order`` aggregate all consult this table; none of them keeps its
own copy.
"""

from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),  # Terminal
    OrderStatus.CANCELLED: frozenset(),  # Terminal
}

TERMINAL_STATES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)

# The forward path, in order. Used for progress display.
FULFILMENT_PATH = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)


class IllegalTransition(Exception):
    """Requested status is not reachable from the current one."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition from {_value(current)} to {_value(requested)}")


def _value(status):
    return status.value if isinstance(status, OrderStatus) else str(status)


def parse_status(value) -> OrderStatus:
    """Coerce a status name (any case) or an ``OrderStatus`` into an ``OrderStatus``.

    Raises ``ValueError`` for anything outside the closed set.
    """
    if isinstance(value, OrderStatus):
        return value
    if isinstance(value, str):
        try:
            return OrderStatus(value.strip().lower())
        except ValueError:
            pass
    raise ValueError(f"Unknown order status: {value!r}")


def allowed_transitions(current) -> frozenset:
    return _VALID_TRANSITIONS[parse_status(current)]


def can_transition(current, requested) -> bool:
    try:
        return parse_status(requested) in allowed_transitions(current)
    except ValueError:
        return False


def is_terminal(status) -> bool:
    return parse_status(status) in TERMINAL_STATES


def transition(current, requested) -> OrderStatus:
    """Return the new state if ``requested`` is reachable from ``current``.

    Raises ``IllegalTransition`` otherwise; nothing is mutated either way.
    """
    current_status = parse_status(current)
    try:
        requested_status = parse_status(requested)
    except ValueError:
        raise IllegalTransition(current_status, requested) from None

    if requested_status not in _VALID_TRANSITIONS[current_status]:
        raise IllegalTransition(current_status, requested_status)
    return requested_status
