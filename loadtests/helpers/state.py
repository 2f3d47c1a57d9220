"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; nothing is shared between
users.
"""

from dataclasses import dataclass, field


@dataclass
class OrderState:
    """Tracks a single order from checkout through fulfilment."""

    order_id: str | None = None
    tracking_id: str | None = None
    current_status: str = "pending"
    notes: list[str] = field(default_factory=list)
