"""Admin console actions over the order store.

Status changes are checked against the shared state machine before any
request goes out; the order store checks again and remains the authority.
After a successful change the order is re-fetched so the console never shows
a locally guessed status.
"""

from protean.exceptions import ValidationError

from shared.status import OrderStatus, allowed_transitions, transition
from storefront.notifications import LogNotifier
from storefront.tracking.resolver import TrackedOrder, normalize_order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class AdminConsole:
    def __init__(self, client, notifier=None):
        self.client = client
        self.notifier = notifier or LogNotifier()

    async def fetch(self, order_id: str) -> TrackedOrder:
        return normalize_order(await self.client.fetch_order(order_id))

    async def list_orders(self, status=None) -> list[TrackedOrder]:
        return [normalize_order(raw) for raw in await self.client.list_orders(status)]

    def available_transitions(self, order: TrackedOrder) -> list[OrderStatus]:
        """Statuses the admin may pick next, in enum order."""
        allowed = allowed_transitions(order.status)
        return [status for status in OrderStatus if status in allowed]

    async def change_status(self, order_id: str, requested) -> TrackedOrder:
        current = await self.fetch(order_id)
        new_status = transition(current.status, requested)

        await self.client.request_status_change(order_id, new_status)
        updated = await self.fetch(order_id)

        logger.info("order_status_changed", order_id=order_id, from_status=current.status.value, to_status=new_status.value)
        self.notifier.notify("স্ট্যাটাস আপডেট হয়েছে", f"{current.tracking_id}: {updated.status_label}", "default")
        return updated

    async def add_note(self, order_id: str, note: str) -> TrackedOrder:
        note = (note or "").strip()
        if not note:
            raise ValidationError({"note": ["Note cannot be empty"]})

        await self.client.append_note(order_id, note)
        return await self.fetch(order_id)
