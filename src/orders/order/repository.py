"""Repository for the Order aggregate with the store's read queries."""

from orders.domain import orders
from orders.order.order import Order
from shared.status import parse_status


@orders.repository(part_of=Order)
class OrderRepository:
    def find_by_tracking_id(self, tracking_id: str) -> Order | None:
        return self._dao.query.filter(tracking_id=tracking_id).all().first

    def list_orders(self, status=None) -> list[Order]:
        """All orders, newest first, optionally narrowed to one status."""
        query = self._dao.query
        if status is not None:
            query = query.filter(status=parse_status(status).value)
        return sorted(query.all().items, key=lambda order: order.created_at, reverse=True)
