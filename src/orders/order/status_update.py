"""UpdateOrderStatus and AppendOrderNote: admin actions on a placed order."""

from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from orders.domain import orders
from orders.order.order import Order
from orders.utils.logging import get_logger

logger = get_logger(__name__)


@orders.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@orders.command(part_of="Order")
class AppendOrderNote:
    order_id = Identifier(required=True)
    note = Text(required=True)


@orders.command_handler(part_of=Order)
class OrderAdministrationHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status

        order.change_status(command.status)
        repo.add(order)

        logger.info("order_status_updated", order_id=str(order.id), from_status=previous, to_status=order.status)

    @handle(AppendOrderNote)
    def append_note(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.append_note(command.note)
        repo.add(order)
