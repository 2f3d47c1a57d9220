"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from orders.domain import orders


@orders.event(part_of="Order")
class OrderPlaced:
    """A customer submitted an order at checkout and the store accepted it."""

    __version__ = 1

    order_id = Identifier(required=True)
    tracking_id = String(required=True)
    customer_name = String(required=True)
    phone = String(required=True)
    district = String(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    subtotal = Integer(required=True)
    delivery_fee = Integer(required=True)
    total = Integer(required=True)
    advance_payment_amount = Integer()
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@orders.event(part_of="Order")
class OrderStatusChanged:
    """Staff moved the order to the next status, or cancelled it."""

    __version__ = 1

    order_id = Identifier(required=True)
    tracking_id = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@orders.event(part_of="Order")
class OrderNoteAppended:
    """An admin note was added to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    note = Text(required=True)
    appended_at = DateTime(required=True)
