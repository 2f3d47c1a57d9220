"""PlaceOrder: accept an order submitted by the storefront checkout.

The storefront already priced the order, but nothing it sends is trusted:
every line total, the subtotal, the delivery fee and the grand total are
recomputed with ``shared.pricing`` and the order is rejected on any mismatch.
"""

import json
from typing import NamedTuple

from protean.exceptions import ValidationError
from protean.fields import Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from orders.domain import orders
from orders.order.order import Order
from orders.utils.logging import get_logger
from shared.config import load_delivery_policy
from shared.payment import WALLET_METHODS, parse_payment_method
from shared.pricing import DEFAULT_POLICY, cart_subtotal, delivery_fee, line_total, to_amount

logger = get_logger(__name__)


@orders.command(part_of="Order")
class PlaceOrder:
    customer_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=20)
    district = String(required=True, max_length=50)
    thana = String(required=True, max_length=100)
    address = Text(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    subtotal = Integer(required=True, min_value=0)
    delivery_fee = Integer(required=True, min_value=0)
    total = Integer(required=True, min_value=0)
    advance_payment_amount = Integer(min_value=0)
    payment_info = Text()  # JSON: {method, transaction_reference, payment_number}
    special_instructions = Text()


class _Line(NamedTuple):
    unit_price: int
    quantity: int


def _decode(value, field):
    if value is None or not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        raise ValidationError({field: ["Must be valid JSON"]}) from None


def _priced_lines(items) -> list[_Line]:
    if not isinstance(items, list) or not items:
        raise ValidationError({"items": ["An order needs at least one item"]})

    lines = []
    for position, item in enumerate(items, start=1):
        try:
            line = _Line(to_amount(item["unit_price"]), int(item["quantity"]))
        except (KeyError, TypeError, ValueError):
            raise ValidationError({"items": [f"Item {position} needs a numeric unit_price and quantity"]}) from None

        if line.quantity < 1:
            raise ValidationError({"items": [f"Item {position} quantity must be at least 1"]})
        if item.get("line_total") is not None and to_amount(item["line_total"]) != line_total(line):
            raise ValidationError({"items": [f"Item {position} line total does not match unit price times quantity"]})
        lines.append(line)
    return lines


def reconcile_pricing(district, items, subtotal, fee, total, policy=DEFAULT_POLICY) -> None:
    """Raise ``ValidationError`` unless the submitted amounts match a fresh calculation."""
    expected_subtotal = cart_subtotal(_priced_lines(items))
    if subtotal != expected_subtotal:
        raise ValidationError({"subtotal": [f"Subtotal should be {expected_subtotal}"]})

    expected_fee = delivery_fee(district, expected_subtotal, policy)
    if expected_fee is None:
        raise ValidationError({"district": [f"We do not deliver to '{district}'"]})
    if fee != expected_fee:
        raise ValidationError({"delivery_fee": [f"Delivery fee should be {expected_fee}"]})

    if total != expected_subtotal + expected_fee:
        raise ValidationError({"total": [f"Total should be {expected_subtotal + expected_fee}"]})


def check_payment(items, payment_info, advance) -> dict:
    """Normalize ``payment_info`` and enforce the wallet and advance rules."""
    payment_info = dict(payment_info or {})
    try:
        method = parse_payment_method(payment_info.get("method") or "cash_on_delivery")
    except ValueError:
        raise ValidationError({"payment_method": [f"Unknown payment method '{payment_info.get('method')}'"]}) from None
    payment_info["method"] = method.value

    reference = (payment_info.get("transaction_reference") or "").strip()
    if method in WALLET_METHODS and not reference:
        raise ValidationError({"transaction_reference": ["A transaction reference is required for wallet payments"]})

    if any(item.get("customization") for item in items):
        if method not in WALLET_METHODS or not advance:
            raise ValidationError({"payment_method": ["Customized orders need an advance paid by mobile wallet"]})

    return payment_info


@orders.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = _decode(command.items, "items")
        payment_info = _decode(command.payment_info, "payment_info")

        reconcile_pricing(
            command.district,
            items,
            command.subtotal,
            command.delivery_fee,
            command.total,
            policy=load_delivery_policy(),
        )
        payment_info = check_payment(items, payment_info, command.advance_payment_amount)

        order = Order.place(
            customer_name=command.customer_name,
            phone=command.phone,
            district=command.district,
            thana=command.thana,
            address=command.address,
            items=items,
            subtotal=command.subtotal,
            delivery_fee=command.delivery_fee,
            total=command.total,
            payment_info=payment_info,
            advance_payment_amount=command.advance_payment_amount,
            special_instructions=command.special_instructions,
        )
        current_domain.repository_for(Order).add(order)

        logger.info("order_placed", order_id=str(order.id), tracking_id=order.tracking_id, total=order.total)
        return str(order.id)
