"""Order aggregate (CQRS): the order store's record of a placed order.

Status follows the shared machine in ``shared.status``:

    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from any non-terminal state)

Items, payment info and notes are kept as JSON text; the accessors below
decode them for callers.
"""

import json
import secrets
import time
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String, Text

from orders.domain import orders
from orders.order.events import OrderNoteAppended, OrderPlaced, OrderStatusChanged
from shared.phone import is_valid_bd_mobile, normalize_phone
from shared.regions import find_region
from shared.status import OrderStatus, is_terminal, transition


def generate_tracking_id() -> str:
    """``TRK`` + epoch milliseconds + four uppercase hex characters."""
    return f"TRK{int(time.time() * 1000)}{secrets.token_hex(2).upper()}"


@orders.aggregate
class Order:
    """An order as accepted from the storefront checkout."""

    tracking_id = String(required=True, max_length=40, unique=True)

    # Customer
    customer_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=20)
    district = String(required=True, max_length=50)
    thana = String(required=True, max_length=100)
    address = Text(required=True)
    special_instructions = Text()

    # Contents and money, whole taka
    items = Text(required=True)  # JSON: list of item dicts
    subtotal = Integer(required=True, min_value=0)
    delivery_fee = Integer(default=0, min_value=0)
    total = Integer(required=True, min_value=0)
    advance_payment_amount = Integer(min_value=0)
    payment_info = Text()  # JSON: {method, transaction_reference, payment_number}

    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    notes = Text()  # JSON: list of timestamped strings

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def total_is_subtotal_plus_delivery(self):
        if self.subtotal is not None and self.total is not None:
            if self.subtotal + (self.delivery_fee or 0) != self.total:
                raise ValidationError({"total": ["Total must equal subtotal plus delivery fee"]})

    @invariant.post
    def advance_cannot_exceed_total(self):
        if self.advance_payment_amount is not None and self.total is not None:
            if self.advance_payment_amount > self.total:
                raise ValidationError({"advance_payment_amount": ["Advance cannot exceed the order total"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_name,
        phone,
        district,
        thana,
        address,
        items,
        subtotal,
        delivery_fee,
        total,
        payment_info=None,
        advance_payment_amount=None,
        special_instructions=None,
        tracking_id=None,
    ):
        """Record a new order in PENDING status.

        ``items`` is a list of dicts and ``payment_info`` a dict; both are
        stored as JSON. The phone must be a Bangladeshi mobile number and the
        district one we deliver to.
        """
        phone = normalize_phone(phone)
        if not is_valid_bd_mobile(phone):
            raise ValidationError({"phone": ["Enter a valid Bangladeshi mobile number"]})

        region = find_region(district)
        if region is None:
            raise ValidationError({"district": [f"We do not deliver to '{district}'"]})

        if not items:
            raise ValidationError({"items": ["An order needs at least one item"]})

        payment_info = payment_info or {"method": "cash_on_delivery"}
        now = datetime.now(UTC)

        order = cls(
            tracking_id=tracking_id or generate_tracking_id(),
            customer_name=customer_name,
            phone=phone,
            district=region.name,
            thana=thana,
            address=address,
            special_instructions=special_instructions,
            items=json.dumps(items, ensure_ascii=False),
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=total,
            advance_payment_amount=advance_payment_amount,
            payment_info=json.dumps(payment_info, ensure_ascii=False),
            status=OrderStatus.PENDING.value,
            notes=json.dumps([]),
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                tracking_id=order.tracking_id,
                customer_name=customer_name,
                phone=phone,
                district=region.name,
                items=order.items,
                subtotal=subtotal,
                delivery_fee=delivery_fee,
                total=total,
                advance_payment_amount=advance_payment_amount,
                payment_method=payment_info.get("method", "cash_on_delivery"),
                placed_at=now,
            )
        )

        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    def change_status(self, requested):
        """Move to ``requested``. Raises ``IllegalTransition`` and leaves the order untouched otherwise."""
        previous = self.current_status
        new_status = transition(previous, requested)

        now = datetime.now(UTC)
        self.status = new_status.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                tracking_id=self.tracking_id,
                previous_status=previous.value,
                new_status=new_status.value,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------
    def append_note(self, text):
        text = (text or "").strip()
        if not text:
            raise ValidationError({"note": ["Note cannot be empty"]})

        now = datetime.now(UTC)
        entry = f"[{now.isoformat(timespec='seconds')}] {text}"

        self.notes = json.dumps([*self.note_list(), entry], ensure_ascii=False)
        self.updated_at = now

        self.raise_(
            OrderNoteAppended(
                order_id=str(self.id),
                note=entry,
                appended_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Decoded views
    # -------------------------------------------------------------------
    def item_list(self) -> list[dict]:
        return json.loads(self.items) if self.items else []

    def payment(self) -> dict:
        return json.loads(self.payment_info) if self.payment_info else {}

    def note_list(self) -> list[str]:
        return json.loads(self.notes) if self.notes else []
