"""Turn a cart snapshot and checkout details into an order payload.

Validation runs in a fixed order and stops at the first failure:

1. the cart has at least one line,
2. customer name, phone, district, thana and address are present,
3. the phone is a Bangladeshi mobile number,
4. wallet payments carry a transaction reference,
5. the district is one we deliver to,
6. carts with customized lines carry an advance paid by mobile wallet.

Totals are always recomputed from the lines with ``shared.pricing``; the cart
itself is never touched.
"""

from protean.exceptions import ValidationError
from pydantic import BaseModel, ConfigDict, Field

from shared.payment import PaymentMethod
from shared.phone import BD_MOBILE_PATTERN, normalize_phone
from shared.pricing import (
    DEFAULT_POLICY,
    DeliveryPolicy,
    advance_split,
    cart_subtotal,
    delivery_fee,
    line_total,
    remaining_on_delivery,
)
from shared.regions import find_region
from storefront.cart.customization import Customization

DEFAULT_CUSTOM_ORDER_ADVANCE = 100

_REQUIRED_CUSTOMER_FIELDS = ("name", "phone", "district", "thana", "address")


class CustomerDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    phone: str | None = None
    district: str | None = None
    thana: str | None = None
    address: str | None = None
    special_instructions: str | None = None


class PaymentChoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY
    transaction_reference: str | None = None
    payment_number: str | None = None
    advance_amount: int | None = Field(default=None, ge=0)

    @property
    def is_cash_on_delivery(self) -> bool:
        return self.method == PaymentMethod.CASH_ON_DELIVERY


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    unit_price: int
    quantity: int
    line_total: int
    image_url: str | None = None
    customization: Customization | None = None


class PaymentInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str
    transaction_reference: str | None = None
    payment_number: str | None = None


class OrderPayload(BaseModel):
    """The order exactly as it is submitted to the order store."""

    model_config = ConfigDict(frozen=True)

    customer_name: str
    phone: str
    district: str
    thana: str
    address: str
    items: tuple[OrderItem, ...]
    subtotal: int
    delivery_fee: int
    total: int
    advance_payment_amount: int | None = None
    remaining_on_delivery: int
    payment_info: PaymentInfo
    special_instructions: str | None = None

    def to_request(self) -> dict:
        return self.model_dump(mode="json")


class OrderPayloadBuilder:
    def __init__(
        self,
        policy: DeliveryPolicy = DEFAULT_POLICY,
        custom_order_advance: int = DEFAULT_CUSTOM_ORDER_ADVANCE,
    ):
        self.policy = policy
        self.custom_order_advance = custom_order_advance

    @classmethod
    def from_settings(cls, settings) -> "OrderPayloadBuilder":
        return cls(
            policy=settings.delivery_policy(),
            custom_order_advance=settings.custom_order_advance,
        )

    def build(self, cart, customer: CustomerDetails, region=None, payment: PaymentChoice | None = None) -> OrderPayload:
        """Validate and assemble an ``OrderPayload``.

        ``region`` overrides the district selected in ``customer``; when it is
        ``None`` the customer's district is used. Raises ``ValidationError``.
        """
        lines = tuple(cart.lines)
        payment = payment or PaymentChoice()

        if not lines:
            raise ValidationError({"cart": ["Cart is empty"]})

        missing = [field for field in _REQUIRED_CUSTOMER_FIELDS if not _present(getattr(customer, field))]
        if missing:
            raise ValidationError({field: ["This field is required"] for field in missing})

        phone = normalize_phone(customer.phone)
        if not BD_MOBILE_PATTERN.match(phone):
            raise ValidationError({"phone": ["Enter a valid Bangladeshi mobile number, e.g. 01712345678"]})

        if not payment.is_cash_on_delivery and not _present(payment.transaction_reference):
            raise ValidationError({"transaction_reference": ["A transaction reference is required for wallet payments"]})

        delivery_region = find_region(region if region is not None else customer.district)
        if delivery_region is None:
            raise ValidationError({"district": ["Select a district we deliver to"]})

        subtotal = cart_subtotal(lines)
        fee = delivery_fee(delivery_region, subtotal, self.policy)
        total = subtotal + fee

        advance = None
        if any(line.customization is not None for line in lines):
            if payment.is_cash_on_delivery:
                raise ValidationError({"payment_method": ["Customized orders need an advance paid by mobile wallet"]})
            requested = payment.advance_amount if payment.advance_amount is not None else self.custom_order_advance
            advance = advance_split(total, requested).advance
            if advance < 1:
                raise ValidationError({"advance_payment_amount": ["Customized orders need an advance of at least 1 taka"]})
        elif payment.advance_amount:
            advance = advance_split(total, payment.advance_amount).advance

        return OrderPayload(
            customer_name=customer.name.strip(),
            phone=phone,
            district=delivery_region.name,
            thana=customer.thana.strip(),
            address=customer.address.strip(),
            items=tuple(
                OrderItem(
                    product_id=line.product_id,
                    name=line.name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    line_total=line_total(line),
                    image_url=line.image_url,
                    customization=line.customization,
                )
                for line in lines
            ),
            subtotal=subtotal,
            delivery_fee=fee,
            total=total,
            advance_payment_amount=advance,
            remaining_on_delivery=remaining_on_delivery(subtotal, fee, advance or 0),
            payment_info=PaymentInfo(
                method=payment.method.value,
                transaction_reference=_clean(payment.transaction_reference),
                payment_number=_clean(payment.payment_number),
            ),
            special_instructions=_clean(customer.special_instructions),
        )


def _present(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _clean(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


def build_order_payload(cart, customer, region=None, payment=None) -> OrderPayload:
    return OrderPayloadBuilder().build(cart, customer, region, payment)
