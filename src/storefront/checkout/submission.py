"""Checkout submission: snapshot the cart, build the payload, POST it.

The cart is cleared only after the order store has accepted the order and
returned a tracking id. Validation failures never reach the network and
transport failures leave the cart exactly as it was.
"""

from typing import NamedTuple

from protean.exceptions import ValidationError

from storefront.checkout.payload import OrderPayload, OrderPayloadBuilder
from storefront.errors import TransportFailure
from storefront.notifications import (
    DEFAULT_WHATSAPP_NUMBER,
    LogNotifier,
    order_summary_message,
    whatsapp_url,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderConfirmation(NamedTuple):
    tracking_id: str
    payload: OrderPayload
    contact_url: str


class CheckoutService:
    def __init__(
        self,
        cart_store,
        client,
        builder: OrderPayloadBuilder | None = None,
        notifier=None,
        whatsapp_number: str = DEFAULT_WHATSAPP_NUMBER,
    ):
        self.cart_store = cart_store
        self.client = client
        self.builder = builder or OrderPayloadBuilder()
        self.notifier = notifier or LogNotifier()
        self.whatsapp_number = whatsapp_number

    @classmethod
    def from_settings(cls, settings, cart_store, client, notifier=None) -> "CheckoutService":
        return cls(
            cart_store,
            client,
            builder=OrderPayloadBuilder.from_settings(settings),
            notifier=notifier,
            whatsapp_number=settings.whatsapp_number,
        )

    async def submit(self, customer, payment=None, region=None) -> OrderConfirmation:
        cart = self.cart_store.snapshot()

        try:
            payload = self.builder.build(cart, customer, region=region, payment=payment)
        except ValidationError as exc:
            logger.info("checkout_rejected", errors=exc.messages)
            self.notifier.notify("অর্ডার সম্পন্ন করা যায়নি", _first_message(exc.messages), "destructive")
            raise

        try:
            tracking_id = await self.client.submit_order(payload)
        except TransportFailure as exc:
            logger.error("checkout_submit_failed", error=str(exc), status_code=exc.status_code)
            self.notifier.notify(
                "অর্ডার পাঠানো যায়নি",
                "আবার চেষ্টা করুন। আপনার কার্ট অপরিবর্তিত আছে।",
                "destructive",
            )
            raise

        self.cart_store.clear()
        logger.info("checkout_completed", tracking_id=tracking_id, total=payload.total)
        self.notifier.notify("অর্ডার সফল হয়েছে!", f"ট্র্যাকিং আইডি: {tracking_id}", "default")

        return OrderConfirmation(
            tracking_id=tracking_id,
            payload=payload,
            contact_url=whatsapp_url(order_summary_message(payload, tracking_id), self.whatsapp_number),
        )


def _first_message(messages) -> str:
    for field_messages in messages.values():
        if isinstance(field_messages, (list, tuple)) and field_messages:
            return str(field_messages[0])
        if field_messages:
            return str(field_messages)
    return ""
