"""Toast notifications and WhatsApp deep links.

The storefront only knows the call contracts here; rendering a toast is the
UI's business. ``LogNotifier`` is the default surface and simply logs.
"""

from typing import Protocol
from urllib.parse import quote

from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_WHATSAPP_NUMBER = "+8801940689487"


class Notifier(Protocol):
    def notify(self, title: str, description: str = "", variant: str = "default") -> None: ...


class LogNotifier:
    def notify(self, title: str, description: str = "", variant: str = "default") -> None:
        if variant == "destructive":
            logger.warning("toast", title=title, description=description, variant=variant)
        else:
            logger.info("toast", title=title, description=description, variant=variant)


class RecordingNotifier:
    """Keeps every toast in memory. Handy for tests and for headless runs."""

    def __init__(self):
        self.messages: list[tuple[str, str, str]] = []

    def notify(self, title: str, description: str = "", variant: str = "default") -> None:
        self.messages.append((title, description, variant))

    @property
    def titles(self) -> list[str]:
        return [title for title, _, _ in self.messages]


def whatsapp_url(message: str, number: str = DEFAULT_WHATSAPP_NUMBER) -> str:
    digits = "".join(ch for ch in number if ch.isdigit())
    return f"https://wa.me/{digits}?text={quote(message, safe='')}"


def order_summary_message(payload, tracking_id: str | None = None) -> str:
    """WhatsApp text summarising an order, sent to the shop after checkout."""
    lines = ["আসসালামু আলাইকুম, আমি একটি অর্ডার করেছি।"]
    if tracking_id:
        lines.append(f"ট্র্যাকিং আইডি: {tracking_id}")
    lines.append(f"নাম: {payload.customer_name}")
    lines.append(f"ফোন: {payload.phone}")
    lines.append(f"ঠিকানা: {payload.address}, {payload.thana}, {payload.district}")
    lines.append("")
    for item in payload.items:
        lines.append(f"- {item.name} x{item.quantity} = ৳{item.line_total}")
        if item.customization is not None:
            for axis, value in item.customization.axes().items():
                if axis == "uploaded_image_refs":
                    value = f"{len(value)} ছবি"
                lines.append(f"  {axis}: {value}")
    lines.append("")
    lines.append(f"সাবটোটাল: ৳{payload.subtotal}")
    lines.append(f"ডেলিভারি চার্জ: ৳{payload.delivery_fee}")
    lines.append(f"মোট: ৳{payload.total}")
    if payload.advance_payment_amount:
        lines.append(f"অগ্রিম: ৳{payload.advance_payment_amount}")
    lines.append(f"ডেলিভারিতে পরিশোধ: ৳{payload.remaining_on_delivery}")
    return "\n".join(lines)


def product_inquiry_message(name: str, price, url: str | None = None) -> str:
    message = f"আমি এই পণ্যটি সম্পর্কে জানতে চাই: {name} (৳{price})"
    if url:
        message += f"\n{url}"
    return message
