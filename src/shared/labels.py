"""Display lookups for order statuses.

Pure data: labels, descriptions and icon categories per status, plus the
customer-facing progress timeline. Transition rules live in ``shared.status``.
"""

from typing import NamedTuple

from shared.status import FULFILMENT_PATH, OrderStatus, parse_status


class StatusDisplay(NamedTuple):
    label_bn: str
    label_en: str
    description_bn: str
    icon: str
    category: str


STATUS_DISPLAY = {
    OrderStatus.PENDING: StatusDisplay(
        label_bn="অপেক্ষমান",
        label_en="Pending",
        description_bn="আপনার অর্ডার গ্রহণ করা হয়েছে এবং যাচাই করা হচ্ছে",
        icon="clock",
        category="warning",
    ),
    OrderStatus.CONFIRMED: StatusDisplay(
        label_bn="নিশ্চিত",
        label_en="Confirmed",
        description_bn="আপনার অর্ডার নিশ্চিত হয়েছে এবং প্রস্তুতি শুরু হয়েছে",
        icon="check-circle-2",
        category="info",
    ),
    OrderStatus.PROCESSING: StatusDisplay(
        label_bn="প্রক্রিয়াধীন",
        label_en="Processing",
        description_bn="আপনার পণ্য তৈরি/প্যাকেজিং করা হচ্ছে",
        icon="package",
        category="info",
    ),
    OrderStatus.SHIPPED: StatusDisplay(
        label_bn="পাঠানো হয়েছে",
        label_en="Shipped",
        description_bn="আপনার পণ্য ডেলিভারির জন্য পাঠানো হয়েছে",
        icon="truck",
        category="info",
    ),
    OrderStatus.DELIVERED: StatusDisplay(
        label_bn="ডেলিভার হয়েছে",
        label_en="Delivered",
        description_bn="আপনার পণ্য সফলভাবে ডেলিভার হয়েছে",
        icon="check-circle",
        category="success",
    ),
    OrderStatus.CANCELLED: StatusDisplay(
        label_bn="বাতিল",
        label_en="Cancelled",
        description_bn="এই অর্ডারটি বাতিল করা হয়েছে",
        icon="alert-circle",
        category="danger",
    ),
}

_TIMELINE_LABELS = {
    OrderStatus.PENDING: "অর্ডার গ্রহণ",
    OrderStatus.CONFIRMED: "অর্ডার নিশ্চিত",
    OrderStatus.PROCESSING: "প্রস্তুতি",
    OrderStatus.SHIPPED: "পাঠানো",
    OrderStatus.DELIVERED: "ডেলিভার",
}


class TimelineStep(NamedTuple):
    status: OrderStatus
    label: str
    completed: bool
    current: bool


def display_for(status) -> StatusDisplay:
    return STATUS_DISPLAY[parse_status(status)]


def label(status, language: str = "bn") -> str:
    display = display_for(status)
    return display.label_en if language == "en" else display.label_bn


def timeline(status) -> list[TimelineStep]:
    """Progress steps along the fulfilment path for a tracking view.

    A cancelled order shows no completed steps.
    """
    current = parse_status(status)
    reached = FULFILMENT_PATH.index(current) if current in FULFILMENT_PATH else -1
    return [
        TimelineStep(
            status=step,
            label=_TIMELINE_LABELS[step],
            completed=index <= reached,
            current=index == reached,
        )
        for index, step in enumerate(FULFILMENT_PATH)
    ]
