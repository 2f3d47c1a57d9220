"""Payment methods accepted at checkout.

Payment is manual: cash on delivery, or a mobile-wallet transfer whose
transaction reference the customer types in. Nothing here talks to a gateway.
"""

from enum import Enum


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    BKASH = "bkash"
    NAGAD = "nagad"
    ROCKET = "rocket"


WALLET_METHODS = frozenset({PaymentMethod.BKASH, PaymentMethod.NAGAD, PaymentMethod.ROCKET})


def parse_payment_method(value) -> PaymentMethod:
    """Accept an enum member or its value in any case. Raises ``ValueError`` otherwise."""
    if isinstance(value, PaymentMethod):
        return value
    if isinstance(value, str):
        return PaymentMethod(value.strip().lower())
    raise ValueError(f"Unknown payment method: {value!r}")
