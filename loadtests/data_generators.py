"""Faker-based data generators for the order store load scenarios.

Each generator produces a checkout payload the order store accepts: a
Bangladeshi mobile number, a district we deliver to and amounts that agree
with ``shared.pricing``.
"""

import random
import uuid

from faker import Faker

from shared.pricing import delivery_fee, remaining_on_delivery
from shared.regions import REGIONS

fake = Faker("en_US")

_PRODUCTS = [
    ("mug-classic", "Classic Photo Mug", 450),
    ("tshirt-print", "Printed T-Shirt", 650),
    ("frame-a4", "A4 Photo Frame", 800),
    ("cushion", "Custom Cushion", 950),
    ("keyring", "Name Keyring", 150),
]


def valid_phone() -> str:
    """Bangladeshi mobile: 01 + operator digit 3-9 + eight digits."""
    return f"01{random.randint(3, 9)}{random.randint(0, 99_999_999):08d}"


def transaction_reference() -> str:
    return uuid.uuid4().hex[:10].upper()


def order_items(max_lines: int = 3, customized: bool = False) -> list[dict]:
    items = []
    for product_id, name, price in random.sample(_PRODUCTS, k=random.randint(1, max_lines)):
        quantity = random.randint(1, 3)
        item = {
            "product_id": product_id,
            "name": name,
            "unit_price": price,
            "quantity": quantity,
            "line_total": price * quantity,
        }
        if customized:
            item["customization"] = {"custom_text": fake.first_name(), "color": fake.color_name()}
        items.append(item)
    return items


def checkout_payload(customized: bool = False) -> dict:
    """Generate a PlaceOrderRequest body with self-consistent totals."""
    region = random.choice(REGIONS)
    items = order_items(customized=customized)
    subtotal = sum(item["line_total"] for item in items)
    fee = delivery_fee(region, subtotal)

    payload = {
        "customer_name": fake.name()[:255],
        "phone": valid_phone(),
        "district": region.name,
        "thana": random.choice(region.thanas),
        "address": fake.street_address(),
        "items": items,
        "subtotal": subtotal,
        "delivery_fee": fee,
        "total": subtotal + fee,
        "payment_info": {"method": "cash_on_delivery"},
    }

    advance = 0
    if customized or random.random() < 0.3:
        advance = 100 if customized else random.choice([100, 200])
        payload["payment_info"] = {
            "method": random.choice(["bkash", "nagad", "rocket"]),
            "transaction_reference": transaction_reference(),
            "payment_number": valid_phone(),
        }
        payload["advance_payment_amount"] = min(advance, subtotal + fee)

    payload["remaining_on_delivery"] = remaining_on_delivery(subtotal, fee, advance)
    return payload


def admin_note() -> str:
    return random.choice(
        [
            "Customer confirmed by phone",
            "Courier picked up",
            "Asked for evening delivery",
            fake.sentence(nb_words=6),
        ]
    )
