"""Pure pricing functions over cart lines and delivery regions.

All amounts are whole taka. Fractional input is floored before it is used so
the storefront display and the stored order total can never disagree on
rounding. The order store runs these same functions when it re-validates a
submitted order.
"""

from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import NamedTuple

from shared.regions import find_region


class DeliveryPolicy(NamedTuple):
    home_fee: int = 60
    standard_fee: int = 120
    free_delivery_threshold: int | None = 2000


DEFAULT_POLICY = DeliveryPolicy()


class AdvanceSplit(NamedTuple):
    advance: int
    remaining: int


def to_amount(value) -> int:
    """Floor a numeric value (int, float, Decimal or numeric string) to whole units."""
    if isinstance(value, bool):
        raise ValueError("Amounts must be numeric")
    if isinstance(value, int):
        return value
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Not a monetary amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return int(amount.to_integral_value(rounding=ROUND_FLOOR))


def line_total(line) -> int:
    return to_amount(line.unit_price) * line.quantity


def cart_subtotal(cart) -> int:
    """Sum of line totals. Accepts a ``Cart`` or any iterable of lines."""
    lines = getattr(cart, "lines", cart)
    return sum(line_total(line) for line in lines)


def delivery_fee(district, subtotal, policy: DeliveryPolicy = DEFAULT_POLICY) -> int | None:
    """Flat fee for the district, or zero once the free-delivery threshold is met.

    Returns ``None`` when the district is unknown or not yet selected.
    """
    region = find_region(district)
    if region is None:
        return None

    threshold = policy.free_delivery_threshold
    if threshold is not None and to_amount(subtotal) >= threshold:
        return 0
    return policy.home_fee if region.is_home else policy.standard_fee


def advance_split(total, advance_amount) -> AdvanceSplit:
    total = to_amount(total)
    advance = max(to_amount(advance_amount), 0)
    return AdvanceSplit(advance=min(advance, total), remaining=max(total - advance, 0))


def remaining_on_delivery(subtotal, delivery_fee_amount, advance_paid=0) -> int:
    """Amount collected at the door: ``subtotal + delivery_fee - advance_paid``, never negative."""
    total = to_amount(subtotal) + to_amount(delivery_fee_amount)
    return advance_split(total, advance_paid).remaining
