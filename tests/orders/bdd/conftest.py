"""Shared BDD fixtures and step definitions for the order store."""

import pytest
from orders.order.order import Order
from pytest_bdd import given, parsers, then
from shared.status import IllegalTransition, OrderStatus


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


def _new_order():
    order = Order.place(
        customer_name="BDD Customer",
        phone="01712345678",
        district="Dhaka",
        thana="গুলশান",
        address="Road 11",
        items=[{"product_id": "P1", "name": "Photo Mug", "unit_price": 500, "quantity": 2, "line_total": 1000}],
        subtotal=1000,
        delivery_fee=60,
        total=1060,
    )
    order._events.clear()
    return order


_PATH_TO = {
    OrderStatus.PENDING: (),
    OrderStatus.CONFIRMED: ("confirmed",),
    OrderStatus.PROCESSING: ("confirmed", "processing"),
    OrderStatus.SHIPPED: ("confirmed", "processing", "shipped"),
    OrderStatus.DELIVERED: ("confirmed", "processing", "shipped", "delivered"),
    OrderStatus.CANCELLED: ("cancelled",),
}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an order in "{status}" status'), target_fixture="order")
def order_in_status(status):
    order = _new_order()
    for step in _PATH_TO[OrderStatus(status)]:
        order.change_status(step)
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then("the change is rejected as an illegal transition")
def change_rejected(error):
    assert isinstance(error["exc"], IllegalTransition)
