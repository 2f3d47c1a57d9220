"""BDD tests for the order status lifecycle."""

from orders.order.events import OrderStatusChanged
from pytest_bdd import parsers, scenarios, then, when
from shared.status import IllegalTransition

scenarios("features/order_status.feature")


@when(parsers.cfparse('staff change the status to "{status}"'))
def change_status(order, status, error):
    error["exc"] = None
    try:
        order.change_status(status)
    except IllegalTransition as exc:
        error["exc"] = exc


@then(parsers.cfparse('an OrderStatusChanged event records "{previous}" to "{new}"'))
def status_changed_event(order, previous, new):
    event = order._events[-1]
    assert isinstance(event, OrderStatusChanged)
    assert event.previous_status == previous
    assert event.new_status == new
