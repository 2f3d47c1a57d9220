"""Application tests for UpdateOrderStatus and AppendOrderNote."""

import json

import pytest
from orders.order.order import Order
from orders.order.placement import PlaceOrder
from orders.order.status_update import AppendOrderNote, UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.status import IllegalTransition, OrderStatus


def _place_order():
    return current_domain.process(
        PlaceOrder(
            customer_name="Sumaiya",
            phone="01612345678",
            district="Chattogram",
            thana="পাহাড়তলী",
            address="GEC Circle",
            items=json.dumps([{"product_id": "P3", "name": "Cushion", "unit_price": 950, "quantity": 1}]),
            subtotal=950,
            delivery_fee=120,
            total=1070,
        ),
        asynchronous=False,
    )


def _update(order_id, status):
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=status), asynchronous=False)


def _status(order_id):
    return current_domain.repository_for(Order).get(order_id).status


class TestUpdateOrderStatus:
    def test_confirm_persists(self):
        order_id = _place_order()
        _update(order_id, "confirmed")
        assert _status(order_id) == OrderStatus.CONFIRMED.value

    def test_full_fulfilment_path(self):
        order_id = _place_order()
        for step in ("confirmed", "processing", "shipped", "delivered"):
            _update(order_id, step)
        assert _status(order_id) == OrderStatus.DELIVERED.value

    def test_illegal_transition_leaves_status(self):
        order_id = _place_order()
        for step in ("confirmed", "processing", "shipped"):
            _update(order_id, step)

        with pytest.raises(IllegalTransition):
            _update(order_id, "pending")
        assert _status(order_id) == OrderStatus.SHIPPED.value

    def test_cancelled_cannot_be_confirmed(self):
        order_id = _place_order()
        _update(order_id, "cancelled")
        with pytest.raises(IllegalTransition):
            _update(order_id, "confirmed")
        assert _status(order_id) == OrderStatus.CANCELLED.value

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            _update("does-not-exist", "confirmed")


class TestListOrders:
    def test_filter_by_status(self):
        pending_id = _place_order()
        confirmed_id = _place_order()
        _update(confirmed_id, "confirmed")

        repo = current_domain.repository_for(Order)
        confirmed_ids = {str(order.id) for order in repo.list_orders(OrderStatus.CONFIRMED)}
        assert str(confirmed_id) in confirmed_ids
        assert str(pending_id) not in confirmed_ids

    def test_newest_first(self):
        first = _place_order()
        second = _place_order()
        ids = [str(order.id) for order in current_domain.repository_for(Order).list_orders()]
        assert ids.index(str(second)) < ids.index(str(first))


class TestAppendOrderNote:
    def test_note_persists(self):
        order_id = _place_order()
        current_domain.process(AppendOrderNote(order_id=order_id, note="Gift wrap please"), asynchronous=False)
        notes = current_domain.repository_for(Order).get(order_id).note_list()
        assert notes[-1].endswith("Gift wrap please")

    def test_blank_note_rejected(self):
        order_id = _place_order()
        with pytest.raises(ValidationError):
            current_domain.process(AppendOrderNote(order_id=order_id, note="   "), asynchronous=False)
