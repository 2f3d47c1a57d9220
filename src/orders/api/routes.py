"""FastAPI routes for the order store.

Writes go through protean commands; reads go straight to the Order
repository's query methods.
"""

import json

from fastapi import APIRouter
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from orders.api.schemas import (
    AppendNoteRequest,
    ErrorResponse,
    OrderResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    UpdateStatusRequest,
)
from orders.order.order import Order
from orders.order.placement import PlaceOrder
from orders.order.status_update import AppendOrderNote, UpdateOrderStatus
from shared.status import parse_status

order_router = APIRouter(
    prefix="/orders",
    tags=["orders"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@order_router.post("", status_code=201, response_model=PlaceOrderResponse)
async def place_order(body: PlaceOrderRequest) -> PlaceOrderResponse:
    """Accept a checkout submission and return its tracking id."""
    command = PlaceOrder(
        customer_name=body.customer_name,
        phone=body.phone,
        district=body.district,
        thana=body.thana,
        address=body.address,
        items=json.dumps([item.model_dump() for item in body.items], ensure_ascii=False),
        subtotal=body.subtotal,
        delivery_fee=body.delivery_fee,
        total=body.total,
        advance_payment_amount=body.advance_payment_amount,
        payment_info=json.dumps(body.payment_info.model_dump(), ensure_ascii=False),
        special_instructions=body.special_instructions,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return PlaceOrderResponse(tracking_id=order.tracking_id, order_id=str(order_id))


@order_router.get("/track/{tracking_id}", response_model=OrderResponse)
async def track_order(tracking_id: str) -> OrderResponse:
    """Customer-facing lookup by tracking id."""
    order = current_domain.repository_for(Order).find_by_tracking_id(tracking_id.strip())
    if order is None:
        raise ObjectNotFoundError(f"No order with tracking id {tracking_id}")
    return OrderResponse.from_order(order)


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(status: str | None = None) -> list[OrderResponse]:
    """Admin listing, newest first."""
    if status is not None:
        try:
            status = parse_status(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status '{status}'"]}) from None

    orders = current_domain.repository_for(Order).list_orders(status)
    return [OrderResponse.from_order(order) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return OrderResponse.from_order(order)


@order_router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    responses={409: {"description": "Illegal status transition"}},
)
async def update_order_status(order_id: str, body: UpdateStatusRequest) -> OrderResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status)
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


@order_router.post("/{order_id}/notes", response_model=OrderResponse)
async def append_order_note(order_id: str, body: AppendNoteRequest) -> OrderResponse:
    command = AppendOrderNote(order_id=order_id, note=body.note)
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))
