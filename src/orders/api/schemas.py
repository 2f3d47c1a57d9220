"""Pydantic request/response schemas for the order store API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from shared.pricing import advance_split

# --- Request Schemas ---


class OrderItemPayload(BaseModel):
    product_id: str
    name: str = Field(..., max_length=255)
    unit_price: int = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    line_total: int | None = Field(None, ge=0)
    image_url: str | None = None
    customization: dict | None = None


class PaymentInfoPayload(BaseModel):
    method: str = "cash_on_delivery"
    transaction_reference: str | None = None
    payment_number: str | None = None


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_name": "Rahim Uddin",
                    "phone": "01712345678",
                    "district": "Dhaka",
                    "thana": "ধানমন্ডি",
                    "address": "House 12, Road 5",
                    "items": [
                        {
                            "product_id": "P1",
                            "name": "Custom Mug",
                            "unit_price": 500,
                            "quantity": 2,
                            "line_total": 1000,
                        }
                    ],
                    "subtotal": 1000,
                    "delivery_fee": 60,
                    "total": 1060,
                    "remaining_on_delivery": 1060,
                    "payment_info": {"method": "cash_on_delivery"},
                }
            ]
        }
    }

    customer_name: str = Field(..., max_length=255)
    phone: str = Field(..., max_length=20)
    district: str = Field(..., max_length=50)
    thana: str = Field(..., max_length=100)
    address: str
    items: list[OrderItemPayload]
    subtotal: int = Field(..., ge=0)
    delivery_fee: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    advance_payment_amount: int | None = Field(None, ge=0)
    remaining_on_delivery: int | None = None
    payment_info: PaymentInfoPayload = Field(default_factory=PaymentInfoPayload)
    special_instructions: str | None = None


class UpdateStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "confirmed"}]}}

    status: str = Field(..., max_length=20)


class AppendNoteRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"note": "Customer asked for evening delivery"}]}}

    note: str = Field(..., min_length=1)


# --- Response Schemas ---


class PlaceOrderResponse(BaseModel):
    tracking_id: str
    order_id: str


class OrderResponse(BaseModel):
    id: str
    tracking_id: str
    status: str
    customer_name: str
    phone: str
    district: str
    thana: str
    address: str
    special_instructions: str | None = None
    items: list[dict]
    subtotal: int
    delivery_fee: int
    total: int
    advance_payment_amount: int | None = None
    remaining_on_delivery: int
    payment_info: dict
    notes: list[str]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> OrderResponse:
        return cls(
            id=str(order.id),
            tracking_id=order.tracking_id,
            status=order.status,
            customer_name=order.customer_name,
            phone=order.phone,
            district=order.district,
            thana=order.thana,
            address=order.address,
            special_instructions=order.special_instructions,
            items=order.item_list(),
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee or 0,
            total=order.total,
            advance_payment_amount=order.advance_payment_amount,
            remaining_on_delivery=advance_split(order.total, order.advance_payment_amount or 0).remaining,
            payment_info=order.payment(),
            notes=order.note_list(),
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class ErrorResponse(BaseModel):
    error: dict | str
