"""Read-only order lookup by tracking id, with polling.

The order store may send ``items``, ``payment_info`` and ``notes`` either as
structured JSON or as JSON-encoded text, and may wrap the order in an
``{"order": ...}`` envelope. ``normalize_order`` is the one place that copes
with all of that; everything downstream works with ``TrackedOrder``.
"""

import asyncio
import inspect
import json
from datetime import datetime

from protean.exceptions import ValidationError
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as SchemaError

from shared import labels
from shared.pricing import advance_split, to_amount
from shared.status import OrderStatus, is_terminal, parse_status
from storefront.errors import MalformedResponse, OrderNotFound, TransportFailure
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 30.0


class TrackedItem(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    product_id: str | None = None
    name: str = ""
    unit_price: int = 0
    quantity: int = 1
    line_total: int | None = None
    image_url: str | None = None
    customization: dict | None = None

    @field_validator("product_id", mode="before")
    @classmethod
    def _id_as_text(cls, value):
        return str(value) if isinstance(value, int) else value

    @field_validator("unit_price", "line_total", mode="before")
    @classmethod
    def _floor_amount(cls, value):
        return None if value is None else to_amount(value)


class TrackedPayment(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    method: str | None = None
    transaction_reference: str | None = Field(
        default=None,
        validation_alias=AliasChoices("transaction_reference", "trx_id"),
    )
    payment_number: str | None = None


class TrackedOrder(BaseModel):
    """An order as the customer or admin sees it. Never mutated locally."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    tracking_id: str
    status: OrderStatus
    items: tuple[TrackedItem, ...] = ()
    subtotal: int | None = None
    delivery_fee: int = 0
    total: int
    advance_payment_amount: int | None = None
    payment_info: TrackedPayment = TrackedPayment()
    customer_name: str = ""
    phone: str = ""
    district: str = ""
    thana: str = ""
    address: str = ""
    special_instructions: str | None = None
    notes: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _derive_total(cls, data):
        if isinstance(data, dict) and data.get("total") is None and data.get("subtotal") is not None:
            data = {**data, "total": to_amount(data["subtotal"]) + to_amount(data.get("delivery_fee") or 0)}
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value):
        return str(value) if isinstance(value, int) else value

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return parse_status(value)

    @field_validator("subtotal", "delivery_fee", "total", "advance_payment_amount", mode="before")
    @classmethod
    def _floor_amount(cls, value):
        return None if value is None else to_amount(value)

    @property
    def remaining_on_delivery(self) -> int:
        return advance_split(self.total, self.advance_payment_amount or 0).remaining

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    @property
    def status_label(self) -> str:
        return labels.label(self.status)

    def timeline(self) -> list[labels.TimelineStep]:
        return labels.timeline(self.status)


def _decode(value, what: str):
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    try:
        return json.loads(value)
    except ValueError as exc:
        raise MalformedResponse(f"Could not parse {what} from order store") from exc


def _decode_notes(value):
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    try:
        notes = json.loads(value)
    except ValueError:
        # Plain text notes, one per line
        return [line for line in value.splitlines() if line.strip()]
    if isinstance(notes, str):
        return [notes]
    return notes


def normalize_order(raw) -> TrackedOrder:
    """Normalize any order representation the store may send into a ``TrackedOrder``.

    Raises ``MalformedResponse`` when the data cannot be understood.
    """
    if isinstance(raw, (str, bytes)):
        raw = _decode(raw, "order")

    if isinstance(raw, dict) and "tracking_id" not in raw and "order" in raw:
        raw = raw["order"]
        if isinstance(raw, (str, bytes)):
            raw = _decode(raw, "order")

    if not isinstance(raw, dict):
        raise MalformedResponse("Order payload is not an object")

    data = dict(raw)
    if isinstance(data.get("items"), (str, bytes)):
        data["items"] = _decode(data["items"], "items")
    if isinstance(data.get("payment_info"), (str, bytes)):
        data["payment_info"] = _decode(data["payment_info"], "payment_info")
    if isinstance(data.get("notes"), (str, bytes)):
        data["notes"] = _decode_notes(data["notes"])

    for field, empty in (("items", []), ("payment_info", {}), ("notes", [])):
        if data.get(field) is None:
            data[field] = empty

    try:
        return TrackedOrder.model_validate(data)
    except SchemaError as exc:
        raise MalformedResponse(f"Order payload failed validation ({exc.error_count()} errors)") from exc


async def _notify(callback, argument):
    if callback is None:
        return
    try:
        result = callback(argument)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("tracking_callback_failed", callback=getattr(callback, "__qualname__", repr(callback)))


class TrackingSubscription:
    """Handle on a running poll loop. Stop it when the tracking view closes."""

    def __init__(self, tracking_id: str, task: asyncio.Task):
        self.tracking_id = tracking_id
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    def cancel(self) -> None:
        self._task.cancel()

    async def stop(self) -> None:
        """Cancel the loop and wait until it has actually finished."""
        self._task.cancel()
        for result in await asyncio.gather(self._task, return_exceptions=True):
            if isinstance(result, Exception):
                raise result

    async def wait(self) -> None:
        """Wait for the loop to end on its own (final status reached or order not found)."""
        await self._task

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.stop()


class TrackingResolver:
    def __init__(self, client, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self._client = client
        self.poll_interval = poll_interval

    async def resolve(self, tracking_id: str) -> TrackedOrder:
        """Fetch and normalize one order. Raises ``OrderNotFound`` or ``TransportFailure``."""
        tracking_id = (tracking_id or "").strip()
        if not tracking_id:
            raise ValidationError({"tracking_id": ["Tracking id is required"]})

        raw = await self._client.fetch_tracking(tracking_id)
        return normalize_order(raw)

    def watch(self, tracking_id: str, on_update, on_error=None, interval: float | None = None) -> TrackingSubscription:
        """Poll ``tracking_id`` until cancelled or the order is delivered or cancelled.

        ``on_update`` receives the order on the first fetch and whenever it
        changes afterwards. Transport failures go to ``on_error`` and polling
        continues; ``OrderNotFound`` goes to ``on_error`` and polling ends.
        Callbacks may be plain functions or coroutines. A callback that raises
        is logged and polling carries on. Must be called from a running event
        loop.
        """
        interval = self.poll_interval if interval is None else interval
        task = asyncio.create_task(
            self._poll(tracking_id, on_update, on_error, interval),
            name=f"track-{tracking_id}",
        )
        return TrackingSubscription(tracking_id, task)

    async def _poll(self, tracking_id, on_update, on_error, interval):
        last_seen = None
        while True:
            try:
                order = await self.resolve(tracking_id)
            except OrderNotFound as exc:
                logger.info("tracking_order_not_found", tracking_id=tracking_id)
                await _notify(on_error, exc)
                return
            except TransportFailure as exc:
                logger.warning("tracking_poll_failed", tracking_id=tracking_id, error=str(exc))
                await _notify(on_error, exc)
            else:
                if order != last_seen:
                    last_seen = order
                    await _notify(on_update, order)
                if order.is_terminal:
                    logger.info("tracking_order_final", tracking_id=tracking_id, status=order.status.value)
                    return

            await asyncio.sleep(interval)
