"""Tracking resolver against a live order store app, including polling."""

import asyncio

import httpx
import pytest
from protean.exceptions import ValidationError
from shared.status import OrderStatus
from storefront.admin import AdminConsole
from storefront.checkout.payload import CustomerDetails, build_order_payload
from storefront.errors import OrderNotFound, TransportFailure
from storefront.tracking.resolver import TrackingResolver

pytestmark = pytest.mark.asyncio


async def _place(cart_store, client) -> str:
    cart_store.add("P1", "Photo Mug", 500, quantity=2)
    customer = CustomerDetails(name="Karim", phone="01812345678", district="Sylhet", thana="সিলেট সদর", address="Zindabazar")
    return await client.submit_order(build_order_payload(cart_store.snapshot(), customer))


async def _order_id(client, tracking_id) -> str:
    return (await client.fetch_tracking(tracking_id))["id"]


class TestResolve:
    async def test_resolves_placed_order(self, cart_store, client):
        tracking_id = await _place(cart_store, client)

        order = await TrackingResolver(client).resolve(f"  {tracking_id} ")

        assert order.tracking_id == tracking_id
        assert order.status is OrderStatus.PENDING
        assert order.subtotal == 1000
        assert order.delivery_fee == 120
        assert order.items[0].line_total == 1000
        assert order.payment_info.method == "cash_on_delivery"

    async def test_unknown_tracking_id(self, client):
        with pytest.raises(OrderNotFound):
            await TrackingResolver(client).resolve("TRK0000")

    async def test_blank_tracking_id(self, client):
        with pytest.raises(ValidationError):
            await TrackingResolver(client).resolve("   ")

    async def test_sees_admin_changes(self, cart_store, client):
        tracking_id = await _place(cart_store, client)
        await AdminConsole(client).change_status(await _order_id(client, tracking_id), "confirmed")

        order = await TrackingResolver(client).resolve(tracking_id)
        assert order.status is OrderStatus.CONFIRMED
        assert order.status_label == "নিশ্চিত"


class TestWatch:
    async def test_reports_first_fetch_and_changes_only(self, cart_store, client):
        tracking_id = await _place(cart_store, client)
        order_id = await _order_id(client, tracking_id)
        updates = []

        subscription = TrackingResolver(client, poll_interval=0.01).watch(tracking_id, updates.append)
        async with subscription:
            await asyncio.sleep(0.05)
            await client.request_status_change(order_id, "confirmed")
            await asyncio.sleep(0.05)

        assert not subscription.active
        assert [order.status for order in updates] == [OrderStatus.PENDING, OrderStatus.CONFIRMED]

    async def test_async_callbacks(self, cart_store, client):
        tracking_id = await _place(cart_store, client)
        seen = asyncio.Event()

        async def on_update(order):
            seen.set()

        subscription = TrackingResolver(client).watch(tracking_id, on_update, interval=0.01)
        await asyncio.wait_for(seen.wait(), timeout=1)
        await subscription.stop()
        assert not subscription.active

    async def test_not_found_ends_polling(self, client):
        errors = []
        subscription = TrackingResolver(client).watch("TRK0000", lambda order: None, errors.append, interval=0.01)

        await asyncio.wait_for(subscription.wait(), timeout=1)

        assert not subscription.active
        assert len(errors) == 1
        assert isinstance(errors[0], OrderNotFound)

    async def test_final_status_ends_polling(self, cart_store, client):
        tracking_id = await _place(cart_store, client)
        await client.request_status_change(await _order_id(client, tracking_id), "cancelled")
        updates = []

        subscription = TrackingResolver(client).watch(tracking_id, updates.append, interval=0.01)
        await asyncio.wait_for(subscription.wait(), timeout=1)

        assert not subscription.active
        assert [order.status for order in updates] == [OrderStatus.CANCELLED]

    async def test_failing_callback_keeps_polling(self, cart_store, client):
        tracking_id = await _place(cart_store, client)
        order_id = await _order_id(client, tracking_id)
        updates = []

        def on_update(order):
            updates.append(order)
            if order.status is OrderStatus.PENDING:
                raise RuntimeError("view went away")

        subscription = TrackingResolver(client).watch(tracking_id, on_update, interval=0.01)
        await asyncio.sleep(0.05)
        assert subscription.active

        await client.request_status_change(order_id, "confirmed")
        for _ in range(100):
            if len(updates) == 2:
                break
            await asyncio.sleep(0.01)
        await subscription.stop()

        assert [order.status for order in updates] == [OrderStatus.PENDING, OrderStatus.CONFIRMED]

    async def test_transport_failures_keep_polling(self, mock_client):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"tracking_id": "TRK1", "status": "shipped", "total": 500})

        errors, updates = [], []
        async with mock_client(handler) as client:
            subscription = TrackingResolver(client).watch("TRK1", updates.append, errors.append, interval=0.01)
            for _ in range(100):
                if updates:
                    break
                await asyncio.sleep(0.01)
            await subscription.stop()

        assert len(errors) == 2
        assert all(isinstance(error, TransportFailure) for error in errors)
        assert updates[0].status is OrderStatus.SHIPPED

    async def test_cancel_without_waiting(self, cart_store, client):
        tracking_id = await _place(cart_store, client)
        subscription = TrackingResolver(client).watch(tracking_id, lambda order: None, interval=10)
        subscription.cancel()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert not subscription.active
