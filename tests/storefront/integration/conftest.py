"""Storefront integration fixtures.

The storefront talks to a real order store app over ``httpx.ASGITransport``;
no sockets are opened.
"""

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from orders.api import order_router, register_exception_handlers
from storefront.client import OrderStoreClient

BASE_URL = "http://orderstore.test"


@pytest.fixture(autouse=True)
def _ctx(orders_bed):
    with orders_bed.domain_context():
        yield


@pytest.fixture()
def order_store_app():
    app = FastAPI()
    app.include_router(order_router)
    register_exception_handlers(app)
    return app


@pytest_asyncio.fixture()
async def client(order_store_app):
    async with OrderStoreClient(BASE_URL, transport=httpx.ASGITransport(app=order_store_app)) as store_client:
        yield store_client


@pytest.fixture()
def mock_client():
    """Factory for a client whose every request is answered by ``handler(request)``."""

    def build(handler) -> OrderStoreClient:
        return OrderStoreClient(BASE_URL, transport=httpx.MockTransport(handler))

    return build
