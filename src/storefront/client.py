"""Async HTTP client for the order store.

Maps the store's answers onto the storefront error taxonomy:

- network errors and timeouts → ``TransportFailure``
- 404 on a lookup             → ``OrderNotFound``
- 409 on a status change      → ``IllegalTransition``
- any other non-2xx           → ``TransportFailure`` with the status code
"""

from urllib.parse import quote

import httpx

from shared.status import IllegalTransition, parse_status
from storefront.errors import MalformedResponse, OrderNotFound, TransportFailure
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderStoreClient:
    def __init__(self, base_url: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={"Cache-Control": "no-cache", "Accept": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings, transport: httpx.AsyncBaseTransport | None = None) -> "OrderStoreClient":
        return cls(settings.api_base_url, timeout=settings.request_timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # -------------------------------------------------------------------
    # Customer operations
    # -------------------------------------------------------------------
    async def submit_order(self, payload) -> str:
        """POST an order and return the tracking id the store generated."""
        body = payload.to_request() if hasattr(payload, "to_request") else payload
        response = await self._request("POST", "/orders", json=body)
        data = _json(response)
        tracking_id = data.get("tracking_id") if isinstance(data, dict) else None
        if not tracking_id:
            raise MalformedResponse("Order store did not return a tracking id", status_code=response.status_code)
        logger.info("order_submitted", tracking_id=tracking_id)
        return tracking_id

    async def fetch_tracking(self, tracking_id: str):
        response = await self._request("GET", f"/orders/track/{quote(tracking_id, safe='')}", reference=tracking_id)
        return _json(response)

    # -------------------------------------------------------------------
    # Admin operations
    # -------------------------------------------------------------------
    async def fetch_order(self, order_id: str):
        response = await self._request("GET", f"/orders/{quote(order_id, safe='')}", reference=order_id)
        return _json(response)

    async def list_orders(self, status=None) -> list:
        params = {"status": parse_status(status).value} if status is not None else None
        response = await self._request("GET", "/orders", params=params)
        data = _json(response)
        if not isinstance(data, list):
            raise MalformedResponse("Expected a list of orders", status_code=response.status_code)
        return data

    async def request_status_change(self, order_id: str, status):
        response = await self._request(
            "PATCH",
            f"/orders/{quote(order_id, safe='')}/status",
            reference=order_id,
            json={"status": parse_status(status).value},
        )
        return _json(response)

    async def append_note(self, order_id: str, note: str):
        response = await self._request(
            "POST",
            f"/orders/{quote(order_id, safe='')}/notes",
            reference=order_id,
            json={"note": note},
        )
        return _json(response)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    async def _request(self, method: str, url: str, *, reference=None, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("order_store_unreachable", method=method, url=url, error=str(exc))
            raise TransportFailure(f"Order store unreachable: {exc}") from exc

        if response.status_code == 404 and reference is not None:
            raise OrderNotFound(reference)

        if response.status_code == 409:
            data = _safe_json(response)
            raise IllegalTransition(_status_or_text(data.get("current")), _status_or_text(data.get("requested")))

        if response.is_error:
            message = _error_message(response)
            logger.error("order_store_error", method=method, url=url, status_code=response.status_code, error=message)
            raise TransportFailure(message, status_code=response.status_code)

        return response


def _json(response: httpx.Response):
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponse("Order store returned invalid JSON", status_code=response.status_code) from exc


def _safe_json(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _status_or_text(value):
    try:
        return parse_status(value)
    except ValueError:
        return str(value)


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of ``{"error": ...}`` or FastAPI's ``{"detail": ...}``."""
    data = _safe_json(response)
    error = data.get("error", data.get("detail"))
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        return "; ".join(f"{field}: {', '.join(map(str, msgs)) if isinstance(msgs, list) else msgs}" for field, msgs in error.items())
    if isinstance(error, list):
        return " | ".join(str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in error)
    return response.text[:300] or response.reason_phrase
