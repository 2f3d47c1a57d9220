"""GiftShop order store FastAPI application.

Serves the order store API the storefront checkout, tracking page and admin
console talk to. Commands are processed synchronously inside each request.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay (in-memory providers by default).
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orders.api import order_router, register_exception_handlers
from orders.domain import orders
from orders.utils.logging import bind_request_context, clear_request_context, get_logger

orders.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="GiftShop Order Store",
    description="Order placement, tracking and status administration",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the orders domain context and tag log lines with a request id."""
    bind_request_context(request_id=request.headers.get("X-Request-ID") or uuid4().hex)
    try:
        if request.url.path.startswith("/orders"):
            with orders.domain_context():
                return await call_next(request)
        # Health check, docs
        return await call_next(request)
    finally:
        clear_request_context()


# ---------------------------------------------------------------------------
# Routers and error mapping
# ---------------------------------------------------------------------------
app.include_router(order_router)
register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"orders": {"name": orders.name}},
        }
    )
