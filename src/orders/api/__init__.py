"""Order store API package."""

from orders.api.errors import register_exception_handlers
from orders.api.routes import order_router

__all__ = ["order_router", "register_exception_handlers"]
