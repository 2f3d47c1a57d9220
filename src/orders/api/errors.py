"""HTTP error mapping for the order store API.

``{"error": ...}`` is the body shape for every failure:

- ``ValidationError``     → 400 with the field messages
- ``ObjectNotFoundError`` → 404
- ``IllegalTransition``   → 409 with the current and requested status
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from orders.utils.logging import get_logger
from shared.status import IllegalTransition

logger = get_logger(__name__)


def _status_value(status):
    return getattr(status, "value", status)


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, errors=exc.messages)
    return JSONResponse(status_code=400, content={"error": exc.messages})


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Order not found"})


async def _illegal_transition(request: Request, exc: IllegalTransition) -> JSONResponse:
    logger.info(
        "illegal_status_transition",
        path=request.url.path,
        current=_status_value(exc.current),
        requested=_status_value(exc.requested),
    )
    return JSONResponse(
        status_code=409,
        content={
            "error": str(exc),
            "current": _status_value(exc.current),
            "requested": _status_value(exc.requested),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install protean's default handlers, then the order store's own mappings on top."""
    register_protean_handlers(app)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(IllegalTransition, _illegal_transition)
