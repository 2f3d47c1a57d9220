"""Storefront error taxonomy.

Validation failures use ``protean.exceptions.ValidationError`` and illegal
status changes use ``shared.status.IllegalTransition``; the conditions below
cover the network and storage boundaries.
"""


class StorefrontError(Exception):
    """Base class for storefront boundary failures."""


class TransportFailure(StorefrontError):
    """Network error, timeout or non-2xx answer from the order store."""

    def __init__(self, message, status_code=None):
        self.message = message
        self.status_code = status_code
        super().__init__(message if status_code is None else f"[{status_code}] {message}")

    @property
    def retryable(self) -> bool:
        return self.status_code is None or self.status_code >= 500


class MalformedResponse(TransportFailure):
    """The order store answered, but the body could not be understood."""


class OrderNotFound(StorefrontError):
    """No order exists for the given tracking id or order id."""

    def __init__(self, reference):
        self.reference = reference
        super().__init__(f"Order not found: {reference}")


class PersistenceFailure(StorefrontError):
    """Durable cart storage could not be read or written."""
