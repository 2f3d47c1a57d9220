"""Order store bounded context: placed orders, their status and admin notes.

The ``Order`` aggregate is CQRS (not event sourced): an order is written once
at checkout and afterwards only moves through the shared status machine and
collects notes.
"""

from protean.domain import Domain

from orders.utils.logging import configure_logging, get_logger

configure_logging(log_dir="logs", log_file_prefix="orders")

logger = get_logger(__name__)

orders = Domain(name="orders")
