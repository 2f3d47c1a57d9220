"""One storefront session: the cart store and the services that share it.

Build it once per session with ``StorefrontSession.from_settings()``, then
``open()`` it before use and ``close()`` it afterwards (or use it as an async
context manager). Nothing here is global; everything is wired explicitly.
"""

from storefront.admin import AdminConsole
from storefront.cart.cart import CartStore
from storefront.cart.storage import FileStorage
from storefront.checkout.submission import CheckoutService
from storefront.client import OrderStoreClient
from storefront.config import load_settings
from storefront.notifications import LogNotifier
from storefront.tracking.resolver import TrackingResolver
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class StorefrontSession:
    def __init__(self, settings, cart_store: CartStore, client: OrderStoreClient, notifier=None):
        self.settings = settings
        self.cart_store = cart_store
        self.client = client
        self.notifier = notifier or LogNotifier()

        self.checkout = CheckoutService.from_settings(settings, cart_store, client, notifier=self.notifier)
        self.tracking = TrackingResolver(client, poll_interval=settings.tracking_poll_interval)
        self.admin = AdminConsole(client, notifier=self.notifier)

    @classmethod
    def from_settings(cls, settings=None, storage=None, transport=None, notifier=None) -> "StorefrontSession":
        settings = settings or load_settings()
        storage = storage if storage is not None else FileStorage(settings.storage_dir)
        return cls(
            settings,
            CartStore(storage, key=settings.cart_storage_key),
            OrderStoreClient.from_settings(settings, transport=transport),
            notifier=notifier,
        )

    def open(self):
        cart = self.cart_store.load()
        logger.info("storefront_session_opened", cart_items=cart.total_items, api=self.settings.api_base_url)
        return cart

    async def close(self) -> None:
        self.cart_store.dispose()
        await self.client.aclose()
        logger.info("storefront_session_closed")

    async def __aenter__(self):
        self.open()
        return self

    async def __aexit__(self, *exc_info):
        await self.close()
