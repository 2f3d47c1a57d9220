"""Storefront runtime configuration sourced from environment variables."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.config import DeliverySettings
from shared.pricing import DeliveryPolicy


class StorefrontSettings(BaseSettings):
    """Settings for the client-side ordering engine.

    Every field can be overridden with a ``STOREFRONT_``-prefixed environment
    variable, e.g. ``STOREFRONT_API_BASE_URL``. Delivery fees are shared with
    the order store and come from ``GIFTSHOP_`` variables instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = "http://localhost:8000"
    request_timeout: float = 10.0
    tracking_poll_interval: float = 30.0

    storage_dir: Path = Path(".storefront")
    cart_storage_key: str = "shopping-cart"

    delivery: DeliverySettings = Field(default_factory=DeliverySettings)
    custom_order_advance: int = 100

    whatsapp_number: str = "+8801940689487"

    def delivery_policy(self) -> DeliveryPolicy:
        return self.delivery.delivery_policy()


def load_settings() -> StorefrontSettings:
    return StorefrontSettings()
