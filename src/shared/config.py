"""Delivery pricing settings read by both the storefront and the order store.

The storefront prices the order and the order store re-prices it, so both
sides load the policy from the same ``GIFTSHOP_``-prefixed variables, e.g.
``GIFTSHOP_HOME_DELIVERY_FEE``.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.pricing import DeliveryPolicy


class DeliverySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GIFTSHOP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    home_delivery_fee: int = 60
    standard_delivery_fee: int = 120
    free_delivery_threshold: int | None = 2000

    def delivery_policy(self) -> DeliveryPolicy:
        return DeliveryPolicy(
            home_fee=self.home_delivery_fee,
            standard_fee=self.standard_delivery_fee,
            free_delivery_threshold=self.free_delivery_threshold,
        )


def load_delivery_policy() -> DeliveryPolicy:
    return DeliverySettings().delivery_policy()
