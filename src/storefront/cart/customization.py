"""How a single product instance was personalized."""

import json

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_UPLOADED_IMAGES = 5


class Customization(BaseModel):
    """Personalization axes chosen for one cart line.

    An axis left unset means "not customized on that axis". A customization
    with no axis set behaves exactly like no customization at all. Instances
    are immutable; changing a personalization produces a new cart line.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    size: str | None = None
    color: str | None = None
    print_area: str | None = None
    custom_text: str | None = None
    special_instructions: str | None = None
    uploaded_image_refs: tuple[str, ...] = Field(default=(), max_length=MAX_UPLOADED_IMAGES)
    quantity: int = Field(default=1, ge=1)

    @field_validator("size", "color", "print_area", "custom_text", "special_instructions", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def axes(self) -> dict:
        """The customized axes only; ``quantity`` is not an axis."""
        return self.model_dump(mode="json", exclude={"quantity"}, exclude_defaults=True)

    @property
    def is_empty(self) -> bool:
        return not self.axes()

    def fingerprint(self) -> str:
        """Canonical text for the customized axes, used in the cart line identity key."""
        axes = self.axes()
        if not axes:
            return ""
        return json.dumps(axes, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def fingerprint_of(customization: Customization | None) -> str:
    return customization.fingerprint() if customization is not None else ""
