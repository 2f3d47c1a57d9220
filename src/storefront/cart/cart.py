"""Cart lines, immutable cart snapshots and the persistent cart store.

The cart store owns the only copy of the cart for a session. It is built once,
loaded from durable storage, mutated through ``add``/``update_quantity``/
``remove``/``clear`` and finally disposed. Every mutation rewrites the whole
cart to storage before returning.

Lines are keyed by ``(product_id, customization fingerprint)``: adding the same
key again sums quantities, while the same product with a different
customization becomes its own line.
"""

from typing import NamedTuple

from protean.exceptions import InvalidOperationError, ValidationError
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as SchemaError

from shared.pricing import cart_subtotal, line_total, to_amount
from storefront.cart.customization import Customization, fingerprint_of
from storefront.cart.storage import KeyValueStorage
from storefront.errors import PersistenceFailure
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CART_KEY = "shopping-cart"


class LineKey(NamedTuple):
    product_id: str
    fingerprint: str = ""

    @classmethod
    def of(cls, product_id, customization: Customization | None = None) -> "LineKey":
        return cls(str(product_id), fingerprint_of(customization))


class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    unit_price: int = Field(ge=0)
    quantity: int = Field(ge=1)
    image_url: str | None = None
    customization: Customization | None = None

    @field_validator("product_id", mode="before")
    @classmethod
    def _id_as_text(cls, value):
        return str(value) if isinstance(value, int) else value

    @field_validator("unit_price", mode="before")
    @classmethod
    def _floor_price(cls, value):
        return to_amount(value)

    @field_validator("customization")
    @classmethod
    def _empty_is_none(cls, value):
        if value is not None and value.is_empty:
            return None
        return value

    @property
    def key(self) -> LineKey:
        return LineKey.of(self.product_id, self.customization)

    @property
    def line_total(self) -> int:
        return line_total(self)


class Cart(BaseModel):
    """Immutable view of the cart at one instant. Totals are derived on access."""

    model_config = ConfigDict(frozen=True)

    lines: tuple[CartLine, ...] = ()

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_price(self) -> int:
        return cart_subtotal(self)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def has_customized_lines(self) -> bool:
        return any(line.customization is not None for line in self.lines)

    def find(self, key) -> CartLine | None:
        key = _as_key(key)
        return next((line for line in self.lines if line.key == key), None)


_LINES = TypeAdapter(list[CartLine])


def _as_key(key) -> LineKey:
    """Accept a ``LineKey``, a ``(product_id, fingerprint)`` pair or a bare product id."""
    if isinstance(key, LineKey):
        return key
    if isinstance(key, tuple):
        return LineKey(*key)
    return LineKey(str(key))


def _invalid_input(exc: SchemaError) -> ValidationError:
    messages: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "cart"
        messages.setdefault(field, []).append(error["msg"])
    return ValidationError(messages)


def serialize_lines(lines) -> str:
    return _LINES.dump_json(list(lines)).decode("utf-8")


def deserialize_lines(raw: str) -> list[CartLine]:
    """Parse stored cart text. Raises ``pydantic.ValidationError`` on malformed data."""
    merged: dict[LineKey, CartLine] = {}
    for line in _LINES.validate_json(raw):
        existing = merged.get(line.key)
        if existing is None:
            merged[line.key] = line
        else:
            merged[line.key] = existing.model_copy(update={"quantity": existing.quantity + line.quantity})
    return list(merged.values())


class CartStore:
    """Single writer of the durable cart for one session."""

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_CART_KEY):
        self._storage = storage
        self._key = key
        self._lines: list[CartLine] = []
        self._loaded = False
        self._disposed = False

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def load(self) -> Cart:
        """Read the stored cart. Missing, unreadable or malformed data gives an empty cart."""
        if self._disposed:
            raise InvalidOperationError("Cart store has been disposed")

        try:
            raw = self._storage.get(self._key)
        except PersistenceFailure as exc:
            logger.warning("cart_load_failed", key=self._key, error=str(exc))
            raw = None

        lines = []
        if raw is not None:
            try:
                lines = deserialize_lines(raw)
            except SchemaError as exc:
                logger.warning("cart_discarded_malformed_data", key=self._key, errors=exc.error_count())
                self._discard_stored()

        self._lines = lines
        self._loaded = True
        return self.snapshot()

    def dispose(self) -> None:
        self._disposed = True

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def snapshot(self) -> Cart:
        return Cart(lines=tuple(self._lines))

    @property
    def cart(self) -> Cart:
        return self.snapshot()

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def total_items(self) -> int:
        return self.snapshot().total_items

    @property
    def total_price(self) -> int:
        return self.snapshot().total_price

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add(self, product_id, name, unit_price, image_url=None, customization=None, quantity=None) -> CartLine:
        """Add a product (optionally customized) or increase the matching line.

        The increment is ``quantity`` when given, otherwise the
        customization's own quantity, otherwise 1.
        """
        self._ensure_open()

        try:
            if isinstance(customization, dict):
                customization = Customization.model_validate(customization)

            if quantity is None:
                quantity = customization.quantity if customization is not None else 1
            if quantity < 1:
                raise ValidationError({"quantity": ["Quantity must be at least 1"]})

            candidate = CartLine(
                product_id=product_id,
                name=name,
                unit_price=unit_price,
                quantity=quantity,
                image_url=image_url,
                customization=customization,
            )
        except SchemaError as exc:
            raise _invalid_input(exc) from None

        key = LineKey.of(product_id, customization)
        index = self._index_of(key)

        if index is None:
            line = candidate
            self._lines.append(line)
        else:
            existing = self._lines[index]
            line = existing.model_copy(update={"quantity": existing.quantity + quantity})
            self._lines[index] = line

        self._persist()
        logger.debug("cart_item_added", product_id=line.product_id, quantity=line.quantity)
        return line

    def update_quantity(self, key, new_quantity: int) -> CartLine | None:
        """Set a line's quantity in place. Zero or below removes the line."""
        self._ensure_open()

        if new_quantity <= 0:
            self.remove(key)
            return None

        index = self._index_of(_as_key(key))
        if index is None:
            return None

        line = self._lines[index].model_copy(update={"quantity": int(new_quantity)})
        self._lines[index] = line
        self._persist()
        return line

    def remove(self, key) -> None:
        """Delete a line. Removing an absent key is a no-op."""
        self._ensure_open()

        index = self._index_of(_as_key(key))
        if index is None:
            return

        del self._lines[index]
        self._persist()

    def clear(self) -> None:
        self._ensure_open()
        self._lines = []
        self._persist()

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _ensure_open(self):
        if self._disposed:
            raise InvalidOperationError("Cart store has been disposed")
        if not self._loaded:
            self.load()

    def _index_of(self, key: LineKey) -> int | None:
        return next((i for i, line in enumerate(self._lines) if line.key == key), None)

    def _persist(self):
        try:
            self._storage.set(self._key, serialize_lines(self._lines))
        except PersistenceFailure as exc:
            # Memory state stands; the next mutation retries the write.
            logger.warning("cart_persist_failed", key=self._key, error=str(exc))

    def _discard_stored(self):
        try:
            self._storage.delete(self._key)
        except PersistenceFailure as exc:
            logger.warning("cart_discard_failed", key=self._key, error=str(exc))
