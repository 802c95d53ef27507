"""Cart models, wire codec and pure state transitions."""
import json
from typing import Any, Mapping, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from gomarket.errors import CartDataError, ERROR_INVALID_PRODUCT, ERROR_MALFORMED_CART


class ProductInput(BaseModel):
    """Product descriptor handed to add_to_cart (a cart line without quantity)."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: str = Field(description="Product identifier, key for every lookup")
    title: str = Field(description="Display name")
    image_url: str = Field(
        description="Display image reference",
        validation_alias=AliasChoices("image_url", "imageUrl"),
    )
    price: float = Field(description="Unit price, currency agnostic")


class CartItem(ProductInput):
    """Single line in the cart."""

    quantity: int = Field(description="Units of this product in the cart", ge=1)

    def with_quantity(self, quantity: int) -> "CartItem":
        return self.model_copy(update={"quantity": quantity})

    def to_dict(self) -> dict:
        """Convert to the persisted wire object."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Any) -> "CartItem":
        """Create from a persisted wire object."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise CartDataError(f"{ERROR_MALFORMED_CART}: {e}") from e


CartState = Tuple[CartItem, ...]
ProductLike = Union[ProductInput, Mapping[str, Any]]

EMPTY_CART: CartState = ()

_items_adapter = TypeAdapter(list[CartItem])
_PRODUCT_FIELDS = set(ProductInput.model_fields)


def to_product_input(product: ProductLike) -> ProductInput:
    """Normalize a descriptor (model or mapping) into a ProductInput."""
    if isinstance(product, ProductInput):
        return product
    try:
        return ProductInput.model_validate(product)
    except ValidationError as e:
        raise CartDataError(f"{ERROR_INVALID_PRODUCT}: {e}") from e


def serialize_cart(state: CartState) -> str:
    """Serialize cart state to the JSON array stored under the cart key."""
    return json.dumps([item.to_dict() for item in state])


def deserialize_cart(raw: Union[str, bytes]) -> CartState:
    """
    Parse a stored cart value.

    Raises:
        CartDataError: value is not a JSON array of valid cart items, or two
            items share an id
    """
    try:
        items = _items_adapter.validate_json(raw)
    except ValidationError as e:
        raise CartDataError(f"{ERROR_MALFORMED_CART}: {e}") from e

    seen = set()
    for item in items:
        if item.id in seen:
            raise CartDataError(f"{ERROR_MALFORMED_CART}: duplicate id {item.id!r}")
        seen.add(item.id)

    return tuple(items)


def find_item(state: CartState, product_id: str) -> CartItem | None:
    return next((item for item in state if item.id == product_id), None)


def add_item(state: CartState, product: ProductInput) -> CartState:
    """Add one unit of product: bump an existing line (incoming fields win) or append."""
    fields = product.model_dump(include=_PRODUCT_FIELDS)
    existing = find_item(state, product.id)

    if existing is None:
        return state + (CartItem(**fields, quantity=1),)

    return tuple(
        CartItem(**fields, quantity=item.quantity + 1) if item.id == product.id else item
        for item in state
    )


def increment_item(state: CartState, product_id: str) -> CartState:
    return tuple(
        item.with_quantity(item.quantity + 1) if item.id == product_id else item
        for item in state
    )


def decrement_item(state: CartState, product_id: str) -> CartState:
    """Remove one unit; a line at quantity 1 is dropped from the cart."""
    existing = find_item(state, product_id)

    if existing is None:
        return state

    if existing.quantity == 1:
        return tuple(item for item in state if item.id != product_id)

    return tuple(
        item.with_quantity(item.quantity - 1) if item.id == product_id else item
        for item in state
    )
