"""Cart package: models, storage, store and provider."""
from .models import CartItem, CartState, ProductInput, deserialize_cart, serialize_cart
from .provider import CartProvider, use_cart
from .service import CartStore
from .storage import KeyValueStore, MemoryKeyValueStore, RedisKeyValueStore

__all__ = [
    "CartItem",
    "CartProvider",
    "CartState",
    "CartStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "ProductInput",
    "RedisKeyValueStore",
    "deserialize_cart",
    "serialize_cart",
    "use_cart",
]
