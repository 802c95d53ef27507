"""Scoped access to the application's CartStore."""
from contextvars import ContextVar, Token
from typing import Optional

from gomarket.db import CART_STORAGE_KEY
from gomarket.errors import CartNotInitializedError
from gomarket.logging import get_logger

from .service import CartStore
from .storage import KeyValueStore

logger = get_logger(__name__)

_current_store: ContextVar[Optional[CartStore]] = ContextVar("_current_store", default=None)


class CartProvider:
    """
    Owns a CartStore for the lifetime of the application.

    On enter the store is created, loaded from storage and made available
    to use_cart(); on exit pending writes are flushed and the store closed.

        async with CartProvider(RedisKeyValueStore()) as cart:
            cart.add_to_cart(product)
    """

    def __init__(self, storage: KeyValueStore, key: str = CART_STORAGE_KEY):
        self.store = CartStore(storage, key=key)
        self._token: Optional[Token] = None

    async def __aenter__(self) -> CartStore:
        await self.store.load()
        self._token = _current_store.set(self.store)
        return self.store

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._token is not None:
            _current_store.reset(self._token)
            self._token = None
        await self.store.aclose()
        logger.debug("Cart provider closed")


def use_cart() -> CartStore:
    """
    Get the CartStore bound by the enclosing CartProvider.

    Raises:
        CartNotInitializedError: called outside a CartProvider
    """
    store = _current_store.get()

    if store is None:
        raise CartNotInitializedError()

    return store
