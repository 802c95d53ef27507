"""Cart store: in-memory cart state with write-behind persistence."""
import asyncio
import contextlib
from typing import Callable, List, Optional

from gomarket.db import CART_STORAGE_KEY
from gomarket.errors import CartStoreClosedError, CartStoreLoadingError
from gomarket.logging import describe_cart, get_logger

from .models import (
    EMPTY_CART,
    CartState,
    ProductLike,
    add_item,
    decrement_item,
    deserialize_cart,
    increment_item,
    serialize_cart,
    to_product_input,
)
from .storage import KeyValueStore

logger = get_logger(__name__)

Listener = Callable[[CartState], None]


def _mark_retrieved(future: asyncio.Future) -> None:
    # Write failures are already logged by the writer; callers that ignore
    # the future should not trigger "exception was never retrieved".
    if not future.cancelled():
        future.exception()


class CartStore:
    """
    Holds the current cart and keeps a key-value store in sync with it.

    Features:
    - Mutations compute the next state from the latest published state and
      notify subscribers synchronously
    - Every mutation enqueues its own write; a single writer task drains the
      queue in order, so the last write always matches the last state
    - Writes are fire-and-forget: each mutation returns a future for its
      write that callers may await or ignore

    Mutations are plain methods and must be called from the event loop that
    owns the store. They never suspend, so two mutations cannot interleave.
    """

    def __init__(self, storage: KeyValueStore, key: str = CART_STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._products: CartState = EMPTY_CART
        self._listeners: List[Listener] = []
        self._queue: Optional[asyncio.Queue] = None
        self._writer: Optional[asyncio.Task] = None
        self._pending = 0
        self._loading = False
        self._closed = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def products(self) -> CartState:
        """Current cart lines, in insertion order."""
        return self._products

    @property
    def total_items(self) -> int:
        """Total number of units in the cart."""
        return sum(item.quantity for item in self._products)

    @property
    def pending_writes(self) -> int:
        """Writes queued or in flight."""
        return self._pending

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def loading(self) -> bool:
        """True while load() is reading from storage."""
        return self._loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with every newly published state.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return unsubscribe

    async def load(self) -> CartState:
        """
        Replace the in-memory cart with the persisted one, if any.

        Storage errors and CartDataError propagate; the current state is left
        untouched when loading fails. Mutations are refused with
        CartStoreLoadingError until the read has finished, since the loaded
        cart replaces whatever is in memory.
        """
        if self._loading:
            raise CartStoreLoadingError()

        self._loading = True
        try:
            raw = await self._storage.get(self._key)
        finally:
            self._loading = False

        if raw is None:
            logger.info(f"No saved cart under {self._key}")
            return self._products

        products = deserialize_cart(raw)
        self._publish(products)
        logger.info(f"Loaded cart {describe_cart(products)}")
        return products

    def add_to_cart(self, product: ProductLike) -> asyncio.Future:
        """Add one unit of product, appending it when it is not in the cart yet."""
        product = to_product_input(product)
        future = self._commit(add_item(self._products, product))
        logger.debug(f"Cart after add: {describe_cart(self._products)}")
        return future

    def increment(self, product_id: str) -> asyncio.Future:
        """Add one unit to an existing line. Unknown ids leave the cart as is."""
        return self._commit(increment_item(self._products, product_id))

    def decrement(self, product_id: str) -> asyncio.Future:
        """Remove one unit; the line disappears when its quantity reaches zero."""
        return self._commit(decrement_item(self._products, product_id))

    async def flush(self) -> None:
        """Wait for every write queued so far."""
        if self._queue is not None:
            if self._pending:
                self._ensure_writer(asyncio.get_running_loop())
            await self._queue.join()

    async def aclose(self) -> None:
        """Finish pending writes and stop the writer task."""
        if self._closed:
            return
        self._closed = True

        await self.flush()

        if self._writer is not None:
            self._writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._writer
            self._writer = None

    def _commit(self, products: CartState) -> asyncio.Future:
        if self._closed:
            raise CartStoreClosedError()
        if self._loading:
            raise CartStoreLoadingError()

        loop = asyncio.get_running_loop()
        self._publish(products)
        return self._enqueue_write(loop, products)

    def _publish(self, products: CartState) -> None:
        self._products = products

        for listener in list(self._listeners):
            try:
                listener(products)
            except Exception:
                logger.warning("Cart listener failed", exc_info=True)

    def _ensure_writer(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue()
        # A writer that was cancelled leaves its queue behind; pick it up again
        if self._writer is None or self._writer.done():
            self._writer = loop.create_task(self._write_loop(), name="cart-store-writer")

    def _enqueue_write(self, loop: asyncio.AbstractEventLoop, products: CartState) -> asyncio.Future:
        self._ensure_writer(loop)

        future = loop.create_future()
        future.add_done_callback(_mark_retrieved)
        self._pending += 1
        self._queue.put_nowait((products, future))
        return future

    async def _write_loop(self) -> None:
        while True:
            products, future = await self._queue.get()
            try:
                await self._storage.set(self._key, serialize_cart(products))
            except Exception as e:
                logger.error(f"Failed to persist cart under {self._key}: {e}")
                if not future.done():
                    future.set_exception(e)
            else:
                logger.debug(f"Persisted cart with {len(products)} products")
                if not future.done():
                    future.set_result(None)
            finally:
                if not future.done():
                    future.cancel()
                self._pending -= 1
                self._queue.task_done()


__all__ = ["CartStore", "Listener"]
