"""
Cart Errors

Centralized error messages and the exception types raised by the cart store.
"""

ERROR_NOT_INITIALIZED = "use_cart must be used within a CartProvider"
ERROR_STORE_CLOSED = "Cart store is closed"
ERROR_STORE_LOADING = "Cart store is still loading"
ERROR_STORAGE_UNAVAILABLE = "Cart storage unavailable"
ERROR_MALFORMED_CART = "Malformed cart data"
ERROR_INVALID_PRODUCT = "Invalid product"


class CartError(Exception):
    """Base class for cart store errors."""


class CartNotInitializedError(CartError, RuntimeError):
    """Raised when the cart is accessed outside a CartProvider."""

    def __init__(self, message: str = ERROR_NOT_INITIALIZED):
        super().__init__(message)


class CartDataError(CartError, ValueError):
    """Raised for persisted cart data or product input of the wrong shape."""


class CartStorageError(CartError):
    """Raised when the key-value backend cannot be configured."""


class CartStoreClosedError(CartError, RuntimeError):
    """Raised when a mutation reaches a store that has been closed."""

    def __init__(self, message: str = ERROR_STORE_CLOSED):
        super().__init__(message)


class CartStoreLoadingError(CartError, RuntimeError):
    """Raised when a mutation or second load arrives while the cart is loading."""

    def __init__(self, message: str = ERROR_STORE_LOADING):
        super().__init__(message)
