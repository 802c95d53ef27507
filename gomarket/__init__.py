"""
GoMarketplace cart package

This package contains the cart state manager and its infrastructure:
- db: environment configuration and the Upstash Redis client
- cart: cart models, key-value storage adapters, CartStore and CartProvider
- logging: centralized logging configuration

Note: Imports are lazy so that importing the package does not configure
Redis or pull in the cart machinery until it is used.
"""

__all__ = [
    "CartItem",
    "CartProvider",
    "CartStore",
    "get_redis",
    "use_cart",
]


def __getattr__(name):
    """Lazy attribute access for the public entry points."""
    if name == "get_redis":
        from gomarket.db import get_redis
        return get_redis
    elif name in ("CartItem", "CartStore", "CartProvider", "use_cart"):
        from gomarket import cart
        return getattr(cart, name)
    raise AttributeError(f"module 'gomarket' has no attribute '{name}'")
