"""
Logging setup for the cart store.

The root logger gets a single stdout handler the first time this module is
imported. LOG_LEVEL picks the level and VERCEL=1 drops the timestamp, since
the platform adds its own.

    from gomarket.logging import get_logger, describe_cart
    logger = get_logger(__name__)
    logger.debug(f"Cart: {describe_cart(store.products)}")
"""

import logging
import os
import sys
from functools import cache
from typing import Iterable

_DETAILED = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_COMPACT = "%(levelname)s - %(name)s - %(message)s"

# Product ids come from catalog data; keep them short in log lines
_ID_WIDTH = 12


def _install_handler() -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    fmt = _COMPACT if os.environ.get("VERCEL") == "1" else _DETAILED

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)
    root.setLevel(level)

    # upstash_redis talks REST through httpx, which logs each request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


_install_handler()


@cache
def get_logger(name: str) -> logging.Logger:
    """Named logger under the root handler installed above."""
    return logging.getLogger(name)


def _log_safe_id(product_id: str) -> str:
    flat = "".join(ch if ch.isprintable() else "?" for ch in str(product_id))
    return flat if len(flat) <= _ID_WIDTH else flat[:_ID_WIDTH] + "~"


def describe_cart(items: Iterable) -> str:
    """
    One-line summary of cart lines for log messages, e.g. "[a x2, b x1]".

    Control characters in ids are replaced so a product id cannot forge a
    log line (CWE-117).
    """
    return "[" + ", ".join(f"{_log_safe_id(item.id)} x{item.quantity}" for item in items) + "]"


__all__ = ["describe_cart", "get_logger"]
