"""Pytest configuration and fixtures"""
import asyncio
import os

import pytest
import pytest_asyncio

# Set test environment variables
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from gomarket.cart import CartItem, CartStore, MemoryKeyValueStore  # noqa: E402
from gomarket.db import CART_STORAGE_KEY  # noqa: E402


class RecordingKeyValueStore(MemoryKeyValueStore):
    """Memory store that keeps every written value in order."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = []

    async def set(self, key, value):
        self.writes.append((key, value))
        await super().set(key, value)


class FailingKeyValueStore(MemoryKeyValueStore):
    """Memory store whose reads and/or writes raise OSError."""

    def __init__(self, initial=None, fail_get=False, fail_set=True):
        super().__init__(initial)
        self.fail_get = fail_get
        self.fail_set = fail_set

    async def get(self, key):
        if self.fail_get:
            raise OSError("storage read failed")
        return await super().get(key)

    async def set(self, key, value):
        if self.fail_set:
            raise OSError("storage write failed")
        await super().set(key, value)


class BlockingKeyValueStore(MemoryKeyValueStore):
    """Memory store whose writes wait until release() is called."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.released = asyncio.Event()

    def release(self):
        self.released.set()

    async def set(self, key, value):
        await self.released.wait()
        await super().set(key, value)



class SlowReadKeyValueStore(MemoryKeyValueStore):
    """Memory store whose reads wait until release() is called."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.released = asyncio.Event()

    def release(self):
        self.released.set()

    async def get(self, key):
        await self.released.wait()
        return await super().get(key)


class CancelledWriteKeyValueStore(RecordingKeyValueStore):
    """Recording store whose first write is cancelled mid-flight."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.cancel_next = True

    async def set(self, key, value):
        if self.cancel_next:
            self.cancel_next = False
            raise asyncio.CancelledError()
        await super().set(key, value)

@pytest.fixture
def storage_key():
    return CART_STORAGE_KEY


@pytest.fixture
def memory_storage():
    """Recording in-memory key-value store"""
    return RecordingKeyValueStore()


@pytest_asyncio.fixture
async def store(memory_storage):
    """CartStore backed by the recording memory store, closed after the test"""
    cart_store = CartStore(memory_storage)
    yield cart_store
    await cart_store.aclose()


@pytest.fixture
def sample_product():
    """Sample product descriptor, as handed over by a product list"""
    return {
        "id": "a",
        "title": "Shirt",
        "image_url": "https://cdn.example.com/shirt.png",
        "price": 10,
    }


@pytest.fixture
def other_product():
    return {
        "id": "b",
        "title": "Hat",
        "image_url": "https://cdn.example.com/hat.png",
        "price": 25.5,
    }


@pytest.fixture
def sample_item(sample_product):
    """Sample cart line built from sample_product"""
    return CartItem(**sample_product, quantity=1)
