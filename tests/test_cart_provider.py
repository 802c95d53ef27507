"""Tests for CartProvider and use_cart"""
import json

import pytest

from gomarket.cart import CartProvider, CartStore, use_cart
from gomarket.errors import CartDataError, CartNotInitializedError, ERROR_NOT_INITIALIZED

from conftest import RecordingKeyValueStore


def test_use_cart_outside_provider():
    """Test the consumer accessor fails loudly without a provider"""
    with pytest.raises(CartNotInitializedError) as exc_info:
        use_cart()

    assert str(exc_info.value) == ERROR_NOT_INITIALIZED


@pytest.mark.asyncio
async def test_provider_binds_loaded_store(storage_key):
    """Test the provider loads the saved cart and exposes it to use_cart"""
    saved = [{"id": "x", "title": "Mug", "image_url": "mug.png", "price": 4.5, "quantity": 3}]
    storage = RecordingKeyValueStore({storage_key: json.dumps(saved)})

    async with CartProvider(storage) as store:
        assert isinstance(store, CartStore)
        assert use_cart() is store
        assert store.products[0].quantity == 3

    with pytest.raises(CartNotInitializedError):
        use_cart()


@pytest.mark.asyncio
async def test_provider_flushes_on_exit(storage_key, sample_product):
    storage = RecordingKeyValueStore()

    async with CartProvider(storage) as store:
        use_cart().add_to_cart(sample_product)
        use_cart().increment("a")

    assert store.closed
    assert json.loads(storage.data[storage_key])[0]["quantity"] == 2


@pytest.mark.asyncio
async def test_provider_load_failure(storage_key):
    """Test a malformed saved cart aborts startup instead of binding an empty cart"""
    storage = RecordingKeyValueStore({storage_key: "[1, 2]"})

    with pytest.raises(CartDataError):
        async with CartProvider(storage):
            pass

    with pytest.raises(CartNotInitializedError):
        use_cart()


@pytest.mark.asyncio
async def test_nested_provider_restores_outer(sample_product):
    async with CartProvider(RecordingKeyValueStore()) as outer:
        async with CartProvider(RecordingKeyValueStore(), key="inner") as inner:
            assert use_cart() is inner
        assert use_cart() is outer
