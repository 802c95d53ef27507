"""Key-value storage backends for the cart."""
from typing import Dict, Optional, Protocol, Union

from gomarket.db import get_redis
from gomarket.errors import CartStorageError, ERROR_STORAGE_UNAVAILABLE


class KeyValueStore(Protocol):
    """Async string key-value store the cart persists into."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...


def _decode(value: Union[str, bytes, None]) -> Optional[str]:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisKeyValueStore:
    """KeyValueStore on top of the async Upstash Redis client."""

    def __init__(self, client=None):
        self._redis = client  # Lazy initialization

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            try:
                self._redis = get_redis()
            except ValueError as e:
                raise CartStorageError(f"{ERROR_STORAGE_UNAVAILABLE}: {e}") from e
        return self._redis

    async def get(self, key: str) -> Optional[str]:
        return _decode(await self.redis.get(key))

    async def set(self, key: str, value: str) -> None:
        await self.redis.set(key, value)


class MemoryKeyValueStore:
    """Process-local KeyValueStore, for tests and running without Redis."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value
