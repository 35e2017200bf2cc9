# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""String key-value stores.

The cached item store, the content markers and the preference adapter all
sit on top of a plain string key-value store. Two implementations exist:

- RedisKeyValueStore: shared store backed by the Redis client.
- InMemoryKeyValueStore: process-local store used by tests and offline runs.
"""

from typing import Protocol, runtime_checkable

from src.infrastructure.cache.redis_client import RedisClient


@runtime_checkable
class KeyValueStore(Protocol):
    """Interface for a string key-value store."""

    async def get_value(self, key: str) -> str | None:
        """Fetch a stored value. Returns None when the key is absent."""
        ...

    async def set_value(self, key: str, value: str) -> bool:
        """Store a value. Returns True on success."""
        ...

    async def delete_value(self, key: str) -> bool:
        """Delete a value. Returns True if a value was removed."""
        ...


class InMemoryKeyValueStore:
    """Dictionary-backed key-value store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._store: dict[str, str] = dict(initial or {})

    async def get_value(self, key: str) -> str | None:
        return self._store.get(key)

    async def set_value(self, key: str, value: str) -> bool:
        self._store[key] = value
        return True

    async def delete_value(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def snapshot(self) -> dict[str, str]:
        """Return a copy of every stored entry."""
        return dict(self._store)


class RedisKeyValueStore:
    """Redis-backed key-value store.

    Values are stored as raw strings under ``{namespace}:{key}``.
    Redis failures surface as RedisError.
    """

    def __init__(self, redis_client: RedisClient, namespace: str = "kv") -> None:
        self._redis = redis_client
        self._namespace = namespace

    async def get_value(self, key: str) -> str | None:
        return await self._redis.get_with_namespace(self._namespace, key)

    async def set_value(self, key: str, value: str) -> bool:
        await self._redis.set_with_namespace(self._namespace, key, value)
        return True

    async def delete_value(self, key: str) -> bool:
        return await self._redis.delete_with_namespace(self._namespace, key)
