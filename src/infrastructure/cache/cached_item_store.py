# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read-through cache for server-backed items.

An item is stored as JSON under ``{key_prefix}{id}`` and its expiry
timestamp (epoch seconds) under ``{ttl_key}{id}``. Two lookup strategies
are available and selected through CachedItemRequestSourceFrom:

- SERVER: fetch from the server first and cache the result. If the server
  fails, the cached value (then the bundled fallback) is returned instead.
- CACHE: return the cached value when present, refreshing it in the
  background once its TTL has expired. On a miss the bundled fallback is
  loaded first and the server is only asked when no fallback is available.

Example:
    store = CachedItemStore(key_value_store, ttl_seconds=86400)
    channel = await store.fetch(
        CachedItemRequestSourceFrom.CACHE,
        id="channel_01",
        key_prefix="channel-",
        ttl_key="ttl_channel-",
        from_server=lambda: fetch_channel("channel_01"),
        from_fallback=lambda: read_bundled_channel("channel_01"),
    )
"""

import asyncio
import json
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

from src.infrastructure.cache.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

# Type alias for item loaders
ItemLoader = Callable[[], Awaitable[Any]]


class CachedItemRequestSourceFrom(str, Enum):
    """Where a cached item lookup should start."""

    SERVER = "server"
    CACHE = "cache"


class CachedItemNotFoundError(Exception):
    """Raised when neither the cache nor any loader produced a value."""

    def __init__(self, key: str) -> None:
        super().__init__(f"No cached or loadable value for key: {key}")
        self.key = key


class LookupStrategy(Protocol):
    """A way of resolving one cached item."""

    async def lookup(
        self,
        store: "CachedItemStore",
        id: str,
        key_prefix: str,
        ttl_key: str,
        from_server: ItemLoader,
        from_fallback: ItemLoader | None,
    ) -> Any:
        ...


class ServerFirstStrategy:
    """Fetch from the server, falling back to cache and bundled value."""

    async def lookup(
        self,
        store: "CachedItemStore",
        id: str,
        key_prefix: str,
        ttl_key: str,
        from_server: ItemLoader,
        from_fallback: ItemLoader | None,
    ) -> Any:
        try:
            value = await from_server()
        except Exception as server_error:
            logger.warning(
                "Server fetch failed for %s%s, trying cache: %s",
                key_prefix,
                id,
                server_error,
            )
            cached = await store.read(id, key_prefix)
            if cached is not None:
                return cached
            if from_fallback is not None:
                fallback = await store.load_fallback(id, key_prefix, from_fallback)
                if fallback is not None:
                    return fallback
            raise

        await store.save(id, key_prefix, ttl_key, value, with_ttl=True)
        return value


class CacheFirstStrategy:
    """Serve from cache, loading the bundled value or server on a miss."""

    async def lookup(
        self,
        store: "CachedItemStore",
        id: str,
        key_prefix: str,
        ttl_key: str,
        from_server: ItemLoader,
        from_fallback: ItemLoader | None,
    ) -> Any:
        cached = await store.read(id, key_prefix)
        if cached is not None:
            if await store.is_expired(id, ttl_key):
                store.refresh_in_background(id, key_prefix, ttl_key, from_server)
            return cached

        if from_fallback is not None:
            fallback = await store.load_fallback(id, key_prefix, from_fallback)
            if fallback is not None:
                # No TTL entry: the next cached read refreshes from the server
                await store.save(id, key_prefix, ttl_key, fallback, with_ttl=False)
                return fallback

        value = await from_server()
        if value is None:
            raise CachedItemNotFoundError(f"{key_prefix}{id}")
        await store.save(id, key_prefix, ttl_key, value, with_ttl=True)
        return value


_STRATEGIES: dict[CachedItemRequestSourceFrom, LookupStrategy] = {
    CachedItemRequestSourceFrom.SERVER: ServerFirstStrategy(),
    CachedItemRequestSourceFrom.CACHE: CacheFirstStrategy(),
}


class CachedItemStore:
    """Read-through cache with TTL bookkeeping over a KeyValueStore.

    Attributes:
        ttl_seconds: Freshness window of values fetched from the server.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cached item store.

        Args:
            store: Backing key-value store.
            ttl_seconds: Freshness window of server values.
            clock: Returns the current epoch time in seconds.
        """
        self._store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._background: set[asyncio.Task] = set()

    async def fetch(
        self,
        source_from: CachedItemRequestSourceFrom,
        id: str,
        key_prefix: str,
        ttl_key: str,
        from_server: ItemLoader,
        from_fallback: ItemLoader | None = None,
    ) -> Any:
        """Resolve an item with the strategy selected by source_from."""
        strategy = _STRATEGIES[source_from]
        return await strategy.lookup(
            self, id, key_prefix, ttl_key, from_server, from_fallback
        )

    async def get(
        self,
        id: str,
        key_prefix: str,
        ttl_key: str,
        from_server: ItemLoader,
        from_fallback: ItemLoader | None = None,
    ) -> Any:
        """Resolve an item server-first."""
        return await self.fetch(
            CachedItemRequestSourceFrom.SERVER,
            id,
            key_prefix,
            ttl_key,
            from_server,
            from_fallback,
        )

    async def get_cached(
        self,
        id: str,
        key_prefix: str,
        ttl_key: str,
        from_server: ItemLoader,
        from_fallback: ItemLoader | None = None,
    ) -> Any:
        """Resolve an item cache-first."""
        return await self.fetch(
            CachedItemRequestSourceFrom.CACHE,
            id,
            key_prefix,
            ttl_key,
            from_server,
            from_fallback,
        )

    async def read(self, id: str, key_prefix: str) -> Any:
        """Return the cached value for an item, or None."""
        raw = await self._store.get_value(f"{key_prefix}{id}")
        if raw is None:
            return None
        return json.loads(raw)

    async def save(
        self,
        id: str,
        key_prefix: str,
        ttl_key: str,
        value: Any,
        with_ttl: bool,
    ) -> None:
        """Store a value and, when with_ttl is set, its expiry timestamp."""
        await self._store.set_value(f"{key_prefix}{id}", json.dumps(value, default=str))
        if with_ttl:
            expires_at = self._clock() + self.ttl_seconds
            await self._store.set_value(f"{ttl_key}{id}", str(expires_at))

    async def is_expired(self, id: str, ttl_key: str) -> bool:
        """Check whether an item's TTL has passed or was never recorded."""
        raw = await self._store.get_value(f"{ttl_key}{id}")
        if raw is None:
            return True
        try:
            return self._clock() > float(raw)
        except ValueError:
            return True

    async def load_fallback(
        self,
        id: str,
        key_prefix: str,
        from_fallback: ItemLoader,
    ) -> Any:
        """Run the fallback loader, logging and swallowing its failure."""
        try:
            return await from_fallback()
        except Exception as e:
            logger.warning("Fallback load failed for %s%s: %s", key_prefix, id, e)
            return None

    def refresh_in_background(
        self,
        id: str,
        key_prefix: str,
        ttl_key: str,
        from_server: ItemLoader,
    ) -> None:
        """Schedule a server refresh of an expired item."""
        task = asyncio.create_task(self._refresh(id, key_prefix, ttl_key, from_server))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _refresh(
        self,
        id: str,
        key_prefix: str,
        ttl_key: str,
        from_server: ItemLoader,
    ) -> None:
        try:
            value = await from_server()
        except Exception as e:
            logger.warning("Background refresh failed for %s%s: %s", key_prefix, id, e)
            return
        await self.save(id, key_prefix, ttl_key, value, with_ttl=True)
        logger.debug("Refreshed cached item %s%s", key_prefix, id)

    async def drain(self) -> None:
        """Wait for pending background refreshes to finish."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
