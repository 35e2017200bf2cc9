# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cache infrastructure.

This package provides the Redis client, the string key-value stores built on
it, and the read-through CachedItemStore used for channel lookups and
managed profile listings.

Example:
    from src.infrastructure.cache import (
        CachedItemStore,
        RedisKeyValueStore,
        get_redis,
        init_redis,
    )

    await init_redis(settings)
    store = CachedItemStore(RedisKeyValueStore(get_redis()), ttl_seconds=86400)
"""

from src.infrastructure.cache.cached_item_store import (
    CachedItemNotFoundError,
    CachedItemRequestSourceFrom,
    CachedItemStore,
    CacheFirstStrategy,
    LookupStrategy,
    ServerFirstStrategy,
)
from src.infrastructure.cache.key_value_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
)
from src.infrastructure.cache.redis_client import (
    RedisClient,
    RedisError,
    close_redis,
    get_redis,
    init_redis,
)

__all__ = [
    # Redis
    "RedisClient",
    "RedisError",
    "close_redis",
    "get_redis",
    "init_redis",
    # Key-value stores
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    # Cached items
    "CachedItemStore",
    "CachedItemRequestSourceFrom",
    "CachedItemNotFoundError",
    "LookupStrategy",
    "ServerFirstStrategy",
    "CacheFirstStrategy",
]
