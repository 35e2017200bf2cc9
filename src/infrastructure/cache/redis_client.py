# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Redis client backing the key-value cache and the preference store.

Values are plain strings; JSON encoding is left to the callers. Keys are
prefixed with ``{namespace}:`` so the cached item store, the content markers
and the preferences never collide.

Example:
    from src.infrastructure.cache import init_redis, get_redis

    # Initialize at startup
    await init_redis(settings)

    # Use the client
    redis = get_redis()
    await redis.set_with_namespace("prefs", "content_course_context", "{}")
"""

from typing import TYPE_CHECKING, Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError as BaseRedisError

if TYPE_CHECKING:
    from src.core.config.settings import Settings

# Module-level state
_redis_client: Optional["RedisClient"] = None


class RedisError(Exception):
    """Exception raised for Redis operation failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying Redis error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the Redis error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class RedisClient:
    """Async Redis client storing plain strings under namespaced keys.

    Example:
        client = RedisClient(settings)
        await client.connect()

        await client.set_with_namespace("kv", "channel-01", data)
        data = await client.get_with_namespace("kv", "channel-01")

        await client.close()
    """

    def __init__(self, settings: "Settings") -> None:
        """Initialize the Redis client.

        Args:
            settings: Settings containing Redis configuration.
        """
        self._settings = settings
        self._pool: Optional[ConnectionPool] = None
        self._redis: Optional[Redis] = None

    async def connect(self) -> None:
        """Create the Redis connection pool and check it responds.

        Raises:
            RedisError: If connection fails.
        """
        try:
            self._pool = ConnectionPool.from_url(
                self._settings.redis.url,
                max_connections=self._settings.redis.max_connections,
                decode_responses=True,
            )
            self._redis = Redis(connection_pool=self._pool)

            await self._redis.ping()
        except BaseRedisError as e:
            raise RedisError("Failed to connect to Redis", e) from e

    async def close(self) -> None:
        """Close the Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    def _ensure_connected(self) -> Redis:
        if self._redis is None:
            raise RedisError("Redis client not connected. Call connect() first.")
        return self._redis

    @staticmethod
    def namespaced_key(namespace: str, key: str) -> str:
        return f"{namespace}:{key}"

    async def set_with_namespace(self, namespace: str, key: str, value: str) -> None:
        """Store a string under a namespaced key.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        full_key = self.namespaced_key(namespace, key)
        try:
            await redis.set(full_key, value)
        except BaseRedisError as e:
            raise RedisError(f"Failed to set key: {full_key}", e) from e

    async def get_with_namespace(self, namespace: str, key: str) -> Optional[str]:
        """Read the string stored under a namespaced key, None if absent.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        full_key = self.namespaced_key(namespace, key)
        try:
            return await redis.get(full_key)
        except BaseRedisError as e:
            raise RedisError(f"Failed to get key: {full_key}", e) from e

    async def delete_with_namespace(self, namespace: str, key: str) -> bool:
        """Delete a namespaced key.

        Returns:
            True if the key was deleted, False if it didn't exist.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        full_key = self.namespaced_key(namespace, key)
        try:
            return await redis.delete(full_key) > 0
        except BaseRedisError as e:
            raise RedisError(f"Failed to delete key: {full_key}", e) from e


async def init_redis(settings: "Settings") -> None:
    """Initialize the global Redis client.

    Raises:
        RedisError: If connection fails.
    """
    global _redis_client

    _redis_client = RedisClient(settings)
    await _redis_client.connect()


async def close_redis() -> None:
    """Close the global Redis client."""
    global _redis_client

    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None


def get_redis() -> RedisClient:
    """Get the global Redis client.

    Raises:
        RedisError: If Redis has not been initialized.
    """
    if _redis_client is None:
        raise RedisError("Redis not initialized. Call init_redis() first.")
    return _redis_client
