# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the Redis client and key-value stores."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.core.config import Settings
from src.infrastructure.cache import (
    InMemoryKeyValueStore,
    RedisClient,
    RedisError,
    RedisKeyValueStore,
    get_redis,
)


@pytest.fixture
def redis_mock():
    """Mock redis.asyncio connection."""
    redis = AsyncMock()
    redis.get.return_value = None
    redis.delete.return_value = 1
    return redis


@pytest.fixture
def redis_client(redis_mock):
    """Create a RedisClient bound to the mock connection."""
    client = RedisClient(Settings())
    client._redis = redis_mock
    return client


class TestRedisKeyValueStore:
    """Tests for RedisKeyValueStore."""

    @pytest.mark.asyncio
    async def test_values_are_namespaced(self, redis_client, redis_mock):
        """Test keys are prefixed with the store namespace."""
        store = RedisKeyValueStore(redis_client, namespace="prefs")
        redis_mock.get.return_value = "c1"

        await store.set_value("lastreadcontentid_u1_co1_b1", "c1")
        value = await store.get_value("lastreadcontentid_u1_co1_b1")
        deleted = await store.delete_value("lastreadcontentid_u1_co1_b1")

        redis_mock.set.assert_awaited_once_with("prefs:lastreadcontentid_u1_co1_b1", "c1")
        redis_mock.get.assert_awaited_once_with("prefs:lastreadcontentid_u1_co1_b1")
        assert value == "c1"
        assert deleted is True

    @pytest.mark.asyncio
    async def test_redis_failure_raises_redis_error(self, redis_client, redis_mock):
        """Test driver errors are wrapped in RedisError."""
        redis_mock.get.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(RedisError) as exc_info:
            await RedisKeyValueStore(redis_client).get_value("channel-01")

        assert "kv:channel-01" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unconnected_client_raises(self):
        """Test using a client before connect() raises RedisError."""
        with pytest.raises(RedisError):
            await RedisKeyValueStore(RedisClient(Settings())).get_value("x")

    def test_get_redis_requires_init(self):
        """Test the global client must be initialized first."""
        with pytest.raises(RedisError):
            get_redis()


class TestInMemoryKeyValueStore:
    """Tests for InMemoryKeyValueStore."""

    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        """Test values can be stored, read and removed."""
        store = InMemoryKeyValueStore()

        await store.set_value("a", "1")

        assert await store.get_value("a") == "1"
        assert await store.delete_value("a") is True
        assert await store.get_value("a") is None
        assert await store.delete_value("a") is False
