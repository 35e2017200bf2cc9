# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the preference store adapter."""

from unittest.mock import AsyncMock

import pytest

from src.infrastructure.cache import RedisError
from src.infrastructure.preferences import (
    ContentKeys,
    KeyValueSharedPreferences,
    SharedPreferences,
)


@pytest.fixture
def failing_store():
    """Create a native store whose every call fails."""
    store = AsyncMock()
    store.get_value.side_effect = RedisError("connection refused")
    store.set_value.side_effect = RedisError("connection refused")
    return store


class TestKeyValueSharedPreferences:
    """Tests for KeyValueSharedPreferences."""

    @pytest.mark.asyncio
    async def test_put_then_get(self, key_value_store):
        """Test a written value is read back."""
        prefs = KeyValueSharedPreferences(key_value_store)

        await prefs.put_string(ContentKeys.COURSE_CONTEXT, '{"courseId": "co1"}')

        assert await prefs.get_string(ContentKeys.COURSE_CONTEXT) == '{"courseId": "co1"}'

    @pytest.mark.asyncio
    async def test_keys_are_scoped(self, key_value_store):
        """Test values are stored under the scope prefix."""
        prefs = KeyValueSharedPreferences(key_value_store, scope="learner")

        await prefs.put_string("channel_id", "ch1")

        assert key_value_store.snapshot() == {"learner.channel_id": "ch1"}

    @pytest.mark.asyncio
    async def test_missing_value_is_none(self, key_value_store):
        """Test an unknown key reads as None."""
        prefs = KeyValueSharedPreferences(key_value_store)

        assert await prefs.get_string("missing") is None

    @pytest.mark.asyncio
    async def test_read_failure_reads_as_absent(self, failing_store):
        """Test native read errors resolve to None instead of raising."""
        prefs = KeyValueSharedPreferences(failing_store)

        assert await prefs.get_string(ContentKeys.COURSE_CONTEXT) is None

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self, failing_store):
        """Test native write errors resolve to None instead of raising."""
        prefs = KeyValueSharedPreferences(failing_store)

        assert await prefs.put_string(ContentKeys.COURSE_CONTEXT, "") is None
        failing_store.set_value.assert_awaited_once_with("prefs.content_course_context", "")

    def test_satisfies_protocol(self, key_value_store):
        """Test the adapter implements SharedPreferences."""
        assert isinstance(KeyValueSharedPreferences(key_value_store), SharedPreferences)
