# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Preference store adapter.

The preference store holds a handful of small strings, most importantly the
serialized course context. The adapter wraps a native key-value store and
never fails its callers: a native read error resolves to None (treated as
"value absent") and a native write error resolves to None as well. Both are
logged at WARNING.
"""

import logging
from typing import Protocol, runtime_checkable

from src.infrastructure.cache.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)


class ContentKeys:
    """Preference keys owned by the content/course flow."""

    COURSE_CONTEXT = "content_course_context"


class FrameworkKeys:
    """Preference keys owned by the framework service."""

    KEY_ACTIVE_CHANNEL_ID = "channel_id"


class ProfileKeys:
    """Preference keys owned by the profile flow."""

    KEY_USER_SESSION = "session"


@runtime_checkable
class SharedPreferences(Protocol):
    """Scoped string preference store."""

    async def get_string(self, key: str) -> str | None:
        """Read a preference. None means absent."""
        ...

    async def put_string(self, key: str, value: str) -> None:
        """Write a preference."""
        ...


class KeyValueSharedPreferences:
    """SharedPreferences backed by a native KeyValueStore.

    Attributes:
        scope: Prefix applied to every preference key.
    """

    def __init__(self, native_store: KeyValueStore, scope: str = "prefs") -> None:
        """Initialize the adapter.

        Args:
            native_store: Store the preferences are kept in.
            scope: Prefix applied to every preference key.
        """
        self._native = native_store
        self.scope = scope

    def _key(self, key: str) -> str:
        return f"{self.scope}.{key}"

    async def get_string(self, key: str) -> str | None:
        try:
            return await self._native.get_value(self._key(key))
        except Exception as e:
            logger.warning("Preference read failed for %s: %s", key, e)
            return None

    async def put_string(self, key: str, value: str) -> None:
        try:
            await self._native.set_value(self._key(key), value)
        except Exception as e:
            logger.warning("Preference write failed for %s: %s", key, e)
        return None
