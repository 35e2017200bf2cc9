# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from contextlib import asynccontextmanager
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config import clear_settings_cache
from src.domains.telemetry import Telemetry
from src.infrastructure.cache import InMemoryKeyValueStore
from src.infrastructure.events import reset_event_bus


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Reset cached settings and the event bus around each test."""
    clear_settings_cache()
    reset_event_bus()
    yield
    clear_settings_cache()
    reset_event_bus()


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def key_value_store() -> InMemoryKeyValueStore:
    """Provide an empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.execute = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def session_factory(mock_db):
    """Provide a session factory yielding the mock database session."""

    @asynccontextmanager
    async def factory():
        yield mock_db

    return factory


@pytest.fixture
def make_telemetry() -> Callable[..., Telemetry]:
    """Build telemetry events with content player defaults."""

    def factory(
        eid: str,
        actor_id: str = "u1",
        object_id: str = "c1",
        object_type: str = "Content",
        pid: str | None = "sunbird.app.contentplayer",
        cdata: list[dict[str, str]] | None = None,
        edata: dict[str, Any] | None = None,
        ets: int = 1700000000000,
    ) -> Telemetry:
        return Telemetry.model_validate(
            {
                "eid": eid,
                "ets": ets,
                "mid": f"{eid}:{object_id}",
                "actor": {"id": actor_id, "type": "User"},
                "context": {
                    "channel": "channel_01",
                    "pdata": {"id": "learnsync.app", "pid": pid, "ver": "1.0"},
                    "env": "contentplayer",
                    "cdata": cdata or [],
                },
                "object": {"id": object_id, "type": object_type},
                "edata": edata or {},
            }
        )

    return factory
