# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event infrastructure module for the LearnSync SDK.

Components:
- EventBus: In-memory pub/sub with namespace pattern matching
- EventNamespace and event type constants

Quick Start:
    from src.infrastructure.events import (
        ContentEventType,
        EventNamespace,
        get_event_bus,
    )

    event_bus = get_event_bus()
    event_bus.subscribe(EventNamespace.CONTENT, my_handler)

    await event_bus.emit(
        EventNamespace.CONTENT,
        {
            "type": ContentEventType.COURSE_STATE_UPDATED,
            "payload": {"contentId": "course_1"},
        },
    )
"""

from src.infrastructure.events.bus import (
    EventBus,
    EventData,
    EventHandler,
    get_event_bus,
    reset_event_bus,
)
from src.infrastructure.events.types import (
    ContentEventType,
    EventNamespace,
    EventPatterns,
    TelemetryEventType,
)

__all__ = [
    # Event Bus
    "EventBus",
    "EventData",
    "EventHandler",
    "get_event_bus",
    "reset_event_bus",
    # Event Types
    "EventNamespace",
    "EventPatterns",
    "ContentEventType",
    "TelemetryEventType",
]
