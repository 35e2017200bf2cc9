# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory event bus for the LearnSync SDK.

This module provides an async event bus for decoupled communication
between SDK components. Events are emitted under a namespace and carry
``{"type": ..., "payload": {...}}``.

The EventBus supports:
- Exact namespace matching (e.g., "content")
- Wildcard pattern matching (e.g., "*", "co*")
- Async handlers
- Multiple handlers per namespace

Example:
    from src.infrastructure.events import get_event_bus, EventNamespace

    event_bus = get_event_bus()

    async def on_content_event(event):
        print(f"{event.event_type}: {event.payload}")

    event_bus.subscribe(EventNamespace.CONTENT, on_content_event)

    await event_bus.emit(
        EventNamespace.CONTENT,
        {"type": "COURSE_STATE_UPDATED", "payload": {"contentId": "course_1"}},
    )
"""

import asyncio
import fnmatch
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable
from uuid import uuid4

from src.infrastructure.events.types import EventNamespace

logger = logging.getLogger(__name__)

# Type alias for event handlers
EventHandler = Callable[[Any], Awaitable[None]]


@dataclass
class EventData:
    """Container for an emitted event with metadata.

    Attributes:
        namespace: Namespace the event was emitted under.
        event_type: The event type string.
        payload: The event payload data.
        event_id: Unique event identifier.
        timestamp: When the event was emitted.
    """

    namespace: str
    event_type: str
    payload: dict[str, Any]
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire shape ``{namespace, event: {type, payload}}``."""
        return {
            "namespace": self.namespace,
            "event": {
                "type": self.event_type,
                "payload": self.payload,
            },
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
        }


def _namespace_value(namespace: EventNamespace | str) -> str:
    if isinstance(namespace, EventNamespace):
        return namespace.value
    return namespace


class EventBus:
    """In-memory async event bus with namespace pattern matching.

    Thread-safety: This implementation is designed for single-threaded
    async use.

    Example:
        bus = EventBus()
        bus.subscribe(EventNamespace.CONTENT, handler)
        bus.subscribe("*", audit_handler)
        await bus.emit(EventNamespace.CONTENT, {"type": "X", "payload": {}})
    """

    def __init__(self) -> None:
        """Initialize the event bus."""
        self._handlers: dict[str, list[EventHandler]] = {}
        self._pattern_handlers: dict[str, list[EventHandler]] = {}
        self._event_count = 0
        logger.debug("EventBus initialized")

    def subscribe(
        self,
        namespace: EventNamespace | str,
        handler: EventHandler,
    ) -> None:
        """Subscribe a handler to a namespace or namespace pattern.

        Args:
            namespace: Namespace or pattern with wildcards.
            handler: Async function called with the EventData.
        """
        key = _namespace_value(namespace)
        if "*" in key or "?" in key:
            self._pattern_handlers.setdefault(key, []).append(handler)
            logger.debug("Subscribed pattern handler to: %s", key)
        else:
            self._handlers.setdefault(key, []).append(handler)
            logger.debug("Subscribed handler to: %s", key)

    def unsubscribe(
        self,
        namespace: EventNamespace | str,
        handler: EventHandler,
    ) -> bool:
        """Unsubscribe a handler from a namespace or pattern.

        Returns:
            True if handler was found and removed, False otherwise.
        """
        key = _namespace_value(namespace)
        registry = (
            self._pattern_handlers if "*" in key or "?" in key else self._handlers
        )
        handlers = registry.get(key)
        if not handlers:
            return False
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        if not handlers:
            del registry[key]
        return True

    async def emit(
        self,
        namespace: EventNamespace | str,
        event: dict[str, Any],
    ) -> EventData:
        """Emit an event to all matching subscribers.

        Handlers are called concurrently using asyncio.gather. Errors in
        individual handlers are logged but don't stop other handlers and
        never reach the emitter.

        Args:
            namespace: Namespace the event belongs to.
            event: Mapping with "type" and an optional "payload".

        Returns:
            EventData object with event metadata.
        """
        key = _namespace_value(namespace)
        data = EventData(
            namespace=key,
            event_type=event["type"],
            payload=dict(event.get("payload") or {}),
        )

        self._event_count += 1

        handlers_to_call: list[EventHandler] = list(self._handlers.get(key, []))
        for pattern, pattern_handlers in self._pattern_handlers.items():
            if fnmatch.fnmatch(key, pattern):
                handlers_to_call.extend(pattern_handlers)

        if not handlers_to_call:
            logger.debug("No handlers for event: %s/%s", key, data.event_type)
            return data

        logger.debug(
            "Emitting event %s/%s to %d handlers",
            key,
            data.event_type,
            len(handlers_to_call),
        )

        async def safe_call(handler: EventHandler) -> None:
            try:
                await handler(data)
            except Exception as e:
                logger.error(
                    "Handler error for event %s/%s: %s",
                    key,
                    data.event_type,
                    str(e),
                    exc_info=True,
                )

        await asyncio.gather(
            *[safe_call(handler) for handler in handlers_to_call],
            return_exceptions=True,
        )

        return data

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._handlers.clear()
        self._pattern_handlers.clear()
        logger.debug("EventBus cleared all subscriptions")

    def get_stats(self) -> dict[str, Any]:
        """Get event bus statistics.

        Returns:
            Dictionary with subscription and event counts.
        """
        exact_count = sum(len(h) for h in self._handlers.values())
        pattern_count = sum(len(h) for h in self._pattern_handlers.values())

        return {
            "exact_subscriptions": len(self._handlers),
            "pattern_subscriptions": len(self._pattern_handlers),
            "total_handlers": exact_count + pattern_count,
            "events_emitted": self._event_count,
            "namespaces": list(self._handlers.keys()),
            "patterns": list(self._pattern_handlers.keys()),
        }


# Singleton instance
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the singleton event bus instance."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the event bus singleton.

    Useful for testing to ensure clean state between tests.
    """
    global _event_bus
    if _event_bus is not None:
        _event_bus.clear()
    _event_bus = None
