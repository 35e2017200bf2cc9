# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Centralized event namespace and event type definitions.

Every bus event belongs to a namespace and carries a type string. Using
constants instead of string literals keeps publishers and subscribers in
sync.
"""

from enum import Enum


class EventNamespace(str, Enum):
    """Namespaces events are published under."""

    AUTH = "auth"
    CONTENT = "content"
    COURSE = "course"
    DOWNLOADS = "downloads"
    PROFILE = "profile"
    TELEMETRY = "telemetry"


class ContentEventType:
    """Events published in the CONTENT namespace."""

    COURSE_STATE_UPDATED = "COURSE_STATE_UPDATED"


class TelemetryEventType:
    """Events published in the TELEMETRY namespace."""

    SAVED = "SAVED"


class EventPatterns:
    """Wildcard patterns for subscribing to several namespaces."""

    ALL = "*"
