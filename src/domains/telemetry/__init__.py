# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Telemetry domain package.

Provides the immutable telemetry event model consumed by the summarizer and
the interface used to log session START/END events.
"""

from src.domains.telemetry.models import (
    Actor,
    Context,
    CorrelationData,
    ProducerData,
    Rollup,
    Telemetry,
    TelemetryEndRequest,
    TelemetryEventId,
    TelemetryObject,
    TelemetryStartRequest,
)
from src.domains.telemetry.service import TelemetryService

__all__ = [
    "Actor",
    "Context",
    "CorrelationData",
    "ProducerData",
    "Rollup",
    "Telemetry",
    "TelemetryEndRequest",
    "TelemetryEventId",
    "TelemetryObject",
    "TelemetryStartRequest",
    "TelemetryService",
]
