# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Telemetry logging interface implemented by the host application."""

from typing import Protocol

from src.domains.telemetry.models import TelemetryEndRequest, TelemetryStartRequest


class TelemetryService(Protocol):
    """Logs START and END telemetry events."""

    async def start(self, request: TelemetryStartRequest) -> bool: ...

    async def end(self, request: TelemetryEndRequest) -> bool: ...
