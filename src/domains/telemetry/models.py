# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Telemetry event models.

Telemetry events are produced by the content player and other SDK
components for every learner interaction. Field names follow the wire
format, so events coming off the bus can be validated directly:

    event = Telemetry.model_validate(
        {
            "eid": "START",
            "actor": {"id": "u1", "type": "User"},
            "context": {"pdata": {"id": "app", "pid": "contentplayer"}},
            "object": {"id": "c1", "type": "Content"},
        }
    )

Events are immutable once built.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TelemetryEventId:
    """Known values of the ``eid`` field."""

    START = "START"
    END = "END"
    ASSESS = "ASSESS"
    INTERACT = "INTERACT"
    IMPRESSION = "IMPRESSION"
    RESPONSE = "RESPONSE"
    INTERRUPT = "INTERRUPT"
    ERROR = "ERROR"
    LOG = "LOG"
    SHARE = "SHARE"


class _TelemetryModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")


class Actor(_TelemetryModel):
    """Who performed the interaction."""

    id: str
    type: str = "User"


class ProducerData(_TelemetryModel):
    """Which component produced the event.

    Attributes:
        id: Producer application id.
        pid: Producer component id, e.g. ``sunbird.app.contentplayer``.
        ver: Producer version.
    """

    id: str = ""
    pid: str | None = None
    ver: str = ""


class CorrelationData(_TelemetryModel):
    """A correlation tag such as an attempt id."""

    id: str
    type: str


class Rollup(_TelemetryModel):
    l1: str | None = None
    l2: str | None = None
    l3: str | None = None
    l4: str | None = None


class Context(_TelemetryModel):
    """Where the interaction happened."""

    channel: str = ""
    pdata: ProducerData | None = None
    env: str = ""
    sid: str | None = None
    did: str | None = None
    cdata: tuple[CorrelationData, ...] = ()
    rollup: Rollup | None = None


class TelemetryObject(_TelemetryModel):
    """What the interaction was about."""

    id: str
    type: str = ""
    ver: str | None = None
    rollup: Rollup | None = None


class Telemetry(_TelemetryModel):
    """A single telemetry event.

    Attributes:
        eid: Event id, one of :class:`TelemetryEventId`.
        ets: Event timestamp in epoch milliseconds.
        mid: Message id.
        ver: Telemetry schema version.
        actor: Who performed the interaction.
        context: Where it happened and who produced the event.
        object: The content or course the event is about. Session events
            usually have none.
        edata: Event specific payload. END events carry a ``summary`` list of
            playback samples, ASSESS events an ``item`` description.
        tags: Free form tags.
    """

    eid: str
    ets: int = 0
    mid: str = ""
    ver: str = "3.0"
    actor: Actor
    context: Context = Field(default_factory=Context)
    object: TelemetryObject | None = None
    edata: dict[str, Any] = Field(default_factory=dict)
    tags: tuple[str, ...] = ()

    @property
    def producer_id(self) -> str | None:
        """Return ``context.pdata.pid`` when present."""
        if self.context.pdata is None:
            return None
        return self.context.pdata.pid

    def find_cdata(self, cdata_type: str) -> CorrelationData | None:
        """Return the first correlation tag of the given type."""
        for cdata in self.context.cdata:
            if cdata.type == cdata_type:
                return cdata
        return None

    @property
    def summary(self) -> list[dict[str, Any]]:
        """Playback samples reported by an END event, empty if absent."""
        samples = self.edata.get("summary")
        if not isinstance(samples, list):
            return []
        return [sample for sample in samples if isinstance(sample, dict)]


class TelemetryStartRequest(BaseModel):
    """Request to log a START event for a session or content."""

    type: str
    mode: str = ""
    env: str = "sdk"
    object_id: str | None = None
    object_type: str | None = None


class TelemetryEndRequest(BaseModel):
    """Request to log an END event.

    Attributes:
        duration: Elapsed time in seconds since the matching START.
    """

    type: str
    mode: str = ""
    env: str = "sdk"
    duration: float = 0.0
    object_id: str | None = None
    object_type: str | None = None
