# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Summarizer service.

Persists learner assessment answers and per content play summaries in the
local store so progress can be shown offline.

Example:
    service = SummarizerService(get_local_session)

    await service.save_learner_assessment_details(assess_event)
    await service.save_learner_content_summary_details(end_event)
"""

import json
import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.telemetry.models import Telemetry, TelemetryEventId
from src.infrastructure.database.models import (
    LearnerAssessmentRecord,
    LearnerContentSummaryRecord,
)

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _number(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _hierarchy_data(event: Telemetry) -> str | None:
    rollup = event.object.rollup or event.context.rollup
    if rollup is None:
        return None
    return json.dumps(rollup.model_dump(exclude_none=True))


class SummarizerService:
    """Local store writer for learner summaries."""

    def __init__(self, session_factory: SessionFactory) -> None:
        """Initialize the summarizer service.

        Args:
            session_factory: Returns an async context manager yielding a
                local store session that commits on exit.
        """
        self._session_factory = session_factory

    async def save_learner_assessment_details(self, event: Telemetry) -> bool:
        """Store the answer carried by an ASSESS event.

        One record is kept per (learner, content, question); answering a
        question again replaces the previous answer.

        Args:
            event: Telemetry event. Events other than ASSESS, or ASSESS
                events without an object or an ``edata.item``, are ignored.
                The content-open START snapshot therefore stores nothing.

        Returns:
            True if a record was written.

        Raises:
            DatabaseError: If the local store operation fails.
        """
        item = event.edata.get("item")
        if (
            event.eid != TelemetryEventId.ASSESS
            or event.object is None
            or not isinstance(item, dict)
        ):
            return False

        qid = str(item.get("id", ""))
        values = {
            "qindex": event.edata.get("index"),
            "correct": str(event.edata.get("pass", "")).lower() == "yes",
            "score": _number(event.edata.get("score")),
            "max_score": _number(item["maxscore"]) if "maxscore" in item else None,
            "time_spent": _number(event.edata.get("duration")),
            "res": json.dumps(event.edata.get("resvalues", [])),
            "qdesc": item.get("desc"),
            "qtitle": item.get("title"),
            "hierarchy_data": _hierarchy_data(event),
            "total_ts": event.ets,
        }

        async with self._session_factory() as session:
            result = await session.execute(
                select(LearnerAssessmentRecord).where(
                    LearnerAssessmentRecord.uid == event.actor.id,
                    LearnerAssessmentRecord.content_id == event.object.id,
                    LearnerAssessmentRecord.qid == qid,
                )
            )
            record = result.scalar_one_or_none()

            if record is None:
                session.add(
                    LearnerAssessmentRecord(
                        uid=event.actor.id,
                        content_id=event.object.id,
                        qid=qid,
                        **values,
                    )
                )
            else:
                for name, value in values.items():
                    setattr(record, name, value)

        logger.debug(
            "Saved assessment answer: uid=%s, content=%s, qid=%s",
            event.actor.id,
            event.object.id,
            qid,
        )
        return True

    async def save_learner_content_summary_details(self, event: Telemetry) -> bool:
        """Fold an END event into the learner's content summary.

        Returns:
            True if the summary was written, False for non END events and
            END events without an object.

        Raises:
            DatabaseError: If the local store operation fails.
        """
        if event.eid != TelemetryEventId.END or event.object is None:
            return False

        duration = _number(event.edata.get("duration"))
        progress = max(
            (_number(sample.get("progress")) for sample in event.summary),
            default=0.0,
        )

        async with self._session_factory() as session:
            result = await session.execute(
                select(LearnerContentSummaryRecord).where(
                    LearnerContentSummaryRecord.uid == event.actor.id,
                    LearnerContentSummaryRecord.content_id == event.object.id,
                )
            )
            record = result.scalar_one_or_none()

            if record is None:
                record = LearnerContentSummaryRecord(
                    uid=event.actor.id,
                    content_id=event.object.id,
                    sessions=0,
                    total_ts=0.0,
                    progress=0.0,
                )
                session.add(record)

            record.sessions += 1
            record.total_ts += duration
            record.avg_ts = record.total_ts / record.sessions
            record.last_updated_on = event.ets
            record.progress = max(record.progress, progress)
            record.hierarchy_data = _hierarchy_data(event)

        logger.debug(
            "Saved content summary: uid=%s, content=%s",
            event.actor.id,
            event.object.id,
        )
        return True

    async def delete_previous_assessment_details(self, uid: str, content_id: str) -> bool:
        """Delete stored answers of an earlier attempt at a content.

        Raises:
            DatabaseError: If the local store operation fails.
        """
        async with self._session_factory() as session:
            await session.execute(
                delete(LearnerAssessmentRecord).where(
                    LearnerAssessmentRecord.uid == uid,
                    LearnerAssessmentRecord.content_id == content_id,
                )
            )

        logger.debug("Deleted previous assessment: uid=%s, content=%s", uid, content_id)
        return True
