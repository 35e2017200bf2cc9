# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course progress tracking from telemetry events.

The SummaryTelemetryEventHandler consumes telemetry events one at a time and
keeps the learner's course progress up to date:

- Content player START: the content is opened. Its status advances from
  "not started" to "in progress" and it is marked as played.
- Content player ASSESS: an answer is stored. Answers carrying an attempt id
  are remembered for the active course.
- Content player END: the play summary is stored and, when the playback
  qualifies as a completion, the content status advances to "completed".
- Course START / END: the course context is loaded / cleared.

Course state is only updated while the active batch is in progress. Each
event runs as a pipeline of named steps (see pipeline.py); a failing step
raises SummaryPipelineError and earlier steps are not undone.

Example:
    handler = SummaryTelemetryEventHandler(
        course_service=course_service,
        shared_preferences=shared_preferences,
        summarizer_service=summarizer_service,
        event_bus=event_bus,
        content_service=content_service,
        profile_service=profile_service,
        settings=settings.summarizer,
    )

    await handler.handle(event)

    # One state per learner session when several sessions share a handler
    state = SummarizerSessionState()
    await handler.handle(event, state)
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from src.core.config.settings import SummarizerSettings
from src.domains.content.models import (
    Content,
    ContentDetailRequest,
    ContentMarkerRequest,
    MarkerType,
    MimeType,
)
from src.domains.content.service import ContentService
from src.domains.course.models import (
    ContentStatus,
    CourseContext,
    GetContentStateRequest,
    UpdateContentStateRequest,
)
from src.domains.course.service import CourseService, last_read_content_key
from src.domains.profile.interfaces import ProfileService
from src.domains.profile.models import ContentAccess, ContentAccessStatus
from src.domains.summarizer.pipeline import PipelineStep, run_pipeline
from src.domains.summarizer.service import SummarizerService
from src.domains.telemetry.models import Telemetry, TelemetryEventId
from src.infrastructure.events import ContentEventType, EventBus, EventNamespace
from src.infrastructure.preferences import ContentKeys, SharedPreferences
from src.utils.logging import log_context

logger = logging.getLogger(__name__)

ATTEMPT_ID_CDATA_TYPE = "AttemptId"
COURSE_OBJECT_TYPE = "course"
ASSESSMENT_GATED_CONTENT_TYPES = frozenset({"selfassess", "onboardingresource"})

VIDEO_MIN_PROGRESS = 20
ARCHIVE_MIN_PROGRESS = 0
DEFAULT_MIN_PROGRESS = 100

CONTENT_OPEN_PROGRESS = 5
CONTENT_COMPLETE_PROGRESS = 100


@dataclass
class SummarizerSessionState:
    """State carried between events of one learner session.

    Attributes:
        current_uid: Learner of the content opened last.
        current_content_id: Content opened last. Cleared together with
            current_uid once an ASSESS event for the pair has removed the
            answers of the previous attempt.
        course_context: Cached copy of the course context preference.
    """

    current_uid: str | None = None
    current_content_id: str | None = None
    course_context: CourseContext = field(default_factory=CourseContext)

    def matches_current(self, uid: str, content_id: str) -> bool:
        """Case-insensitive check against the content opened last."""
        if not self.current_uid or not self.current_content_id:
            return False
        return (
            self.current_uid.lower() == uid.lower()
            and self.current_content_id.lower() == content_id.lower()
        )

    def clear_current(self) -> None:
        self.current_uid = None
        self.current_content_id = None


def required_progress(mime_type: str) -> int:
    """Minimum playback progress that counts as completing a content."""
    if mime_type in MimeType.VIDEO_TYPES:
        return VIDEO_MIN_PROGRESS
    if mime_type in MimeType.ARCHIVE_PLAYER_TYPES:
        return ARCHIVE_MIN_PROGRESS
    return DEFAULT_MIN_PROGRESS


def _progress_value(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def has_progress(summary: list[dict[str, Any]], minimum: float) -> bool:
    """True if any playback sample reached the minimum progress.

    Numeric strings such as ``"25"`` count; samples without a numeric
    progress are ignored.
    """
    for sample in summary:
        progress = _progress_value(sample.get("progress"))
        if progress is not None and progress >= minimum:
            return True
    return False


def is_completion_valid(
    content: Content,
    summary: list[dict[str, Any]],
    assessment_captured: bool,
) -> bool:
    """Decide whether an END event completes a content.

    Assessment gated contents (self assessments, onboarding resources) that
    have a captured assessment attempt are never completed by playback.
    Otherwise the playback summary must reach the progress required for the
    content's mime type.

    Args:
        content: The played content.
        summary: Playback samples of the END event.
        assessment_captured: Whether an attempt was captured for the course.

    Returns:
        True if the content counts as completed.
    """
    if content.content_type.lower() in ASSESSMENT_GATED_CONTENT_TYPES and assessment_captured:
        return False
    return has_progress(summary, required_progress(content.mime_type))


class SummaryTelemetryEventHandler:
    """Updates course progress from telemetry events.

    Attributes:
        state: Session state used when handle() is called without one.
    """

    def __init__(
        self,
        course_service: CourseService,
        shared_preferences: SharedPreferences,
        summarizer_service: SummarizerService,
        event_bus: EventBus,
        content_service: ContentService,
        profile_service: ProfileService,
        settings: SummarizerSettings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the handler.

        Args:
            course_service: Reads and updates remote content state.
            shared_preferences: Holds the course context and last read content.
            summarizer_service: Local store writer for summaries.
            event_bus: Receives COURSE_STATE_UPDATED events.
            content_service: Content details and markers.
            profile_service: Records content access.
            settings: Summarizer settings.
            sleep: Coroutine used for the END event delay.
        """
        self._course_service = course_service
        self._shared_preferences = shared_preferences
        self._summarizer_service = summarizer_service
        self._event_bus = event_bus
        self._content_service = content_service
        self._profile_service = profile_service
        self._settings = settings
        self._sleep = sleep
        self.state = SummarizerSessionState()

    def is_content_player_event(self, event: Telemetry) -> bool:
        pid = event.producer_id
        return pid is not None and self._settings.content_player_pid in pid

    @staticmethod
    def is_course_event(event: Telemetry) -> bool:
        return event.object is not None and event.object.type.lower() == COURSE_OBJECT_TYPE

    async def handle(
        self, event: Telemetry, state: SummarizerSessionState | None = None
    ) -> None:
        """Process one telemetry event.

        Args:
            event: The telemetry event.
            state: Session state to use, the handler's own state if None.

        Raises:
            SummaryPipelineError: If a step fails. Steps completed before
                the failure keep their effect.
        """
        if state is None:
            state = self.state

        steps = self._plan(event, state)
        if not steps:
            return

        with log_context(
            eid=event.eid, actor_id=event.actor.id, object_id=event.object.id
        ):
            completed = await run_pipeline(steps)
            logger.debug("Processed %s event: %s", event.eid, completed)

    def _plan(self, event: Telemetry, state: SummarizerSessionState) -> list[PipelineStep]:
        if event.object is None:
            return []

        def step(name: str, action: Callable[..., Awaitable[None]]) -> PipelineStep:
            return PipelineStep(name, lambda: action(event, state))

        content_player = self.is_content_player_event(event)

        if event.eid == TelemetryEventId.START and content_player:
            return [
                step("reset_captured_assessments", self._reset_captured_assessments),
                step("record_current_content", self._record_current_content),
                # The summarizer only stores ASSESS answers, so this writes nothing.
                step("save_assessment_details", self._save_assessment_details),
                step("reload_course_context", self._reload_course_context),
                step("update_content_state", self._update_content_state),
                step("mark_content_as_played", self._mark_content_as_played),
            ]
        if event.eid == TelemetryEventId.START and self.is_course_event(event):
            return [step("reload_course_context", self._reload_course_context)]
        if event.eid == TelemetryEventId.ASSESS and content_player:
            return [
                step("delete_previous_attempt", self._delete_previous_attempt),
                step("capture_assessment_event", self._capture_assessment_event),
                step("save_assessment_details", self._save_assessment_details),
            ]
        if event.eid == TelemetryEventId.END and content_player:
            return [
                step("save_content_summary", self._save_content_summary),
                step("reload_course_context", self._reload_course_context),
                step("update_content_state", self._update_content_state),
            ]
        if event.eid == TelemetryEventId.END and self.is_course_event(event):
            return [step("clear_course_context", self._clear_course_context)]
        return []

    async def _read_course_context(self) -> CourseContext:
        value = await self._shared_preferences.get_string(ContentKeys.COURSE_CONTEXT)
        if not value:
            return CourseContext()
        try:
            return CourseContext.model_validate(json.loads(value))
        except ValueError as e:
            logger.warning("Ignoring unreadable course context: %s", e)
            return CourseContext()

    async def _course_context(self, state: SummarizerSessionState) -> CourseContext:
        if state.course_context.is_empty:
            state.course_context = await self._read_course_context()
        return state.course_context

    async def _reload_course_context(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        state.course_context = await self._read_course_context()

    async def _clear_course_context(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        state.course_context = CourseContext()
        await self._shared_preferences.put_string(ContentKeys.COURSE_CONTEXT, "")

    async def _reset_captured_assessments(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        self._course_service.reset_captured_assessment_events()

    async def _record_current_content(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        state.current_uid = event.actor.id
        state.current_content_id = event.object.id

    async def _save_assessment_details(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        await self._summarizer_service.save_learner_assessment_details(event)

    async def _save_content_summary(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        await self._summarizer_service.save_learner_content_summary_details(event)

    async def _delete_previous_attempt(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        if not state.matches_current(event.actor.id, event.object.id):
            return
        await self._summarizer_service.delete_previous_assessment_details(
            state.current_uid, state.current_content_id
        )
        state.clear_current()

    async def _capture_assessment_event(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        course_context = await self._course_context(state)
        if event.find_cdata(ATTEMPT_ID_CDATA_TYPE) and course_context.is_populated:
            self._course_service.capture_assessment_event(event, course_context)

    async def _content_status(self, course_context: CourseContext, content_id: str) -> int:
        response = await self._course_service.get_content_state(
            GetContentStateRequest(
                user_id=course_context.user_id,
                batch_id=course_context.batch_id,
                content_ids=[content_id],
                course_ids=[course_context.course_id],
            )
        )
        if response is None:
            return ContentStatus.NOT_STARTED
        return response.status_of(content_id)

    async def _update_content_state(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        course_context = await self._course_context(state)
        if not (course_context.is_populated and course_context.is_batch_in_progress):
            logger.debug("Batch not in progress, content state left unchanged")
            return

        content_id = event.object.id
        status = await self._content_status(course_context, content_id)

        if event.eid == TelemetryEventId.START and status == ContentStatus.NOT_STARTED:
            await self._course_service.update_content_state(
                UpdateContentStateRequest(
                    user_id=course_context.user_id,
                    content_id=content_id,
                    course_id=course_context.course_id,
                    batch_id=course_context.batch_id,
                    status=ContentStatus.IN_PROGRESS,
                    progress=CONTENT_OPEN_PROGRESS,
                )
            )
        elif event.eid == TelemetryEventId.END and status in (
            ContentStatus.NOT_STARTED,
            ContentStatus.IN_PROGRESS,
        ):
            if await self._is_valid_end_event(event, course_context):
                await self._course_service.update_content_state(
                    UpdateContentStateRequest(
                        user_id=course_context.user_id,
                        content_id=content_id,
                        course_id=course_context.course_id,
                        batch_id=course_context.batch_id,
                        status=ContentStatus.COMPLETED,
                        progress=CONTENT_COMPLETE_PROGRESS,
                    )
                )
                await self._event_bus.emit(
                    EventNamespace.CONTENT,
                    {
                        "type": ContentEventType.COURSE_STATE_UPDATED,
                        "payload": {"contentId": course_context.course_id},
                    },
                )
            else:
                logger.info("Content %s not completed by this playback", content_id)

        await self._shared_preferences.put_string(
            last_read_content_key(
                course_context.user_id,
                course_context.course_id,
                course_context.batch_id,
            ),
            content_id,
        )

    async def _is_valid_end_event(
        self, event: Telemetry, course_context: CourseContext
    ) -> bool:
        try:
            content = await self._content_service.get_content_details(
                ContentDetailRequest(content_id=event.object.id)
            )
            await self._sleep(self._settings.end_event_delay_seconds)
            return is_completion_valid(
                content,
                event.summary,
                self._course_service.has_captured_assessment_event(course_context),
            )
        finally:
            self._course_service.reset_captured_assessment_events()

    async def _mark_content_as_played(
        self, event: Telemetry, state: SummarizerSessionState
    ) -> None:
        content_id = event.object.id
        content = await self._content_service.get_content_details(
            ContentDetailRequest(content_id=content_id)
        )
        await self._profile_service.add_content_access(
            ContentAccess(
                status=ContentAccessStatus.PLAYED,
                content_id=content_id,
                content_type=content.content_type,
            )
        )
        await self._content_service.set_content_marker(
            ContentMarkerRequest(
                uid=event.actor.id,
                content_id=content_id,
                data=json.dumps(content.content_data),
                marker=MarkerType.PREVIEWED,
                is_marked=True,
            )
        )
