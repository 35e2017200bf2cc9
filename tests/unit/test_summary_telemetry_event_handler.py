# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the summary telemetry event handler."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from src.core.config.settings import SummarizerSettings
from src.domains.content import Content, ContentMarkerRequest, MarkerType, MimeType
from src.domains.course import (
    ContentState,
    ContentStateResponse,
    CourseContext,
    UpdateContentStateRequest,
)
from src.domains.profile import ContentAccess, ContentAccessStatus
from src.domains.summarizer import (
    SummarizerService,
    SummarizerSessionState,
    SummaryPipelineError,
    SummaryTelemetryEventHandler,
    is_completion_valid,
)
from src.domains.telemetry import Telemetry
from src.infrastructure.events import ContentEventType, EventNamespace
from src.infrastructure.preferences import ContentKeys, KeyValueSharedPreferences

IN_PROGRESS_CONTEXT = {"userId": "u1", "courseId": "co1", "batchId": "b1", "batchStatus": 1}


def content_state(status: int) -> ContentStateResponse:
    return ContentStateResponse(content_list=[ContentState(content_id="c1", status=status)])


def video_content(content_type: str = "Resource", mime_type: str = MimeType.VIDEO) -> Content:
    return Content(
        identifier="c1",
        name="Fractions",
        content_type=content_type,
        mime_type=mime_type,
        content_data={"identifier": "c1", "name": "Fractions"},
    )


@pytest.fixture
def course_service():
    """Create a mock course service reporting status 0."""
    service = MagicMock()
    service.get_content_state = AsyncMock(return_value=content_state(0))
    service.update_content_state = AsyncMock(return_value=True)
    service.has_captured_assessment_event.return_value = False
    return service


@pytest.fixture
def content_service():
    """Create a mock content service serving a video."""
    service = MagicMock()
    service.get_content_details = AsyncMock(return_value=video_content())
    service.set_content_marker = AsyncMock(return_value=True)
    return service


@pytest.fixture
def summarizer_service():
    """Create a mock summarizer service."""
    return AsyncMock()


@pytest.fixture
def profile_service():
    """Create a mock profile service."""
    service = MagicMock()
    service.add_content_access = AsyncMock(return_value=True)
    return service


@pytest.fixture
def event_bus():
    """Create a mock event bus."""
    bus = MagicMock()
    bus.emit = AsyncMock()
    return bus


@pytest.fixture
def shared_preferences(key_value_store):
    """Provide preferences over the in-memory store."""
    return KeyValueSharedPreferences(key_value_store)


@pytest.fixture
def sleep():
    """Replace the END event delay."""
    return AsyncMock()


@pytest.fixture
def handler(
    course_service,
    shared_preferences,
    summarizer_service,
    event_bus,
    content_service,
    profile_service,
    sleep,
):
    """Create the handler with mocked collaborators."""
    return SummaryTelemetryEventHandler(
        course_service=course_service,
        shared_preferences=shared_preferences,
        summarizer_service=summarizer_service,
        event_bus=event_bus,
        content_service=content_service,
        profile_service=profile_service,
        settings=SummarizerSettings(),
        sleep=sleep,
    )


@pytest_asyncio.fixture
async def in_progress_course(shared_preferences):
    """Store an in-progress course context preference."""
    await shared_preferences.put_string(ContentKeys.COURSE_CONTEXT, json.dumps(IN_PROGRESS_CONTEXT))


class TestContentStart:
    """Tests for content player START events."""

    @pytest.mark.asyncio
    async def test_start_advances_not_started_content(
        self, handler, in_progress_course, course_service, profile_service, make_telemetry
    ):
        """Test START on a not started content sets status 1 with progress 5."""
        await handler.handle(make_telemetry("START"))

        course_service.update_content_state.assert_awaited_once_with(
            UpdateContentStateRequest(
                user_id="u1", content_id="c1", course_id="co1", batch_id="b1", status=1, progress=5
            )
        )
        profile_service.add_content_access.assert_awaited_once_with(
            ContentAccess(status=ContentAccessStatus.PLAYED, content_id="c1", content_type="Resource")
        )

    @pytest.mark.asyncio
    async def test_start_marks_content_previewed(
        self, handler, in_progress_course, content_service, make_telemetry
    ):
        """Test START sets the PREVIEWED marker for the learner."""
        await handler.handle(make_telemetry("START"))

        marker: ContentMarkerRequest = content_service.set_content_marker.call_args.args[0]
        assert marker.uid == "u1"
        assert marker.content_id == "c1"
        assert marker.marker == MarkerType.PREVIEWED
        assert marker.is_marked is True
        assert json.loads(marker.data) == {"identifier": "c1", "name": "Fractions"}

    @pytest.mark.asyncio
    async def test_start_on_in_progress_content_does_not_update(
        self, handler, in_progress_course, course_service, make_telemetry
    ):
        """Test a repeated START does not advance an in-progress content again."""
        course_service.get_content_state.return_value = content_state(1)

        await handler.handle(make_telemetry("START"))
        await handler.handle(make_telemetry("START"))

        course_service.update_content_state.assert_not_called()

    @pytest.mark.asyncio
    async def test_start_records_current_content_and_resets_captures(
        self, handler, course_service, summarizer_service, make_telemetry
    ):
        """Test START remembers the opened content and stores the snapshot."""
        event = make_telemetry("START")

        await handler.handle(event)

        assert handler.state.current_uid == "u1"
        assert handler.state.current_content_id == "c1"
        course_service.reset_captured_assessment_events.assert_called_once()
        summarizer_service.save_learner_assessment_details.assert_awaited_once_with(event)

    @pytest.mark.asyncio
    async def test_start_records_last_read_content(
        self, handler, in_progress_course, key_value_store, make_telemetry
    ):
        """Test START stores the last read content of the batch."""
        await handler.handle(make_telemetry("START"))

        assert key_value_store.snapshot()["prefs.lastreadcontentid_u1_co1_b1"] == "c1"

    @pytest.mark.asyncio
    async def test_no_course_updates_outside_in_progress_batch(
        self, handler, shared_preferences, course_service, key_value_store, make_telemetry
    ):
        """Test an expired batch leaves course state alone."""
        expired = dict(IN_PROGRESS_CONTEXT, batchStatus=2)
        await shared_preferences.put_string(ContentKeys.COURSE_CONTEXT, json.dumps(expired))

        await handler.handle(make_telemetry("START"))

        course_service.get_content_state.assert_not_called()
        course_service.update_content_state.assert_not_called()
        assert "prefs.lastreadcontentid_u1_co1_b1" not in key_value_store.snapshot()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("batch_status", [None, "abc", [1]])
    async def test_unusable_batch_status_still_marks_content_played(
        self,
        handler,
        shared_preferences,
        course_service,
        profile_service,
        content_service,
        key_value_store,
        make_telemetry,
        batch_status,
    ):
        """Test a context without a usable batch status only skips course updates."""
        context = dict(IN_PROGRESS_CONTEXT, batchStatus=batch_status)
        await shared_preferences.put_string(ContentKeys.COURSE_CONTEXT, json.dumps(context))

        await handler.handle(make_telemetry("START"))

        assert handler.state.course_context.is_batch_in_progress is False
        course_service.update_content_state.assert_not_called()
        profile_service.add_content_access.assert_awaited_once()
        content_service.set_content_marker.assert_awaited_once()
        assert "prefs.lastreadcontentid_u1_co1_b1" not in key_value_store.snapshot()

    @pytest.mark.asyncio
    async def test_unreadable_course_context_is_treated_as_empty(
        self, handler, shared_preferences, course_service, profile_service, make_telemetry
    ):
        """Test a corrupt course context preference does not abort START."""
        await shared_preferences.put_string(ContentKeys.COURSE_CONTEXT, "{not json")

        await handler.handle(make_telemetry("START"))

        assert handler.state.course_context.is_empty
        course_service.get_content_state.assert_not_called()
        profile_service.add_content_access.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_start_snapshot_writes_nothing_to_local_store(
        self,
        course_service,
        shared_preferences,
        event_bus,
        content_service,
        profile_service,
        session_factory,
        mock_db,
        make_telemetry,
    ):
        """Test the content open snapshot leaves the local store untouched."""
        handler = SummaryTelemetryEventHandler(
            course_service=course_service,
            shared_preferences=shared_preferences,
            summarizer_service=SummarizerService(session_factory),
            event_bus=event_bus,
            content_service=content_service,
            profile_service=profile_service,
            settings=SummarizerSettings(),
        )

        await handler.handle(make_telemetry("START"))

        mock_db.execute.assert_not_called()
        mock_db.add.assert_not_called()
        profile_service.add_content_access.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_course_updates_without_course_context(
        self, handler, course_service, profile_service, make_telemetry
    ):
        """Test a content opened outside a course is only marked as played."""
        await handler.handle(make_telemetry("START"))

        course_service.update_content_state.assert_not_called()
        profile_service.add_content_access.assert_awaited_once()


class TestContentEnd:
    """Tests for content player END events."""

    @pytest.mark.asyncio
    async def test_valid_video_completion(
        self, handler, in_progress_course, course_service, event_bus, sleep, make_telemetry
    ):
        """Test a video watched past 20% completes with progress 100."""
        course_service.get_content_state.return_value = content_state(1)

        await handler.handle(make_telemetry("END", edata={"summary": [{"progress": 25}]}))

        course_service.update_content_state.assert_awaited_once_with(
            UpdateContentStateRequest(
                user_id="u1", content_id="c1", course_id="co1", batch_id="b1", status=2, progress=100
            )
        )
        event_bus.emit.assert_awaited_once_with(
            EventNamespace.CONTENT,
            {
                "type": ContentEventType.COURSE_STATE_UPDATED,
                "payload": {"contentId": "co1"},
            },
        )
        sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_insufficient_progress_still_records_last_read(
        self, handler, in_progress_course, course_service, event_bus, key_value_store, make_telemetry
    ):
        """Test an incomplete playback updates nothing but the last read content."""
        await handler.handle(make_telemetry("END", edata={"summary": [{"progress": 10}]}))

        course_service.update_content_state.assert_not_called()
        event_bus.emit.assert_not_called()
        assert key_value_store.snapshot()["prefs.lastreadcontentid_u1_co1_b1"] == "c1"

    @pytest.mark.asyncio
    async def test_completed_content_not_reevaluated(
        self, handler, in_progress_course, course_service, content_service, make_telemetry
    ):
        """Test END on a completed content skips the completion check."""
        course_service.get_content_state.return_value = content_state(2)

        await handler.handle(make_telemetry("END", edata={"summary": [{"progress": 100}]}))

        content_service.get_content_details.assert_not_called()
        course_service.update_content_state.assert_not_called()

    @pytest.mark.asyncio
    async def test_assessment_gated_content_with_capture_is_invalid(
        self, handler, in_progress_course, course_service, content_service, make_telemetry
    ):
        """Test a self assessment with a captured attempt is not completed by playback."""
        content_service.get_content_details.return_value = video_content(
            content_type="SelfAssess", mime_type=MimeType.ECML
        )
        course_service.has_captured_assessment_event.return_value = True

        await handler.handle(make_telemetry("END", edata={"summary": [{"progress": 100}]}))

        course_service.update_content_state.assert_not_called()
        course_service.has_captured_assessment_event.assert_called_once_with(
            CourseContext.model_validate(IN_PROGRESS_CONTEXT)
        )

    @pytest.mark.asyncio
    async def test_captures_reset_after_evaluation(
        self, handler, in_progress_course, course_service, make_telemetry
    ):
        """Test captured assessments are reset once an END event was evaluated."""
        await handler.handle(make_telemetry("END", edata={"summary": [{"progress": 10}]}))

        course_service.reset_captured_assessment_events.assert_called_once()

    @pytest.mark.asyncio
    async def test_end_saves_content_summary(self, handler, summarizer_service, make_telemetry):
        """Test END stores the content summary."""
        event = make_telemetry("END", edata={"summary": []})

        await handler.handle(event)

        summarizer_service.save_learner_content_summary_details.assert_awaited_once_with(event)


class TestAssess:
    """Tests for content player ASSESS events."""

    @pytest.mark.asyncio
    async def test_first_assess_after_start_clears_previous_attempt(
        self, handler, summarizer_service, make_telemetry
    ):
        """Test answers of the earlier attempt are removed once per content open."""
        await handler.handle(make_telemetry("START", actor_id="U1", object_id="C1"))

        await handler.handle(make_telemetry("ASSESS", actor_id="u1", object_id="c1"))
        await handler.handle(make_telemetry("ASSESS", actor_id="u1", object_id="c1"))

        summarizer_service.delete_previous_assessment_details.assert_awaited_once_with("U1", "C1")
        assert handler.state.current_uid is None
        assert handler.state.current_content_id is None

    @pytest.mark.asyncio
    async def test_assess_for_other_content_keeps_previous_attempt(
        self, handler, summarizer_service, make_telemetry
    ):
        """Test ASSESS for a different content does not delete answers."""
        await handler.handle(make_telemetry("START", object_id="c1"))

        await handler.handle(make_telemetry("ASSESS", object_id="c2"))

        summarizer_service.delete_previous_assessment_details.assert_not_called()
        assert handler.state.current_content_id == "c1"

    @pytest.mark.asyncio
    async def test_attempt_is_captured_with_course_context(
        self, handler, in_progress_course, course_service, summarizer_service, make_telemetry
    ):
        """Test an ASSESS with an AttemptId is captured for the active course."""
        event = make_telemetry("ASSESS", cdata=[{"id": "attempt1", "type": "AttemptId"}])

        await handler.handle(event)

        course_service.capture_assessment_event.assert_called_once_with(
            event, CourseContext.model_validate(IN_PROGRESS_CONTEXT)
        )
        summarizer_service.save_learner_assessment_details.assert_awaited_once_with(event)

    @pytest.mark.asyncio
    async def test_attempt_not_captured_without_course_context(
        self, handler, course_service, make_telemetry
    ):
        """Test attempts outside a course are not captured."""
        await handler.handle(make_telemetry("ASSESS", cdata=[{"id": "attempt1", "type": "AttemptId"}]))

        course_service.capture_assessment_event.assert_not_called()

    @pytest.mark.asyncio
    async def test_assess_without_attempt_id_not_captured(
        self, handler, in_progress_course, course_service, make_telemetry
    ):
        """Test ASSESS events without an attempt id are not captured."""
        await handler.handle(make_telemetry("ASSESS", cdata=[{"id": "x", "type": "Other"}]))

        course_service.capture_assessment_event.assert_not_called()


class TestCourseEvents:
    """Tests for course START and END events."""

    @pytest.mark.asyncio
    async def test_course_start_loads_context(
        self, handler, in_progress_course, course_service, make_telemetry
    ):
        """Test a course START only loads the course context."""
        await handler.handle(make_telemetry("START", object_id="co1", object_type="Course", pid="app"))

        assert handler.state.course_context.course_id == "co1"
        course_service.get_content_state.assert_not_called()

    @pytest.mark.asyncio
    async def test_course_end_clears_context(
        self, handler, in_progress_course, shared_preferences, make_telemetry
    ):
        """Test a course END empties the context in memory and in preferences."""
        await handler.handle(make_telemetry("START", object_id="co1", object_type="course", pid="app"))

        await handler.handle(make_telemetry("END", object_id="co1", object_type="COURSE", pid="app"))

        assert await shared_preferences.get_string(ContentKeys.COURSE_CONTEXT) == ""
        assert handler.state.course_context == CourseContext()


class TestDispatch:
    """Tests for event classification."""

    @pytest.mark.asyncio
    async def test_unrelated_events_are_ignored(
        self, handler, course_service, summarizer_service, make_telemetry
    ):
        """Test events matching no rule have no side effects."""
        await handler.handle(make_telemetry("INTERACT"))
        await handler.handle(make_telemetry("START", pid=None))
        await handler.handle(make_telemetry("END", pid="other.player"))

        summarizer_service.assert_not_called()
        summarizer_service.save_learner_assessment_details.assert_not_called()
        summarizer_service.save_learner_content_summary_details.assert_not_called()
        course_service.reset_captured_assessment_events.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("eid", ["START", "END", "ASSESS"])
    @pytest.mark.parametrize("pid", ["sunbird.app.contentplayer", "learnsync.app"])
    async def test_events_without_object_are_ignored(
        self, handler, in_progress_course, course_service, summarizer_service, eid, pid
    ):
        """Test session events without an object have no side effects."""
        event = Telemetry.model_validate(
            {"eid": eid, "actor": {"id": "u1"}, "context": {"pdata": {"pid": pid}}}
        )

        await handler.handle(event)

        assert event.object is None
        summarizer_service.save_learner_assessment_details.assert_not_called()
        summarizer_service.save_learner_content_summary_details.assert_not_called()
        course_service.reset_captured_assessment_events.assert_not_called()
        course_service.get_content_state.assert_not_called()
        assert handler.state.current_uid is None

    @pytest.mark.asyncio
    async def test_explicit_state_is_isolated(self, handler, make_telemetry):
        """Test sessions passing their own state do not share scratch fields."""
        first = SummarizerSessionState()
        second = SummarizerSessionState()

        await handler.handle(make_telemetry("START", actor_id="u1", object_id="c1"), first)
        await handler.handle(make_telemetry("START", actor_id="u2", object_id="c2"), second)

        assert (first.current_uid, first.current_content_id) == ("u1", "c1")
        assert (second.current_uid, second.current_content_id) == ("u2", "c2")
        assert handler.state.current_uid is None

    @pytest.mark.asyncio
    async def test_lazy_context_load_for_assess(
        self, handler, in_progress_course, course_service, make_telemetry
    ):
        """Test an empty in-memory context is loaded from preferences."""
        assert handler.state.course_context.is_empty

        await handler.handle(make_telemetry("ASSESS", cdata=[{"id": "a", "type": "AttemptId"}]))

        assert handler.state.course_context.is_populated
        course_service.capture_assessment_event.assert_called_once()


class TestFailures:
    """Tests for failure propagation."""

    @pytest.mark.asyncio
    async def test_failed_step_reports_applied_steps(
        self, handler, in_progress_course, course_service, summarizer_service, make_telemetry
    ):
        """Test a failing update raises with the applied steps and keeps them."""
        error = RuntimeError("platform down")
        course_service.update_content_state.side_effect = error

        with pytest.raises(SummaryPipelineError) as exc_info:
            await handler.handle(make_telemetry("START"))

        assert exc_info.value.step == "update_content_state"
        assert exc_info.value.completed_steps == [
            "reset_captured_assessments",
            "record_current_content",
            "save_assessment_details",
            "reload_course_context",
        ]
        assert exc_info.value.__cause__ is error
        summarizer_service.save_learner_assessment_details.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_captures_reset_when_content_lookup_fails(
        self, handler, in_progress_course, course_service, content_service, make_telemetry
    ):
        """Test captured assessments are reset even if content details fail."""
        content_service.get_content_details.side_effect = RuntimeError("offline")

        with pytest.raises(SummaryPipelineError):
            await handler.handle(make_telemetry("END", edata={"summary": [{"progress": 50}]}))

        course_service.reset_captured_assessment_events.assert_called_once()


class TestCompletionRules:
    """Tests for END event completion rules."""

    @pytest.mark.parametrize(
        "mime_type,progress,expected",
        [
            (MimeType.VIDEO, 20, True),
            (MimeType.VIDEO, 19, False),
            (MimeType.YOUTUBE, 20, True),
            (MimeType.WEBM, 19.9, False),
            (MimeType.H5P, 0, True),
            (MimeType.HTML, 1, True),
            (MimeType.PDF, 99, False),
            (MimeType.PDF, 100, True),
            (MimeType.ECML, 100, True),
        ],
    )
    def test_threshold_by_mime_type(self, mime_type, progress, expected):
        """Test the progress needed to complete each content kind."""
        content = video_content(mime_type=mime_type)

        assert is_completion_valid(content, [{"progress": progress}], False) is expected

    def test_archive_content_needs_a_sample(self):
        """Test H5P/HTML contents need at least one playback sample."""
        assert is_completion_valid(video_content(mime_type=MimeType.H5P), [], False) is False

    @pytest.mark.parametrize(
        "progress, expected",
        [("25", True), ("20.0", True), ("19", False), ("n/a", False), (None, False), (True, False)],
    )
    def test_progress_given_as_text(self, progress, expected):
        """Test numeric strings count as progress and other values are ignored."""
        assert is_completion_valid(video_content(), [{"progress": progress}], False) is expected

    def test_any_sample_may_qualify(self):
        """Test a single qualifying sample among others is enough."""
        summary = [{"progress": 5}, {}, {"progress": 30}]

        assert is_completion_valid(video_content(), summary, False) is True

    @pytest.mark.parametrize("content_type", ["SelfAssess", "selfassess", "OnboardingResource"])
    def test_gated_content_with_capture_never_completes(self, content_type):
        """Test assessment gated content with a captured attempt is invalid."""
        content = video_content(content_type=content_type)

        assert is_completion_valid(content, [{"progress": 100}], True) is False

    def test_gated_content_without_capture_uses_progress(self):
        """Test assessment gated content without a capture follows mime rules."""
        content = video_content(content_type="SelfAssess", mime_type=MimeType.ECML)

        assert is_completion_valid(content, [{"progress": 100}], False) is True

    def test_capture_ignored_for_regular_content(self):
        """Test captures only gate assessment content types."""
        assert is_completion_valid(video_content(), [{"progress": 25}], True) is True
