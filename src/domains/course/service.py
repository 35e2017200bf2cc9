# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course service.

Reads and updates per learner content completion state on the platform and
keeps the in-memory record of captured assessment attempts for the course
that is currently being played.

Example:
    service = CourseServiceImpl(api_client, settings.course)

    response = await service.get_content_state(
        GetContentStateRequest(
            user_id="u1", batch_id="b1", content_ids=["c1"], course_ids=["co1"]
        )
    )
    status = response.status_of("c1")
"""

import logging
from typing import Protocol

from src.core.config.settings import CourseSettings
from src.domains.course.models import (
    ContentStateResponse,
    CourseContext,
    GetContentStateRequest,
    UpdateContentStateRequest,
)
from src.domains.telemetry.models import Telemetry
from src.infrastructure.api import ApiClient, ApiRequest, HttpRequestType

logger = logging.getLogger(__name__)

LAST_READ_CONTENTID_PREFIX = "lastreadcontentid"


def last_read_content_key(user_id: str, course_id: str, batch_id: str) -> str:
    """Build the preference key holding the last read content of a batch."""
    return f"{LAST_READ_CONTENTID_PREFIX}_{user_id}_{course_id}_{batch_id}"


class CourseService(Protocol):
    """Course operations used by the summarizer."""

    async def get_content_state(
        self, request: GetContentStateRequest
    ) -> ContentStateResponse | None: ...

    async def update_content_state(self, request: UpdateContentStateRequest) -> bool: ...

    def capture_assessment_event(
        self, event: Telemetry, course_context: CourseContext
    ) -> None: ...

    def has_captured_assessment_event(self, course_context: CourseContext) -> bool: ...

    def reset_captured_assessment_events(self) -> None: ...


class CourseServiceImpl:
    """Platform backed course service.

    Attributes:
        captured_assessment_events: ASSESS events carrying an attempt id,
            grouped by ``user/course/batch``. Reset whenever a content is
            opened or an END event has been evaluated.
    """

    def __init__(self, api_client: ApiClient, settings: CourseSettings) -> None:
        """Initialize the course service.

        Args:
            api_client: Platform API client.
            settings: Course settings holding the API path.
        """
        self._api_client = api_client
        self._settings = settings
        self.captured_assessment_events: dict[str, list[Telemetry]] = {}

    @staticmethod
    def _attempt_key(course_context: CourseContext) -> str:
        return (
            f"{course_context.user_id}/{course_context.course_id}/"
            f"{course_context.batch_id}"
        )

    async def get_content_state(
        self, request: GetContentStateRequest
    ) -> ContentStateResponse | None:
        """Read the completion state of contents in a batch.

        Args:
            request: Learner, batch and contents to read.

        Returns:
            The content states, or None when the platform returned no result.

        Raises:
            ApiError: If the platform call fails.
        """
        api_request = (
            ApiRequest.builder()
            .with_type(HttpRequestType.POST)
            .with_path(f"{self._settings.course_api_path}/content/state/read")
            .with_body({"request": request.to_wire()})
            .with_api_token(True)
            .with_user_token(True)
            .build()
        )
        response = await self._api_client.fetch(api_request)

        result = response.body.get("result")
        if not result:
            return None
        return ContentStateResponse.model_validate(result)

    async def update_content_state(self, request: UpdateContentStateRequest) -> bool:
        """Report the completion state of one content.

        Raises:
            ApiError: If the platform call fails.
        """
        contents = [
            {
                "contentId": request.content_id,
                "courseId": request.course_id,
                "batchId": request.batch_id,
                "status": request.status,
                "progress": request.progress,
            }
        ]
        api_request = (
            ApiRequest.builder()
            .with_type(HttpRequestType.PATCH)
            .with_path(f"{self._settings.course_api_path}/content/state/update")
            .with_body({"request": {"userId": request.user_id, "contents": contents}})
            .with_api_token(True)
            .with_user_token(True)
            .build()
        )
        await self._api_client.fetch(api_request)

        logger.info(
            "Updated content state: content=%s, course=%s, status=%s",
            request.content_id,
            request.course_id,
            request.status,
        )
        return True

    def capture_assessment_event(
        self, event: Telemetry, course_context: CourseContext
    ) -> None:
        """Record an attempt-correlated ASSESS event for a course context."""
        key = self._attempt_key(course_context)
        self.captured_assessment_events.setdefault(key, []).append(event)

    def has_captured_assessment_event(self, course_context: CourseContext) -> bool:
        return bool(self.captured_assessment_events.get(self._attempt_key(course_context)))

    def reset_captured_assessment_events(self) -> None:
        self.captured_assessment_events = {}
