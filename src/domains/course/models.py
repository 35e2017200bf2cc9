# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models for the course domain.

Request and response models use camelCase aliases so they serialize to the
platform wire format, while Python code addresses them by snake_case name.
"""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize using wire names, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ContentStatus(IntEnum):
    """Per learner completion status of a content inside a course batch."""

    NOT_STARTED = 0
    IN_PROGRESS = 1
    COMPLETED = 2


class BatchStatus(IntEnum):
    """Lifecycle status of a course batch."""

    NOT_STARTED = 0
    IN_PROGRESS = 1
    EXPIRED = 2


class CourseContext(_CamelModel):
    """The learner's active user/course/batch association.

    Mirrored as JSON under the course context preference key. An empty
    context (all fields unset) means no course is being played.

    Attributes:
        user_id: Learner id.
        course_id: Course id.
        batch_id: Batch id.
        batch_status: Batch lifecycle status, 0 when unknown. A stored null
            is kept as None and never counts as in progress.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    user_id: str | None = None
    course_id: str | None = None
    batch_id: str | None = None
    batch_status: int | None = BatchStatus.NOT_STARTED

    @property
    def is_empty(self) -> bool:
        return not (self.user_id or self.course_id or self.batch_id)

    @property
    def is_populated(self) -> bool:
        """True when user, course and batch are all known."""
        return bool(self.user_id and self.course_id and self.batch_id)

    @property
    def is_batch_in_progress(self) -> bool:
        return self.batch_status == BatchStatus.IN_PROGRESS


class ContentState(_CamelModel):
    """Remote completion state of one content."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    content_id: str
    course_id: str | None = None
    batch_id: str | None = None
    status: int | None = None
    progress: int | None = None
    last_access_time: str | None = None


class ContentStateResponse(_CamelModel):
    """Content states returned by the course state read endpoint."""

    content_list: list[ContentState] = Field(default_factory=list)

    def status_of(self, content_id: str) -> int:
        """Return the status of a content, 0 when it has no recorded state."""
        for state in self.content_list:
            if state.content_id == content_id:
                return state.status or ContentStatus.NOT_STARTED
        return ContentStatus.NOT_STARTED


class GetContentStateRequest(_CamelModel):
    """Read content states of one learner in a batch."""

    user_id: str
    batch_id: str
    course_id: str | None = None
    content_ids: list[str] = Field(default_factory=list)
    course_ids: list[str] = Field(default_factory=list)


class UpdateContentStateRequest(_CamelModel):
    """Report the completion state of one content."""

    user_id: str
    content_id: str
    course_id: str
    batch_id: str
    status: int
    progress: int
