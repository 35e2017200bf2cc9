# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models for the profile domain.

This module defines models for:
- Local learner profiles and profile sessions
- Server profiles returned by the platform user API
- Content access records
- Profile import context and responses
"""

import time
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.infrastructure.cache import CachedItemRequestSourceFrom


class ProfileType(str, Enum):
    """Learner profile types."""

    STUDENT = "student"
    TEACHER = "teacher"
    PARENT = "parent"
    ADMIN = "administrator"
    OTHER = "other"


class ProfileSource(str, Enum):
    """Where a profile was created.

    - SERVER: Backed by a platform user account
    - LOCAL: Guest profile that only exists on this device
    """

    SERVER = "server"
    LOCAL = "local"


class ContentAccessStatus(IntEnum):
    NOT_PLAYED = 0
    PLAYED = 1


class ErrorCode(str, Enum):
    """Error codes carried by failed responses."""

    IMPORT_FAILED = "IMPORT_FAILED"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )


class RootOrg(_CamelModel):
    """Root organisation of a server profile."""

    root_org_id: str | None = None
    hash_tag_id: str | None = None
    org_name: str | None = None


class ServerProfile(_CamelModel):
    """User record returned by the platform.

    Attributes:
        id: Platform user id.
        first_name: First name, used as the local profile handle.
        managed_by: Id of the user managing this profile, if managed.
        tnc_latest_version: Latest terms and conditions version to accept.
        root_org: Root organisation; its hash tag id is the user's channel.
    """

    id: str | None = None
    user_id: str | None = None
    first_name: str = ""
    last_name: str | None = None
    managed_by: str | None = None
    tnc_latest_version: str | None = None
    root_org: RootOrg | None = None


class Profile(BaseModel):
    """A learner profile known on this device."""

    uid: str
    handle: str
    profile_type: ProfileType = ProfileType.STUDENT
    source: ProfileSource = ProfileSource.LOCAL
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    medium: list[str] = Field(default_factory=list)
    board: list[str] = Field(default_factory=list)
    subject: list[str] = Field(default_factory=list)
    grade: list[str] = Field(default_factory=list)
    syllabus: list[str] = Field(default_factory=list)
    server_profile: ServerProfile | None = None


class ProfileSession(_CamelModel):
    """The profile currently using the SDK.

    Attributes:
        uid: Profile id.
        sid: Session id.
        created_time: Session start in epoch milliseconds.
    """

    uid: str
    sid: str = Field(default_factory=lambda: str(uuid4()))
    created_time: int = Field(default_factory=lambda: int(time.time() * 1000))


class ContentAccess(BaseModel):
    """Record of a learner opening a content."""

    status: ContentAccessStatus
    content_id: str
    content_type: str = ""
    content_location: dict[str, Any] | None = None


class AddManagedProfileRequest(BaseModel):
    """Create a profile managed by the logged in user."""

    first_name: str
    managed_by: str
    medium: list[str] = Field(default_factory=list)
    board: list[str] = Field(default_factory=list)
    grade: list[str] = Field(default_factory=list)


class GetManagedServerProfilesRequest(BaseModel):
    """List profiles managed by the logged in user."""

    model_config = ConfigDict(populate_by_name=True)

    from_: CachedItemRequestSourceFrom = Field(
        default=CachedItemRequestSourceFrom.CACHE, alias="from"
    )
    required_fields: list[str] = Field(default_factory=list)


class ServerProfileDetailsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str
    required_fields: list[str] = Field(default_factory=list)
    from_: CachedItemRequestSourceFrom = Field(
        default=CachedItemRequestSourceFrom.SERVER, alias="from"
    )


class AcceptTermsConditionRequest(BaseModel):
    user_id: str
    version: str


class ImportProfileContext(BaseModel):
    """State of a profile import from an exported database file.

    Attributes:
        source_db_file_path: Path of the database file being imported.
        metadata: Metadata read from the file's ``meta_data`` table.
        imported_count: Profiles imported so far.
        failed_count: Profiles that could not be imported.
    """

    source_db_file_path: str
    metadata: dict[str, Any] | None = None
    imported_count: int = 0
    failed_count: int = 0


class Response(BaseModel):
    """Outcome of a handler that reports failure as data.

    Attributes:
        body: Result on success.
        error_mesg: Error code on failure.
    """

    body: Any = None
    error_mesg: ErrorCode | None = None

    @property
    def is_successful(self) -> bool:
        return self.error_mesg is None
