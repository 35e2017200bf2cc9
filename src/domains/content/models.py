# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models for the content domain."""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MimeType:
    """Mime types of playable contents."""

    YOUTUBE = "video/x-youtube"
    VIDEO = "video/mp4"
    WEBM = "video/webm"
    H5P = "application/vnd.ekstep.h5p-archive"
    HTML = "application/vnd.ekstep.html-archive"
    ECML = "application/vnd.ekstep.ecml-archive"
    COLLECTION = "application/vnd.ekstep.content-collection"
    PDF = "application/pdf"
    EPUB = "application/epub"

    VIDEO_TYPES = frozenset({YOUTUBE, VIDEO, WEBM})
    ARCHIVE_PLAYER_TYPES = frozenset({H5P, HTML})


class MarkerType(IntEnum):
    """Per learner markers set on a content."""

    NOTHING = 0
    PREVIEWED = 1
    BOOKMARKED = 2


class Content(BaseModel):
    """Content details.

    Attributes:
        identifier: Content id.
        name: Display name.
        content_type: Content type, e.g. ``Resource`` or ``SelfAssess``.
        mime_type: Mime type used to pick a player.
        content_data: The raw content record as returned by the platform.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    identifier: str
    name: str = ""
    content_type: str = ""
    mime_type: str = ""
    content_data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_platform(cls, data: dict[str, Any]) -> "Content":
        """Build content from a platform content record."""
        return cls(
            identifier=data["identifier"],
            name=data.get("name") or "",
            content_type=data.get("contentType") or "",
            mime_type=data.get("mimeType") or "",
            content_data=data,
        )


class ContentDetailRequest(BaseModel):
    content_id: str


class ContentMarkerRequest(BaseModel):
    """Set or clear a marker on a content for a learner.

    Attributes:
        uid: Learner id.
        content_id: Content id.
        data: Serialized content data stored alongside the marker.
        marker: Marker to set.
        is_marked: Set the marker when true, clear it otherwise.
        extra_info: Additional marker data.
    """

    uid: str
    content_id: str
    data: str
    marker: MarkerType
    is_marked: bool
    extra_info: dict[str, Any] = Field(default_factory=dict)
