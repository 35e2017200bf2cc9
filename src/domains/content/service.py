# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content service.

Reads content details from the platform and keeps per learner content
markers in the key-value store.
"""

import json
import logging
from typing import Protocol

from src.core.config.settings import ContentSettings
from src.domains.content.models import (
    Content,
    ContentDetailRequest,
    ContentMarkerRequest,
)
from src.infrastructure.api import ApiClient, ApiRequest, HttpRequestType
from src.infrastructure.cache import KeyValueStore

logger = logging.getLogger(__name__)


class ContentServiceError(Exception):
    """Base exception for content service errors."""

    pass


class ContentNotFoundError(ContentServiceError):
    """Raised when the platform returns no content record."""

    pass


class ContentService(Protocol):
    """Content operations used by the summarizer."""

    async def get_content_details(self, request: ContentDetailRequest) -> Content: ...

    async def set_content_marker(self, request: ContentMarkerRequest) -> bool: ...


def content_marker_key(uid: str, content_id: str, marker: int) -> str:
    return f"content_marker_{uid}_{content_id}_{marker}"


class ContentServiceImpl:
    """Platform backed content service."""

    def __init__(
        self,
        api_client: ApiClient,
        key_value_store: KeyValueStore,
        settings: ContentSettings,
    ) -> None:
        self._api_client = api_client
        self._key_value_store = key_value_store
        self._settings = settings

    async def get_content_details(self, request: ContentDetailRequest) -> Content:
        """Read content details.

        Args:
            request: Content to read.

        Returns:
            The content.

        Raises:
            ContentNotFoundError: If the response carries no content.
            ApiError: If the platform call fails.
        """
        api_request = (
            ApiRequest.builder()
            .with_type(HttpRequestType.GET)
            .with_path(f"{self._settings.content_api_path}/read/{request.content_id}")
            .with_api_token(True)
            .build()
        )
        response = await self._api_client.fetch(api_request)

        data = (response.body.get("result") or {}).get("content")
        if not data:
            raise ContentNotFoundError(f"Content not found: {request.content_id}")
        return Content.from_platform(data)

    async def set_content_marker(self, request: ContentMarkerRequest) -> bool:
        """Set or clear a content marker.

        Returns:
            True if the store accepted the change.
        """
        key = content_marker_key(request.uid, request.content_id, int(request.marker))

        if not request.is_marked:
            return await self._key_value_store.delete_value(key)

        value = json.dumps(
            {
                "uid": request.uid,
                "contentId": request.content_id,
                "marker": int(request.marker),
                "data": request.data,
                "extraInfo": request.extra_info,
            }
        )
        logger.debug(
            "Marking content %s for %s with %s",
            request.content_id,
            request.uid,
            request.marker.name,
        )
        return await self._key_value_store.set_value(key, value)
