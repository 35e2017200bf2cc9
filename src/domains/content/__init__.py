# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content domain package.

Provides content models, mime type constants and the content service.
"""

from src.domains.content.models import (
    Content,
    ContentDetailRequest,
    ContentMarkerRequest,
    MarkerType,
    MimeType,
)
from src.domains.content.service import (
    ContentNotFoundError,
    ContentService,
    ContentServiceError,
    ContentServiceImpl,
    content_marker_key,
)

__all__ = [
    "Content",
    "ContentDetailRequest",
    "ContentMarkerRequest",
    "MarkerType",
    "MimeType",
    "ContentNotFoundError",
    "ContentService",
    "ContentServiceError",
    "ContentServiceImpl",
    "content_marker_key",
]
