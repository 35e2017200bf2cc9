# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course domain package.

Provides course context and content state models and the course service.
"""

from src.domains.course.models import (
    BatchStatus,
    ContentState,
    ContentStateResponse,
    ContentStatus,
    CourseContext,
    GetContentStateRequest,
    UpdateContentStateRequest,
)
from src.domains.course.service import (
    LAST_READ_CONTENTID_PREFIX,
    CourseService,
    CourseServiceImpl,
    last_read_content_key,
)

__all__ = [
    "BatchStatus",
    "ContentState",
    "ContentStateResponse",
    "ContentStatus",
    "CourseContext",
    "GetContentStateRequest",
    "UpdateContentStateRequest",
    "LAST_READ_CONTENTID_PREFIX",
    "CourseService",
    "CourseServiceImpl",
    "last_read_content_key",
]
