# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Local relational store.

Example:
    from src.infrastructure.database import get_local_session, init_local_store

    await init_local_store(settings)
    async with get_local_session() as session:
        result = await session.execute(select(LearnerContentSummaryRecord))
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    close_local_store,
    get_local_session,
    get_local_sessionmaker,
    init_local_store,
)
from src.infrastructure.database.models import (
    Base,
    LearnerAssessmentRecord,
    LearnerContentSummaryRecord,
    ProfileRecord,
)

__all__ = [
    "DatabaseError",
    "close_local_store",
    "get_local_session",
    "get_local_sessionmaker",
    "init_local_store",
    "Base",
    "LearnerAssessmentRecord",
    "LearnerContentSummaryRecord",
    "ProfileRecord",
]
