# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models of the local store."""

from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for local store models."""


class LearnerAssessmentRecord(Base):
    """One answered question of a content attempt."""

    __tablename__ = "learner_assessments"
    __table_args__ = (
        UniqueConstraint("uid", "content_id", "qid", name="uq_learner_assessment_question"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(255), index=True)
    content_id: Mapped[str] = mapped_column(String(255), index=True)
    qid: Mapped[str] = mapped_column(String(255))
    qindex: Mapped[int | None] = mapped_column(Integer, nullable=True)
    correct: Mapped[bool] = mapped_column(Boolean, default=False)
    score: Mapped[float] = mapped_column(Float, default=0.0)
    max_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    time_spent: Mapped[float] = mapped_column(Float, default=0.0)
    res: Mapped[str | None] = mapped_column(Text, nullable=True)
    qdesc: Mapped[str | None] = mapped_column(Text, nullable=True)
    qtitle: Mapped[str | None] = mapped_column(Text, nullable=True)
    hierarchy_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_ts: Mapped[int] = mapped_column(BigInteger, default=0)


class LearnerContentSummaryRecord(Base):
    """Aggregated play statistics of one learner for one content."""

    __tablename__ = "learner_content_summary"
    __table_args__ = (
        UniqueConstraint("uid", "content_id", name="uq_learner_content_summary"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(255), index=True)
    content_id: Mapped[str] = mapped_column(String(255), index=True)
    avg_ts: Mapped[float] = mapped_column(Float, default=0.0)
    sessions: Mapped[int] = mapped_column(Integer, default=0)
    total_ts: Mapped[float] = mapped_column(Float, default=0.0)
    last_updated_on: Mapped[int] = mapped_column(BigInteger, default=0)
    progress: Mapped[float] = mapped_column(Float, default=0.0)
    hierarchy_data: Mapped[str | None] = mapped_column(Text, nullable=True)


class ProfileRecord(Base):
    """A learner profile known on this device."""

    __tablename__ = "profiles"

    uid: Mapped[str] = mapped_column(String(255), primary_key=True)
    handle: Mapped[str] = mapped_column(String(255))
    profile_type: Mapped[str] = mapped_column(String(32))
    source: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)
    medium: Mapped[str] = mapped_column(String(255), default="")
    board: Mapped[str] = mapped_column(String(255), default="")
    subject: Mapped[str] = mapped_column(String(255), default="")
    grade: Mapped[str] = mapped_column(String(255), default="")
    syllabus: Mapped[str] = mapped_column(String(255), default="")
