# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Summarizer domain package.

This package tracks learning progress from telemetry:
- SummarizerService stores assessment answers and play summaries locally
- SummaryTelemetryEventHandler advances remote course progress
"""

from src.domains.summarizer.handler import (
    SummarizerSessionState,
    SummaryTelemetryEventHandler,
    has_progress,
    is_completion_valid,
    required_progress,
)
from src.domains.summarizer.pipeline import (
    PipelineStep,
    SummaryPipelineError,
    run_pipeline,
)
from src.domains.summarizer.service import SummarizerService

__all__ = [
    "SummarizerSessionState",
    "SummaryTelemetryEventHandler",
    "has_progress",
    "is_completion_valid",
    "required_progress",
    "PipelineStep",
    "SummaryPipelineError",
    "run_pipeline",
    "SummarizerService",
]
