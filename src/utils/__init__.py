# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for the LearnSync SDK.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
"""

from src.utils.logging import get_logger, log_context, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "log_context",
]
