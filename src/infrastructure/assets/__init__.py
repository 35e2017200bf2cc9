# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bundled offline asset access."""

from src.infrastructure.assets.file_service import AssetFileService, AssetNotFoundError

__all__ = [
    "AssetFileService",
    "AssetNotFoundError",
]
