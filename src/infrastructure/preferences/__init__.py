# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Preference store adapter and well-known preference keys."""

from src.infrastructure.preferences.shared_preferences import (
    ContentKeys,
    FrameworkKeys,
    KeyValueSharedPreferences,
    ProfileKeys,
    SharedPreferences,
)

__all__ = [
    "SharedPreferences",
    "KeyValueSharedPreferences",
    "ContentKeys",
    "FrameworkKeys",
    "ProfileKeys",
]
