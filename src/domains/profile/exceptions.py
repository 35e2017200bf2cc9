# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Profile domain exceptions."""


class ProfileServiceError(Exception):
    """Base exception for profile service errors."""

    pass


class NoActiveSessionError(ProfileServiceError):
    """Raised when an operation needs a logged in user and there is none."""

    pass


class NoProfileFoundError(ProfileServiceError):
    """Raised when a profile does not exist on this device."""

    pass
