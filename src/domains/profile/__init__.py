# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Profile domain package.

This package provides profile management functionality including:
- Managed profile creation and session switching
- Validation of exported profile databases before import
- Interfaces of the host application's profile and auth services
"""

from src.domains.profile.exceptions import (
    NoActiveSessionError,
    NoProfileFoundError,
    ProfileServiceError,
)
from src.domains.profile.import_metadata import (
    ImportDatabaseReader,
    MetadataReader,
    ValidateProfileMetadata,
)
from src.domains.profile.interfaces import AuthService, OAuthSession, ProfileService
from src.domains.profile.managed_profile_manager import ManagedProfileManager
from src.domains.profile.models import (
    AcceptTermsConditionRequest,
    AddManagedProfileRequest,
    ContentAccess,
    ContentAccessStatus,
    ErrorCode,
    GetManagedServerProfilesRequest,
    ImportProfileContext,
    Profile,
    ProfileSession,
    ProfileSource,
    ProfileType,
    Response,
    RootOrg,
    ServerProfile,
    ServerProfileDetailsRequest,
)

__all__ = [
    "NoActiveSessionError",
    "NoProfileFoundError",
    "ProfileServiceError",
    "ImportDatabaseReader",
    "MetadataReader",
    "ValidateProfileMetadata",
    "AuthService",
    "OAuthSession",
    "ProfileService",
    "ManagedProfileManager",
    "AcceptTermsConditionRequest",
    "AddManagedProfileRequest",
    "ContentAccess",
    "ContentAccessStatus",
    "ErrorCode",
    "GetManagedServerProfilesRequest",
    "ImportProfileContext",
    "Profile",
    "ProfileSession",
    "ProfileSource",
    "ProfileType",
    "Response",
    "RootOrg",
    "ServerProfile",
    "ServerProfileDetailsRequest",
]
