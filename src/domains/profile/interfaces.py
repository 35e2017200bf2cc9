# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Interfaces of profile and auth collaborators.

These services are implemented by the host application. The SDK only
depends on the operations listed here.
"""

from typing import Protocol

from pydantic import BaseModel

from src.domains.profile.models import (
    AcceptTermsConditionRequest,
    ContentAccess,
    Profile,
    ProfileSession,
    ProfileSource,
    ServerProfile,
    ServerProfileDetailsRequest,
)


class OAuthSession(BaseModel):
    """Tokens of the logged in user."""

    access_token: str
    refresh_token: str = ""
    user_token: str


class ProfileService(Protocol):
    async def get_active_session_profile(
        self, require_server_profile: bool = False
    ) -> Profile: ...

    async def get_active_profile_session(self) -> ProfileSession: ...

    async def get_server_profiles_details(
        self, request: ServerProfileDetailsRequest
    ) -> ServerProfile: ...

    async def accept_terms_and_conditions(
        self, request: AcceptTermsConditionRequest
    ) -> bool: ...

    async def create_profile(self, profile: Profile, source: ProfileSource) -> Profile: ...

    async def add_content_access(self, content_access: ContentAccess) -> bool: ...


class AuthService(Protocol):
    async def get_session(self) -> OAuthSession | None: ...

    async def set_session(self, session: OAuthSession) -> None: ...
