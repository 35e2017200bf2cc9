# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Managed profile management.

A logged in user can create and switch to profiles they manage (for example
a parent managing children's profiles). Every operation requires an active
auth session.

Example:
    manager = ManagedProfileManager(
        profile_service=profile_service,
        auth_service=auth_service,
        settings=settings.profile,
        api_client=api_client,
        cached_item_store=cached_item_store,
        session_factory=get_local_session,
        framework_service=framework_service,
        shared_preferences=shared_preferences,
        telemetry_service=telemetry_service,
    )

    profile = await manager.add_managed_profile(
        AddManagedProfileRequest(first_name="Asha", managed_by=parent_uid)
    )
    await manager.switch_session_to_managed_profile(profile.uid)
"""

import logging
import time
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import ProfileSettings
from src.domains.framework.service import FrameworkService
from src.domains.profile.exceptions import NoActiveSessionError, NoProfileFoundError
from src.domains.profile.interfaces import AuthService, OAuthSession, ProfileService
from src.domains.profile.models import (
    AcceptTermsConditionRequest,
    AddManagedProfileRequest,
    GetManagedServerProfilesRequest,
    Profile,
    ProfileSession,
    ProfileSource,
    ProfileType,
    ServerProfile,
    ServerProfileDetailsRequest,
)
from src.domains.telemetry.models import TelemetryEndRequest, TelemetryStartRequest
from src.domains.telemetry.service import TelemetryService
from src.infrastructure.api import ApiClient, ApiRequest, HttpRequestType
from src.infrastructure.cache import CachedItemStore
from src.infrastructure.database.models import ProfileRecord
from src.infrastructure.preferences import ProfileKeys, SharedPreferences

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]

MANAGED_PROFILES_KEY = "managed_profiles_"
MANAGED_PROFILES_TTL_KEY = "ttl_managed_profiles_"

SERVER_PROFILE_FIELDS = ["rootOrg", "managedBy", "tncLatestVersion"]


class ManagedProfileManager:
    """Creates, lists and switches to managed profiles."""

    def __init__(
        self,
        profile_service: ProfileService,
        auth_service: AuthService,
        settings: ProfileSettings,
        api_client: ApiClient,
        cached_item_store: CachedItemStore,
        session_factory: SessionFactory,
        framework_service: FrameworkService,
        shared_preferences: SharedPreferences,
        telemetry_service: TelemetryService,
    ) -> None:
        self._profile_service = profile_service
        self._auth_service = auth_service
        self._settings = settings
        self._api_client = api_client
        self._cached_item_store = cached_item_store
        self._session_factory = session_factory
        self._framework_service = framework_service
        self._shared_preferences = shared_preferences
        self._telemetry_service = telemetry_service

    async def _require_session(self) -> OAuthSession:
        session = await self._auth_service.get_session()
        if session is None:
            raise NoActiveSessionError("No active session available")
        return session

    async def add_managed_profile(self, request: AddManagedProfileRequest) -> Profile:
        """Create a managed user on the platform and a local profile for it.

        Args:
            request: Name and managing user of the new profile.

        Returns:
            The created local profile.

        Raises:
            NoActiveSessionError: If no user is logged in.
            ApiError: If the platform call fails.
        """
        await self._require_session()
        current_profile = await self._profile_service.get_active_session_profile(
            require_server_profile=True
        )

        body: dict[str, Any] = {
            "firstName": request.first_name,
            "managedBy": request.managed_by,
        }
        framework = {
            name: values
            for name, values in (
                ("medium", request.medium),
                ("board", request.board),
                ("gradeLevel", request.grade),
            )
            if values
        }
        if framework:
            body["framework"] = framework

        api_request = (
            ApiRequest.builder()
            .with_type(HttpRequestType.POST)
            .with_path(f"{self._settings.profile_api_path}/v4/create")
            .with_body({"request": body})
            .with_api_token(True)
            .with_user_token(True)
            .build()
        )
        response = await self._api_client.fetch(api_request)
        user_id = response.body["result"]["userId"]

        server_profile = await self._profile_service.get_server_profiles_details(
            ServerProfileDetailsRequest(
                user_id=user_id, required_fields=SERVER_PROFILE_FIELDS
            )
        )
        if server_profile.tnc_latest_version:
            await self._profile_service.accept_terms_and_conditions(
                AcceptTermsConditionRequest(
                    user_id=user_id, version=server_profile.tnc_latest_version
                )
            )

        profile = Profile(
            uid=user_id,
            handle=request.first_name,
            profile_type=current_profile.profile_type,
            source=ProfileSource.SERVER,
            medium=request.medium,
            board=request.board,
            grade=request.grade,
            server_profile=server_profile,
        )
        created = await self._profile_service.create_profile(profile, ProfileSource.SERVER)

        logger.info("Created managed profile %s for %s", user_id, request.managed_by)
        return created

    async def get_managed_server_profiles(
        self, request: GetManagedServerProfilesRequest
    ) -> list[ServerProfile]:
        """List profiles managed by the logged in user.

        Raises:
            NoActiveSessionError: If no user is logged in.
        """
        await self._require_session()
        current_profile = await self._profile_service.get_active_session_profile(
            require_server_profile=True
        )
        managed_by = current_profile.uid

        async def from_server() -> list[dict[str, Any]]:
            api_request = (
                ApiRequest.builder()
                .with_type(HttpRequestType.POST)
                .with_path(f"{self._settings.profile_api_path}/v1/search")
                .with_body(
                    {
                        "request": {
                            "filters": {"managedBy": managed_by},
                            "fields": request.required_fields,
                            "sort_by": {"createdDate": "desc"},
                        }
                    }
                )
                .with_api_token(True)
                .with_user_token(True)
                .build()
            )
            response = await self._api_client.fetch(api_request)
            return response.body["result"]["response"]["content"]

        profiles = await self._cached_item_store.fetch(
            request.from_,
            managed_by,
            MANAGED_PROFILES_KEY,
            MANAGED_PROFILES_TTL_KEY,
            from_server,
        )
        return [ServerProfile.model_validate(p) for p in profiles or []]

    async def switch_session_to_managed_profile(self, uid: str) -> None:
        """Make a managed profile the active profile.

        A local profile is created first when the managed user has never
        been used on this device.

        Raises:
            NoActiveSessionError: If no user is logged in.
        """
        session = await self._require_session()

        try:
            await self.set_active_session_for_managed_profile(uid)
        except NoProfileFoundError:
            logger.info("Managed profile %s not on device, creating it", uid)
            server_profile = await self._profile_service.get_server_profiles_details(
                ServerProfileDetailsRequest(user_id=uid, required_fields=SERVER_PROFILE_FIELDS)
            )
            await self._profile_service.create_profile(
                Profile(
                    uid=uid,
                    handle=server_profile.first_name,
                    profile_type=ProfileType.STUDENT,
                    source=ProfileSource.SERVER,
                    server_profile=server_profile,
                ),
                ProfileSource.SERVER,
            )
            await self.set_active_session_for_managed_profile(uid)

        await self._auth_service.set_session(session.model_copy(update={"user_token": uid}))

    async def _read_local_profile(self, uid: str) -> Profile:
        async with self._session_factory() as db:
            result = await db.execute(select(ProfileRecord).where(ProfileRecord.uid == uid))
            record = result.scalar_one_or_none()

        if record is None:
            raise NoProfileFoundError(f"No profile found for {uid}")

        return Profile(
            uid=record.uid,
            handle=record.handle,
            profile_type=ProfileType(record.profile_type),
            source=ProfileSource(record.source),
            created_at=record.created_at,
            medium=_split(record.medium),
            board=_split(record.board),
            subject=_split(record.subject),
            grade=_split(record.grade),
            syllabus=_split(record.syllabus),
        )

    async def set_active_session_for_managed_profile(self, uid: str) -> None:
        """End the current profile session and start one for uid.

        Raises:
            NoProfileFoundError: If uid has no local profile.
        """
        current_session = await self._profile_service.get_active_profile_session()
        elapsed = time.time() - current_session.created_time / 1000
        await self._telemetry_service.end(
            TelemetryEndRequest(type="session", mode="switch-user", duration=max(elapsed, 0.0))
        )

        profile = await self._read_local_profile(uid)

        server_profile = await self._profile_service.get_server_profiles_details(
            ServerProfileDetailsRequest(user_id=profile.uid, required_fields=SERVER_PROFILE_FIELDS)
        )
        if server_profile.root_org and server_profile.root_org.hash_tag_id:
            await self._framework_service.set_active_channel_id(
                server_profile.root_org.hash_tag_id
            )

        profile_session = ProfileSession(uid=profile.uid)
        await self._shared_preferences.put_string(
            ProfileKeys.KEY_USER_SESSION,
            profile_session.model_dump_json(by_alias=True),
        )

        await self._telemetry_service.start(
            TelemetryStartRequest(type="session", mode="switch-user")
        )
        logger.info("Switched active session to managed profile %s", uid)


def _split(value: str) -> list[str]:
    return [item for item in value.split(",") if item] if value else []
