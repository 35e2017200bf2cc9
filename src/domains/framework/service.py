# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Framework service: channel lookup and the active channel preference."""

import logging

from src.domains.framework.handler import GetChannelDetailsHandler
from src.domains.framework.models import Channel, ChannelDetailsRequest
from src.infrastructure.preferences import FrameworkKeys, SharedPreferences

logger = logging.getLogger(__name__)


class FrameworkService:
    """Channel operations exposed by the SDK."""

    def __init__(
        self,
        channel_details_handler: GetChannelDetailsHandler,
        shared_preferences: SharedPreferences,
    ) -> None:
        self._channel_details_handler = channel_details_handler
        self._shared_preferences = shared_preferences

    async def get_channel_details(self, request: ChannelDetailsRequest) -> Channel:
        return await self._channel_details_handler.handle(request)

    async def get_active_channel_id(self) -> str | None:
        """Return the active channel id, or None if none was set."""
        return await self._shared_preferences.get_string(
            FrameworkKeys.KEY_ACTIVE_CHANNEL_ID
        ) or None

    async def set_active_channel_id(self, channel_id: str) -> None:
        logger.info("Setting active channel: %s", channel_id)
        await self._shared_preferences.put_string(
            FrameworkKeys.KEY_ACTIVE_CHANNEL_ID, channel_id
        )
