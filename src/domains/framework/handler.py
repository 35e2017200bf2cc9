# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Channel details lookup.

Channels are read through the cached item store. A SERVER lookup always
asks the platform first; a CACHE lookup returns the cached copy, falling
back to the channel configuration bundled with the SDK assets and only
then to the platform.

Example:
    handler = GetChannelDetailsHandler(
        api_client, settings.framework, file_service, cached_item_store
    )
    channel = await handler.handle(ChannelDetailsRequest(channel_id="channel_01"))
"""

import json
import logging
from typing import Any

from src.core.config.settings import FrameworkSettings
from src.domains.framework.models import Channel, ChannelDetailsRequest, Framework
from src.infrastructure.api import ApiClient, ApiRequest, HttpRequestType
from src.infrastructure.assets import AssetFileService
from src.infrastructure.cache import CachedItemStore

logger = logging.getLogger(__name__)

CHANNEL_FILE_KEY_PREFIX = "channel-"
CHANNEL_LOCAL_KEY = "channel-"
CHANNEL_TTL_KEY = "ttl_channel-"


def sort_frameworks(frameworks: list[Framework]) -> list[Framework]:
    """Order frameworks by index, unindexed frameworks last.

    Frameworks without an index share the key ``max_index + 1`` so they keep
    their original relative order after every indexed framework.
    """
    indices = [f.index for f in frameworks if f.index is not None]
    max_index = max(indices, default=0)
    return sorted(
        frameworks,
        key=lambda f: f.index if f.index is not None else max_index + 1,
    )


class GetChannelDetailsHandler:
    """Resolves channel records for the framework service."""

    def __init__(
        self,
        api_client: ApiClient,
        settings: FrameworkSettings,
        file_service: AssetFileService,
        cached_item_store: CachedItemStore,
    ) -> None:
        self._api_client = api_client
        self._settings = settings
        self._file_service = file_service
        self._cached_item_store = cached_item_store

    async def handle(self, request: ChannelDetailsRequest) -> Channel:
        """Resolve a channel.

        Args:
            request: Channel id and lookup source.

        Returns:
            The channel with its frameworks sorted by index.

        Raises:
            ApiError: If the platform is needed and fails with no cached or
                bundled copy to fall back to.
        """

        async def from_server() -> dict[str, Any]:
            return await self._fetch_from_server(request.channel_id)

        async def from_file() -> dict[str, Any]:
            return await self._fetch_from_file(request.channel_id)

        data = await self._cached_item_store.fetch(
            request.from_,
            request.channel_id,
            CHANNEL_LOCAL_KEY,
            CHANNEL_TTL_KEY,
            from_server,
            from_file,
        )

        channel = Channel.model_validate(data)
        if channel.frameworks:
            channel.frameworks = sort_frameworks(channel.frameworks)
        return channel

    async def _fetch_from_server(self, channel_id: str) -> dict[str, Any]:
        api_request = (
            ApiRequest.builder()
            .with_type(HttpRequestType.GET)
            .with_path(f"{self._settings.channel_api_path}/read/{channel_id}")
            .with_api_token(True)
            .build()
        )
        response = await self._api_client.fetch(api_request)
        return response.body["result"]["channel"]

    async def _fetch_from_file(self, channel_id: str) -> dict[str, Any]:
        path = (
            f"{self._settings.channel_config_dir_path}/"
            f"{CHANNEL_FILE_KEY_PREFIX}{channel_id}.json"
        )
        logger.debug("Loading bundled channel %s from %s", channel_id, path)
        content = await self._file_service.read_file_from_assets(path)
        return json.loads(content)["result"]["channel"]
