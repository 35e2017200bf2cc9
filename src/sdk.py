# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LearnSync SDK composition root.

Wires the infrastructure (Redis, local store, platform API, event bus) to
the domain services and handlers, and routes telemetry published on the
bus to the summary handler.

Example:
    sdk = LearnSyncSDK(
        profile_service=app_profile_service,
        auth_service=app_auth_service,
        telemetry_service=app_telemetry_service,
    )
    await sdk.init()

    channel = await sdk.framework_service.get_channel_details(
        ChannelDetailsRequest(channel_id="channel_01")
    )

    await sdk.event_bus.emit(
        EventNamespace.TELEMETRY,
        {"type": TelemetryEventType.SAVED, "payload": {"telemetry": event_dict}},
    )

    await sdk.close()
"""

from src.core.config import Settings, get_settings
from src.domains.content import ContentServiceImpl
from src.domains.course import CourseServiceImpl
from src.domains.framework import FrameworkService, GetChannelDetailsHandler
from src.domains.profile import (
    AuthService,
    ImportDatabaseReader,
    ManagedProfileManager,
    ProfileService,
    ValidateProfileMetadata,
)
from src.domains.summarizer import SummarizerService, SummaryTelemetryEventHandler
from src.domains.telemetry import Telemetry, TelemetryService
from src.infrastructure.api import ApiClient
from src.infrastructure.assets import AssetFileService
from src.infrastructure.cache import (
    CachedItemStore,
    KeyValueStore,
    RedisKeyValueStore,
    close_redis,
    get_redis,
    init_redis,
)
from src.infrastructure.database import (
    close_local_store,
    get_local_session,
    init_local_store,
)
from src.infrastructure.events import (
    EventBus,
    EventData,
    EventNamespace,
    TelemetryEventType,
    get_event_bus,
)
from src.infrastructure.preferences import KeyValueSharedPreferences
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


class LearnSyncSDK:
    """Owns the SDK's services and their lifecycle.

    Services are available as attributes once init() has completed.
    """

    def __init__(
        self,
        profile_service: ProfileService,
        auth_service: AuthService,
        telemetry_service: TelemetryService,
        settings: Settings | None = None,
        key_value_store: KeyValueStore | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        """Initialize the SDK.

        Args:
            profile_service: Host application's profile service.
            auth_service: Host application's auth service.
            telemetry_service: Host application's telemetry logger.
            settings: Settings, loaded from the environment if None.
            key_value_store: Store backing caches and preferences. Redis is
                used when None.
            event_bus: Event bus, the process-wide bus if None.
        """
        self.settings = settings or get_settings()
        self.profile_service = profile_service
        self.auth_service = auth_service
        self.telemetry_service = telemetry_service
        self.event_bus = event_bus or get_event_bus()
        self._key_value_store = key_value_store
        self._owns_redis = key_value_store is None
        self._initialized = False

    async def init(self) -> None:
        """Connect infrastructure, build services and subscribe handlers."""
        if self._initialized:
            return

        setup_logging(self.settings)
        logger.info(
            "Initializing LearnSync SDK (environment=%s)", self.settings.environment
        )

        if self._owns_redis:
            await init_redis(self.settings)
            self._key_value_store = RedisKeyValueStore(get_redis())
        await init_local_store(self.settings)

        store = self._key_value_store
        self.shared_preferences = KeyValueSharedPreferences(store)
        self.cached_item_store = CachedItemStore(
            store, ttl_seconds=self.settings.cache.default_ttl_seconds
        )
        self.api_client = ApiClient(self.settings.platform_api)
        self.file_service = AssetFileService(self.settings.framework.assets_path)

        self.course_service = CourseServiceImpl(self.api_client, self.settings.course)
        self.content_service = ContentServiceImpl(
            self.api_client, store, self.settings.content
        )
        self.summarizer_service = SummarizerService(get_local_session)
        self.framework_service = FrameworkService(
            GetChannelDetailsHandler(
                self.api_client,
                self.settings.framework,
                self.file_service,
                self.cached_item_store,
            ),
            self.shared_preferences,
        )
        self.managed_profile_manager = ManagedProfileManager(
            profile_service=self.profile_service,
            auth_service=self.auth_service,
            settings=self.settings.profile,
            api_client=self.api_client,
            cached_item_store=self.cached_item_store,
            session_factory=get_local_session,
            framework_service=self.framework_service,
            shared_preferences=self.shared_preferences,
            telemetry_service=self.telemetry_service,
        )
        self.validate_profile_metadata = ValidateProfileMetadata(ImportDatabaseReader())
        self.summary_handler = SummaryTelemetryEventHandler(
            course_service=self.course_service,
            shared_preferences=self.shared_preferences,
            summarizer_service=self.summarizer_service,
            event_bus=self.event_bus,
            content_service=self.content_service,
            profile_service=self.profile_service,
            settings=self.settings.summarizer,
        )

        self.event_bus.subscribe(EventNamespace.TELEMETRY, self._on_telemetry_event)
        self._initialized = True
        logger.info("LearnSync SDK initialized")

    async def _on_telemetry_event(self, data: EventData) -> None:
        if data.event_type != TelemetryEventType.SAVED:
            return
        event = Telemetry.model_validate(data.payload["telemetry"])
        await self.summary_handler.handle(event)

    async def close(self) -> None:
        """Unsubscribe handlers and release connections."""
        if not self._initialized:
            return

        self.event_bus.unsubscribe(EventNamespace.TELEMETRY, self._on_telemetry_event)
        await self.cached_item_store.drain()
        await self.api_client.close()
        await close_local_store()
        if self._owns_redis:
            await close_redis()

        self._initialized = False
        logger.info("LearnSync SDK closed")
