"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import ClientOptions, create_client

from baby_tracker.adapters.supabase_auth_gateway import SupabaseAuthGateway
from baby_tracker.adapters.supabase_log_repository import SupabaseLogRepository
from baby_tracker.adapters.supabase_photo_storage import SupabasePhotoStorage
from baby_tracker.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from baby_tracker.config import Settings
from baby_tracker.services.auth import AuthService
from baby_tracker.services.logs import LogService
from baby_tracker.services.profiles import ProfileService
from baby_tracker.services.reports import StatsService
from baby_tracker.services.timeline import TimelineStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    profile_service: ProfileService
    log_service: LogService
    stats_service: StatsService
    timeline_store: TimelineStore
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    data_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    # Password sign-in must not switch the data client over to a user session.
    auth_client = create_client(
        resolved_settings.supabase_url,
        resolved_settings.supabase_anon_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
    profile_repository = SupabaseProfileRepository(data_client)
    log_repository = SupabaseLogRepository(data_client)
    photo_storage = SupabasePhotoStorage(
        data_client, bucket=resolved_settings.profile_photo_bucket
    )
    auth_service = AuthService(
        gateway=SupabaseAuthGateway(client=auth_client, admin_client=data_client),
        profile_repository=profile_repository,
        default_timezone=resolved_settings.default_timezone,
    )
    log_service = LogService(log_repository)
    timeline_store = TimelineStore(
        log_service=log_service,
        ttl_seconds=resolved_settings.timeline_ttl_seconds,
    )

    async def close_resources() -> None:
        timeline_store.close_all()

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        profile_service=ProfileService(profile_repository, photo_storage),
        log_service=log_service,
        stats_service=StatsService(log_repository),
        timeline_store=timeline_store,
        close_resources=close_resources,
    )
