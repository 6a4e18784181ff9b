"""Shared test fixtures."""

import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from baby_tracker.config import Settings
from baby_tracker.containers import AppContainer
from baby_tracker.domain.logs import LogEntry, LogFilters, LogInput, LogType, unit_for
from baby_tracker.domain.models import AuthSession, AuthUser, Profile
from baby_tracker.services.auth import AuthGateway, AuthService
from baby_tracker.services.logs import LogRepository, LogService
from baby_tracker.services.profiles import (
    PhotoStorage,
    ProfileRepository,
    ProfileService,
)
from baby_tracker.services.reports import StatsService
from baby_tracker.services.timeline import TimelineStore

ACCESS_TOKEN = "access-token"
PUBLIC_URL_BASE = "https://example.supabase.co/storage/v1/object/public/profile-pics"


class BackendError(Exception):
    """Stand-in for a backend API error carrying a message attribute."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def make_entry(  # noqa: PLR0913
    timestamp: datetime,
    log_type: LogType = LogType.FEEDING,
    amount: float | None = 90,
    recorded_by: str = "Sara",
    user_id: UUID | None = None,
    log_id: str | None = None,
) -> LogEntry:
    return LogEntry(
        id=log_id or str(uuid4()),
        user_id=user_id or uuid4(),
        type=log_type,
        amount=amount if log_type is LogType.FEEDING else None,
        unit=unit_for(log_type),
        timestamp=timestamp,
        recorded_by=recorded_by,
        created_at=timestamp,
    )


@dataclass
class InMemoryLogRepository(LogRepository):
    """In-memory log repository for tests."""

    logs: list[LogEntry] = field(default_factory=list)
    fail_with: Exception | None = None
    gate: threading.Event | None = None
    gates: dict[str, threading.Event] = field(default_factory=dict)
    failing_actions: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    def _maybe_fail(self, action: str) -> None:
        self.calls.append(action)
        gate = self.gates.get(action, self.gate)
        if gate is not None:
            gate.wait(timeout=5)
        if self.fail_with is not None and (
            not self.failing_actions or action in self.failing_actions
        ):
            raise self.fail_with

    def list_logs(self, user_id: UUID, filters: LogFilters) -> list[LogEntry]:
        self._maybe_fail("list")
        results = [log for log in self.logs if log.user_id == user_id]
        if filters.start is not None:
            results = [log for log in results if log.timestamp >= filters.start]
        if filters.end is not None:
            results = [log for log in results if log.timestamp <= filters.end]
        if filters.type is not None:
            results = [log for log in results if log.type is filters.type]
        if filters.recorded_by:
            results = [
                log for log in results if log.recorded_by == filters.recorded_by
            ]
        return sorted(results, key=lambda log: log.timestamp, reverse=True)

    def create_log(self, user_id: UUID, payload: LogInput) -> LogEntry:
        self._maybe_fail("create")
        entry = LogEntry(
            id=str(uuid4()),
            user_id=user_id,
            type=payload.type,
            amount=payload.amount,
            unit=unit_for(payload.type),
            timestamp=payload.timestamp,
            recorded_by=payload.recorded_by,
            created_at=datetime.now(tz=UTC),
        )
        self.logs.append(entry)
        return entry

    def update_log(self, user_id: UUID, log_id: str, payload: LogInput) -> LogEntry:
        self._maybe_fail("update")
        for index, log in enumerate(self.logs):
            if log.id == log_id and log.user_id == user_id:
                updated = log.with_input(payload)
                self.logs[index] = updated
                return updated
        raise RuntimeError("Failed to update log")


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, Profile] = field(default_factory=dict)

    def get_profile(self, user_id: UUID) -> Profile | None:
        return self.profiles.get(user_id)

    def create_profile(self, profile: Profile) -> Profile:
        self.profiles[profile.id] = profile
        return profile

    def update_profile(self, user_id: UUID, changes: dict[str, object]) -> Profile:
        current = self.profiles.get(user_id)
        if current is None:
            raise RuntimeError("Failed to update profile")
        updated = replace(current, **changes)
        self.profiles[user_id] = updated
        return updated


@dataclass
class InMemoryPhotoStorage(PhotoStorage):
    """In-memory photo storage for tests."""

    files: dict[str, tuple[bytes, str]] = field(default_factory=dict)

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        self.files[path] = (content, content_type)

    def public_url(self, path: str) -> str:
        return f"{PUBLIC_URL_BASE}/{path}"


@dataclass
class FakeAuthGateway(AuthGateway):
    """Fake auth gateway with a single known token."""

    user: AuthUser = field(
        default_factory=lambda: AuthUser(
            id=uuid4(),
            email="parents@example.com",
            metadata={
                "father_name": "Ali",
                "mother_name": "Sara",
                "baby_name": "Nika",
            },
        )
    )
    confirm_email: bool = False
    signed_out: list[str] = field(default_factory=list)

    def sign_up(
        self, email: str, password: str, metadata: dict[str, object]
    ) -> AuthSession:
        self.user = replace(self.user, email=email, metadata=dict(metadata))
        token = None if self.confirm_email else ACCESS_TOKEN
        return AuthSession(user=self.user, access_token=token)

    def sign_in(self, email: str, password: str) -> AuthSession:
        if password != "secret123":
            raise BackendError("Invalid login credentials")
        return AuthSession(user=self.user, access_token=ACCESS_TOKEN)

    def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)

    def get_user(self, access_token: str) -> AuthUser | None:
        if access_token == ACCESS_TOKEN:
            return self.user
        return None


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service.key.signature",
        supabase_anon_key="anon.key.signature",
    )


@pytest.fixture
def auth_gateway() -> FakeAuthGateway:
    return FakeAuthGateway()


@pytest.fixture
def log_repository() -> InMemoryLogRepository:
    return InMemoryLogRepository()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def photo_storage() -> InMemoryPhotoStorage:
    return InMemoryPhotoStorage()


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    auth_gateway: FakeAuthGateway,
    log_repository: InMemoryLogRepository,
    profile_repository: InMemoryProfileRepository,
    photo_storage: InMemoryPhotoStorage,
) -> AppContainer:
    log_service = LogService(log_repository)
    timeline_store = TimelineStore(log_service=log_service)

    async def close_resources() -> None:
        timeline_store.close_all()

    return AppContainer(
        settings=settings,
        auth_service=AuthService(
            gateway=auth_gateway,
            profile_repository=profile_repository,
        ),
        profile_service=ProfileService(profile_repository, photo_storage),
        log_service=log_service,
        stats_service=StatsService(log_repository),
        timeline_store=timeline_store,
        close_resources=close_resources,
    )


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ACCESS_TOKEN}"}
