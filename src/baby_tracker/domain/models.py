"""Domain models for the baby tracker."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Profile:
    """Family profile stored for each user."""

    id: UUID
    email: str
    father_name: str
    mother_name: str
    baby_name: str
    profile_pic_url: str | None
    timezone: str
    created_at: datetime | None = None

    @property
    def parents(self) -> list[str]:
        """Return the parent names that are filled in."""
        return [name for name in (self.father_name, self.mother_name) if name]


@dataclass(frozen=True)
class AuthUser:
    """Authenticated user as reported by the auth backend."""

    id: UUID
    email: str
    metadata: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthSession:
    """Result of a sign-up or sign-in."""

    user: AuthUser
    access_token: str | None
    refresh_token: str | None = None
