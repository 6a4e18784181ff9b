"""Profile and profile photo services."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from baby_tracker.domain.models import Profile

DEFAULT_PHOTO_EXTENSION = "jpg"
PROFILE_FIELDS = frozenset(
    {"father_name", "mother_name", "baby_name", "timezone", "profile_pic_url"}
)


class ProfileRepository(Protocol):
    """Persistence interface for profiles."""

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the profile for a user, if present."""

    def create_profile(self, profile: Profile) -> Profile:
        """Insert a profile row and return it."""

    def update_profile(self, user_id: UUID, changes: dict[str, object]) -> Profile:
        """Apply column changes to a profile and return the result."""


class PhotoStorage(Protocol):
    """File storage for profile photos."""

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Upload (or overwrite) a file."""

    def public_url(self, path: str) -> str:
        """Return the public URL for a stored file."""


@dataclass
class ProfileService:
    """Service for reading and editing the family profile."""

    repository: ProfileRepository
    photo_storage: PhotoStorage

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the user's profile."""
        return self.repository.get_profile(user_id)

    def update_profile(self, user_id: UUID, changes: dict[str, object]) -> Profile:
        """Persist an explicit settings save."""
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        timezone = changes.get("timezone")
        if timezone is not None and not is_valid_timezone(str(timezone)):
            raise ValueError(f"Unknown timezone: {timezone}")
        payload = dict(changes)
        if "profile_pic_url" in payload:
            payload["profile_pic_url"] = payload["profile_pic_url"] or None
        return self.repository.update_profile(user_id, payload)

    def upload_photo(
        self,
        user_id: UUID,
        filename: str,
        content: bytes,
        content_type: str = "image/jpeg",
    ) -> str:
        """Store a profile photo and return its public URL.

        The URL is not written to the profile; the next settings save
        applies it.
        """
        path = photo_path(user_id, filename)
        self.photo_storage.upload(path, content, content_type)
        return self.photo_storage.public_url(path)


def photo_path(user_id: UUID, filename: str) -> str:
    """Return the storage path for a user's profile photo."""
    _, dot, extension = filename.rpartition(".")
    if not dot or not extension:
        extension = DEFAULT_PHOTO_EXTENSION
    return f"profiles/{user_id}.{extension}"


def is_valid_timezone(value: str) -> bool:
    """Return True when ``value`` names an IANA timezone."""
    try:
        ZoneInfo(value)
    except (ValueError, KeyError):
        return False
    return True


def profile_zone(profile: Profile | None, default: str = "UTC") -> ZoneInfo:
    """Return the viewer's timezone, falling back when unset or unknown."""
    if profile and profile.timezone and is_valid_timezone(profile.timezone):
        return ZoneInfo(profile.timezone)
    return ZoneInfo(default)
