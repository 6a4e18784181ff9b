"""Supabase-backed profile repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from baby_tracker.domain.models import Profile
from baby_tracker.services.profiles import ProfileRepository

PROFILE_COLUMNS = (
    "id, email, father_name, mother_name, baby_name, profile_pic_url, "
    "timezone, created_at"
)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for the ``profiles`` table."""

    client: Client

    def get_profile(self, user_id: UUID) -> Profile | None:
        """Return the profile for a user, if present."""
        response = (
            self.client.table("profiles")
            .select(PROFILE_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def create_profile(self, profile: Profile) -> Profile:
        """Insert a profile row and return it."""
        response = (
            self.client.table("profiles")
            .insert(
                {
                    "id": str(profile.id),
                    "email": profile.email,
                    "father_name": profile.father_name,
                    "mother_name": profile.mother_name,
                    "baby_name": profile.baby_name,
                    "profile_pic_url": profile.profile_pic_url,
                    "timezone": profile.timezone,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create profile")
        return _parse_profile(response.data[0])

    def update_profile(self, user_id: UUID, changes: dict[str, object]) -> Profile:
        """Apply column changes to a profile and return the stored row."""
        response = (
            self.client.table("profiles")
            .update(changes)
            .eq("id", str(user_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update profile")
        return _parse_profile(response.data[0])


def _parse_profile(row: dict[str, object]) -> Profile:
    created_raw = row.get("created_at")
    return Profile(
        id=UUID(str(row["id"])),
        email=str(row.get("email") or ""),
        father_name=str(row.get("father_name") or ""),
        mother_name=str(row.get("mother_name") or ""),
        baby_name=str(row.get("baby_name") or ""),
        profile_pic_url=row.get("profile_pic_url") or None,
        timezone=str(row.get("timezone") or "UTC"),
        created_at=datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None,
    )
