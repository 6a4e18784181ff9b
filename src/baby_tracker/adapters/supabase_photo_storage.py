"""Supabase Storage bucket for profile photos."""

from dataclasses import dataclass

from supabase import Client

from baby_tracker.services.profiles import PhotoStorage


@dataclass
class SupabasePhotoStorage(PhotoStorage):
    """Profile photo storage in a public-read Supabase bucket."""

    client: Client
    bucket: str = "profile-pics"

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Upload a file, replacing any existing object at ``path``."""
        self.client.storage.from_(self.bucket).upload(
            path,
            content,
            {"content-type": content_type, "upsert": "true"},
        )

    def public_url(self, path: str) -> str:
        """Return the public URL of a stored object."""
        return self.client.storage.from_(self.bucket).get_public_url(path)
