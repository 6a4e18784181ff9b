"""Sign-up, sign-in and profile bootstrap."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from baby_tracker.domain.errors import NotAuthenticatedError
from baby_tracker.domain.models import AuthSession, AuthUser, Profile
from baby_tracker.services.profiles import ProfileRepository

logger = logging.getLogger(__name__)


class AuthGateway(Protocol):
    """Interface to the backend's email/password auth."""

    def sign_up(
        self, email: str, password: str, metadata: dict[str, object]
    ) -> AuthSession:
        """Register a user. ``access_token`` is None until email confirmation."""

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""

    def sign_out(self, access_token: str) -> None:
        """Revoke a session."""

    def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve an access token to a user, or None when invalid."""


@dataclass
class AuthService:
    """Application service for authentication flows."""

    gateway: AuthGateway
    profile_repository: ProfileRepository
    default_timezone: str = "UTC"

    def sign_up(  # noqa: PLR0913
        self,
        email: str,
        password: str,
        father_name: str,
        mother_name: str,
        baby_name: str,
        timezone: str | None = None,
        profile_pic_url: str | None = None,
    ) -> AuthSession:
        """Create an account and, when a session is returned, its profile."""
        session = self.gateway.sign_up(
            email,
            password,
            {
                "father_name": father_name,
                "mother_name": mother_name,
                "baby_name": baby_name,
            },
        )
        if session.access_token:
            self.ensure_profile(
                session.user,
                father_name=father_name,
                mother_name=mother_name,
                baby_name=baby_name,
                timezone=timezone,
                profile_pic_url=profile_pic_url,
            )
        return session

    def login(self, email: str, password: str) -> AuthSession:
        """Sign in and make sure the user has a profile."""
        session = self.gateway.sign_in(email, password)
        metadata = session.user.metadata
        self.ensure_profile(
            session.user,
            father_name=_metadata_str(metadata, "father_name"),
            mother_name=_metadata_str(metadata, "mother_name"),
            baby_name=_metadata_str(metadata, "baby_name"),
        )
        return session

    def logout(self, access_token: str) -> None:
        """End the session for an access token."""
        self.gateway.sign_out(access_token)

    def current_user(self, access_token: str | None) -> AuthUser:
        """Return the user for a session token or raise."""
        if not access_token:
            raise NotAuthenticatedError("Please log in.")
        user = self.gateway.get_user(access_token)
        if user is None:
            raise NotAuthenticatedError("Session expired. Please log in again.")
        return user

    def ensure_profile(  # noqa: PLR0913
        self,
        user: AuthUser,
        father_name: str | None = None,
        mother_name: str | None = None,
        baby_name: str | None = None,
        timezone: str | None = None,
        profile_pic_url: str | None = None,
    ) -> Profile:
        """Return the user's profile, creating it on first sign-in."""
        existing = self.profile_repository.get_profile(user.id)
        if existing:
            return existing
        logger.info("Creating profile", extra={"user_id": user.id})
        return self.profile_repository.create_profile(
            Profile(
                id=user.id,
                email=user.email,
                father_name=father_name or "",
                mother_name=mother_name or "",
                baby_name=baby_name or "",
                profile_pic_url=profile_pic_url,
                timezone=timezone or self.default_timezone,
                created_at=datetime.now(tz=UTC),
            )
        )

    def fallback_profile(self, user: AuthUser) -> Profile:
        """Build an unsaved profile from sign-up metadata."""
        return Profile(
            id=user.id,
            email=user.email,
            father_name=_metadata_str(user.metadata, "father_name"),
            mother_name=_metadata_str(user.metadata, "mother_name"),
            baby_name=_metadata_str(user.metadata, "baby_name"),
            profile_pic_url=None,
            timezone=self.default_timezone,
            created_at=datetime.now(tz=UTC),
        )


def _metadata_str(metadata: dict[str, object], key: str) -> str:
    value = metadata.get(key)
    return value if isinstance(value, str) else ""
