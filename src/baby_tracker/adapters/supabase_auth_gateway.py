"""Supabase Auth adapter for email/password sessions."""

from dataclasses import dataclass
from uuid import UUID

from supabase import AuthApiError, Client

from baby_tracker.domain.models import AuthSession, AuthUser
from baby_tracker.services.auth import AuthGateway


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Auth gateway backed by Supabase Auth.

    ``client`` carries the anon key and performs password auth.
    ``admin_client`` carries the service key and revokes sessions.
    """

    client: Client
    admin_client: Client

    def sign_up(
        self, email: str, password: str, metadata: dict[str, object]
    ) -> AuthSession:
        """Register a user with profile names stored as user metadata."""
        response = self.client.auth.sign_up(
            {"email": email, "password": password, "options": {"data": metadata}}
        )
        if response.user is None:
            raise RuntimeError("Signup succeeded but no user id was returned.")
        return _to_session(response)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        response = self.client.auth.sign_in_with_password(
            {"email": email, "password": password}
        )
        if response.user is None:
            raise RuntimeError("Sign-in returned no user.")
        return _to_session(response, fallback_email=email)

    def sign_out(self, access_token: str) -> None:
        """Revoke every session of the token's user."""
        self.admin_client.auth.admin.sign_out(access_token)

    def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve an access token, returning None when it is rejected."""
        try:
            response = self.admin_client.auth.get_user(access_token)
        except AuthApiError:
            return None
        if response is None or response.user is None:
            return None
        return _to_user(response.user)


def _to_session(  # type: ignore[no-untyped-def]
    response, fallback_email: str = ""
) -> AuthSession:
    session = response.session
    return AuthSession(
        user=_to_user(response.user, fallback_email),
        access_token=session.access_token if session else None,
        refresh_token=session.refresh_token if session else None,
    )


def _to_user(  # type: ignore[no-untyped-def]
    user, fallback_email: str = ""
) -> AuthUser:
    metadata = user.user_metadata
    return AuthUser(
        id=UUID(str(user.id)),
        email=user.email or fallback_email,
        metadata=dict(metadata) if isinstance(metadata, dict) else {},
    )
