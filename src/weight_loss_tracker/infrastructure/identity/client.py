"""
Identity service client implementation.

Wraps Supabase auth for session lookup, password sign-in, sign-up and
sign-out, and persists the session tokens locally so consecutive CLI
invocations share one login.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from supabase import Client, create_client

from weight_loss_tracker.domain.user import Role, UserIdentity
from weight_loss_tracker.utils.exceptions import AuthError, ConfigurationError
from weight_loss_tracker.utils.parameters import IdentityConfig

logger = logging.getLogger(__name__)


class PatientRecord:
    """Row of the users table as shown in the admin patient list."""

    def __init__(
        self,
        user_id: str,
        email: str,
        role: str,
        created_at: datetime | str | None = None,
    ) -> None:
        """
        Initialize patient record.

        Args:
            user_id: User ID.
            email: User email.
            role: Stored role.
            created_at: Account creation time (ISO format).
        """
        self.user_id = user_id
        self.email = email
        self.role = role
        self.created_at = created_at

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.user_id,
            "email": self.email,
            "role": self.role,
            "created_at": str(self.created_at) if self.created_at else None,
        }


class IdentityClient:
    """
    Supabase-backed identity client.

    The user's role is taken from the ``app_metadata.role`` claim set by
    the service; it is never derived from the email address.
    """

    def __init__(self, config: IdentityConfig, client: Client | None = None) -> None:
        """
        Initialize identity client.

        Args:
            config: Identity configuration.
            client: Pre-built Supabase client. Built from config when omitted.

        Raises:
            ConfigurationError: If no client is given and URL or key is missing.
            AuthError: If the Supabase client cannot be created.
        """
        self.config = config
        self.session_path = Path(config.session_path)
        self.client = client or self._create_client()

    def _create_client(self) -> Client:
        url = self.config.resolved_url()
        key = self.config.resolved_key()
        if not url or not key:
            raise ConfigurationError(
                "Identity service not configured: set identity.url/identity.key "
                "or SUPABASE_URL/SUPABASE_ANON_KEY"
            )

        try:
            client = create_client(url, key)
        except Exception as e:
            raise AuthError(f"Failed to create identity client: {e}") from e

        logger.debug("Created Supabase client")
        return client

    def _save_session(self, session: Any) -> None:
        if session is None:
            return
        try:
            self.session_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.session_path, "w", encoding="utf-8") as f:
                json.dump(
                    {
                        "access_token": session.access_token,
                        "refresh_token": session.refresh_token,
                    },
                    f,
                )
        except OSError as e:
            logger.warning(f"Failed to persist session: {e}")

    def _load_saved_tokens(self) -> dict[str, str] | None:
        if not self.session_path.exists():
            return None
        try:
            with open(self.session_path, encoding="utf-8") as f:
                tokens = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file: {e}")
            return None
        if not isinstance(tokens, dict) or not tokens.get("access_token"):
            return None
        return tokens

    def _clear_saved_session(self) -> None:
        self.session_path.unlink(missing_ok=True)

    def _identity_from_response(self, response: Any, action: str) -> UserIdentity | None:
        session = getattr(response, "session", None)
        user = getattr(session, "user", None) or getattr(response, "user", None)
        if user is None:
            return None

        identity = UserIdentity.from_auth_user(user)
        self._save_session(session)
        logger.info(f"{action}: {identity.email} ({identity.role.value})")
        return identity

    def get_session(self) -> UserIdentity | None:
        """
        Resolve the current user.

        Uses the client's in-memory session first, then the locally saved
        tokens. A saved session the service no longer accepts is discarded.

        Returns:
            Current user, or None if nobody is signed in.

        Raises:
            AuthError: If the service cannot be queried.
        """
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            raise AuthError(f"Failed to get session: {e}") from e

        if session is not None and session.user is not None:
            return UserIdentity.from_auth_user(session.user)

        tokens = self._load_saved_tokens()
        if tokens is None:
            return None

        try:
            response = self.client.auth.set_session(
                tokens["access_token"], tokens.get("refresh_token", "")
            )
        except Exception as e:
            logger.warning(f"Saved session rejected, signing out locally: {e}")
            self._clear_saved_session()
            return None

        return self._identity_from_response(response, "Restored session")

    def sign_in_with_password(self, email: str, password: str) -> UserIdentity:
        """
        Sign in with email and password.

        Returns:
            Signed-in user.

        Raises:
            AuthError: If credentials are rejected or the service is unreachable.
        """
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            raise AuthError(f"Sign in failed: {e}") from e

        identity = self._identity_from_response(response, "Signed in")
        if identity is None:
            raise AuthError("Sign in failed: no session returned")
        return identity

    def sign_up(self, email: str, password: str) -> UserIdentity | None:
        """
        Create an account.

        Returns:
            The new user when the service signs them in straight away, or
            None when email confirmation is pending.

        Raises:
            AuthError: If the service rejects the sign-up.
        """
        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as e:
            raise AuthError(f"Sign up failed: {e}") from e

        if getattr(response, "session", None) is None:
            logger.info(f"Signed up {email}, confirmation pending")
            return None

        return self._identity_from_response(response, "Signed up")

    def sign_out(self) -> None:
        """
        Sign out and forget the saved session.

        Raises:
            AuthError: If the service rejects the sign-out.
        """
        try:
            self.client.auth.sign_out()
        except Exception as e:
            raise AuthError(f"Sign out failed: {e}") from e
        finally:
            self._clear_saved_session()

        logger.info("Signed out")

    def list_patients(self, requester: UserIdentity) -> list[PatientRecord]:
        """
        List every non-admin user.

        Args:
            requester: User asking for the list; must be an admin.

        Returns:
            Patient records.

        Raises:
            AuthError: If the requester is not an admin or the query fails.
        """
        if requester.role != Role.ADMIN:
            raise AuthError("Administrator role required")

        try:
            response = (
                self.client.table(self.config.users_table)
                .select("id, email, role, created_at")
                .neq("role", Role.ADMIN.value)
                .execute()
            )
        except Exception as e:
            raise AuthError(f"Failed to load patients: {e}") from e

        patients = [
            PatientRecord(
                user_id=str(row.get("id")),
                email=row.get("email") or "",
                role=row.get("role") or Role.PATIENT.value,
                created_at=row.get("created_at"),
            )
            for row in response.data or []
        ]

        logger.info(f"Loaded {len(patients)} patients")
        return patients
