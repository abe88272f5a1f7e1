"""User identity as reported by the identity service."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    """Enumeration of user roles."""

    PATIENT = "patient"
    ADMIN = "admin"


class UserIdentity(BaseModel):
    """Authenticated user."""

    id: str
    email: str
    role: Role = Role.PATIENT

    model_config = ConfigDict(frozen=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_auth_user(cls, user: Any) -> "UserIdentity":
        """
        Build an identity from an auth user object.

        The role comes from the service-controlled ``app_metadata.role``
        claim. Users without the claim are patients.

        Args:
            user: Auth user (object with id, email and app_metadata attributes).

        Returns:
            User identity.
        """
        app_metadata = getattr(user, "app_metadata", None) or {}
        raw_role = app_metadata.get("role") if isinstance(app_metadata, dict) else None

        try:
            role = Role(raw_role) if raw_role else Role.PATIENT
        except ValueError:
            role = Role.PATIENT

        return cls(id=str(user.id), email=user.email or "", role=role)
