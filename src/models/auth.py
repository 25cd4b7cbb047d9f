"""Authenticated principal and token claim models."""

from uuid import UUID

from pydantic import Field, field_validator

from src.models.common import KBBase, UserRole


class Principal(KBBase):
    """The caller of a request, resolved from a bearer token.

    Routes read identity, role and tenant from here and never from the
    request body.
    """

    id: UUID
    email: str
    role: UserRole
    org_id: UUID | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class IdentityClaims(KBBase):
    """Subset of an identity-provider token used for lazy provisioning."""

    sub: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    user_metadata: dict = Field(default_factory=dict)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("user_metadata", mode="before")
    @classmethod
    def default_metadata(cls, v: object) -> object:
        return v if v is not None else {}

    @property
    def first_name(self) -> str:
        return self.user_metadata.get("firstName") or "User"

    @property
    def last_name(self) -> str:
        return self.user_metadata.get("lastName") or ""

    @property
    def declared_role(self) -> UserRole | None:
        """Role from user_metadata, or None when the provider sent none."""
        raw = self.user_metadata.get("role")
        if not raw:
            return None
        try:
            return UserRole(str(raw).upper())
        except ValueError:
            return UserRole.USER

    @property
    def role(self) -> UserRole:
        return self.declared_role or UserRole.USER
