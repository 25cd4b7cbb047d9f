"""Resolve token claims to a local user, provisioning IdP users on first sight.

Local tokens name an existing user by id. IdP tokens name a user by email:
an unknown email gets a local account in the oldest organization, and a
known one has its role synced from the provider's user_metadata.
"""

import logging
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.passwords import IDP_PASSWORD_PLACEHOLDER
from src.db.tables import OrganizationRow, UserRow
from src.models.auth import IdentityClaims, Principal
from src.models.common import UserRole, UserStatus, new_uuid7
from src.repositories.organizations import OrganizationRepository
from src.repositories.users import UserRepository

logger = logging.getLogger(__name__)


class InactiveUserError(Exception):
    """The account exists but is deleted or deactivated."""


class InvalidClaimsError(Exception):
    """The token decoded but lacks the claims needed to identify a user."""


def principal_for(user: UserRow) -> Principal:
    return Principal(
        id=user.user_id,
        email=user.email,
        role=UserRole(user.role),
        org_id=user.organization_id,
    )


def _ensure_usable(user: UserRow | None) -> UserRow:
    if user is None or user.is_deleted or user.status == UserStatus.INACTIVE.value:
        raise InactiveUserError
    return user


async def resolve_local_user(session: AsyncSession, claims: dict) -> Principal:
    """Principal for a verified local token, read from the stored user row."""
    try:
        user_id = UUID(str(claims["sub"]))
    except (KeyError, ValueError) as exc:
        raise InvalidClaimsError("Token subject is not a user id") from exc
    user = _ensure_usable(await UserRepository(session).get(user_id))
    return principal_for(user)


async def default_organization(session: AsyncSession, *, name: str,
                               slug: str) -> OrganizationRow:
    """Oldest organization, created with the given name and slug if none exists."""
    repo = OrganizationRepository(session)
    org = await repo.get_first()
    if org is None:
        logger.info("Creating default organization %s for provisioned users", slug)
        org = await repo.create(organization_id=new_uuid7(), name=name, slug=slug)
    return org


async def _user_id_from_subject(users: UserRepository, sub: str) -> UUID:
    """Reuse the provider's subject as the local id when it is a free UUID."""
    try:
        candidate = UUID(sub)
    except ValueError:
        return new_uuid7()
    if await users.get(candidate) is not None:
        return new_uuid7()
    return candidate


async def provision_idp_user(session: AsyncSession, raw_claims: dict, *,
                             default_org_name: str,
                             default_org_slug: str) -> Principal:
    """Find or create the local user behind an identity-provider token."""
    try:
        claims = IdentityClaims.model_validate(raw_claims)
    except ValidationError as exc:
        raise InvalidClaimsError("Token is missing sub or email") from exc

    users = UserRepository(session)
    user = await users.get_by_email(claims.email)

    if user is None:
        org = await default_organization(
            session, name=default_org_name, slug=default_org_slug,
        )
        user = await users.create(
            user_id=await _user_id_from_subject(users, claims.sub),
            email=claims.email,
            password_hash=IDP_PASSWORD_PLACEHOLDER,
            first_name=claims.first_name,
            last_name=claims.last_name,
            role=claims.role.value,
            organization_id=org.organization_id,
        )
        logger.info("Provisioned user %s into organization %s",
                    user.user_id, org.organization_id)
        return principal_for(user)

    user = _ensure_usable(user)
    declared = claims.declared_role
    if declared is not None and user.role != declared.value:
        logger.info("Syncing role of user %s: %s -> %s",
                    user.user_id, user.role, declared.value)
        user = await users.update(user, role=declared.value)
    return principal_for(user)
