"""Authentication and authorization dependencies.

get_current_principal accepts two kinds of bearer token on the same header:

1. Local tokens from POST /api/auth/login, verified with JWT_SECRET.
2. Identity-provider tokens, verified with IDP_JWT_SECRET (or decoded
   unverified when IDP_ALLOW_UNVERIFIED_DECODE is set). Their users are
   provisioned locally on first sight.

require_roles turns the principal into a two-role allow-list gate.
"""

from uuid import UUID

import structlog
from fastapi import Depends, Header, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.provisioning import (
    InactiveUserError,
    InvalidClaimsError,
    provision_idp_user,
    resolve_local_user,
)
from src.auth.tokens import (
    MalformedTokenError,
    TokenValidationError,
    is_locally_signed,
    read_idp_claims,
    verify_local_token,
)
from src.config.settings import Settings, get_settings
from src.db.errors import describe_db_error
from src.db.session import get_async_session
from src.models.auth import Principal
from src.models.common import UserRole

logger = structlog.get_logger(__name__)

_BEARER_PREFIX = "Bearer "


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_principal(
    authorization: str | None = Header(default=None),
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> Principal:
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise _unauthorized("Unauthorized")
    token = authorization[len(_BEARER_PREFIX):].strip()
    if not token:
        raise _unauthorized("Unauthorized")

    try:
        try:
            claims = verify_local_token(token, settings.JWT_SECRET)
        except TokenValidationError:
            claims = None

        if claims is not None:
            return await resolve_local_user(session, claims)
        if is_locally_signed(token, settings.JWT_SECRET):
            # Ours, but expired or incomplete: never reinterpret as an IdP token.
            raise _unauthorized("Invalid token")

        try:
            idp_claims = read_idp_claims(
                token,
                secret=settings.IDP_JWT_SECRET,
                allow_unverified=settings.IDP_ALLOW_UNVERIFIED_DECODE,
            )
        except MalformedTokenError:
            raise _unauthorized("Invalid token format") from None
        except TokenValidationError as exc:
            logger.info("auth.token_rejected", reason=str(exc))
            raise _unauthorized("Invalid token") from None

        return await provision_idp_user(
            session,
            idp_claims,
            default_org_name=settings.DEFAULT_ORG_NAME,
            default_org_slug=settings.DEFAULT_ORG_SLUG,
        )
    except (InactiveUserError, InvalidClaimsError):
        raise _unauthorized("Invalid token") from None
    except SQLAlchemyError as exc:
        logger.error("auth.database_error", error=str(exc))
        raise HTTPException(status_code=500, detail=describe_db_error(exc)) from exc


def require_roles(*roles: UserRole):
    """Dependency factory: 403 unless the principal holds one of roles."""
    allowed = frozenset(roles)

    async def _check(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(status_code=403, detail="Forbidden")
        return principal

    return _check


require_admin = require_roles(UserRole.ADMIN)


def require_org(principal: Principal) -> UUID:
    """Organization of the principal, 400 if the session carries none."""
    if principal.org_id is None:
        raise HTTPException(
            status_code=400,
            detail="User session missing organization context",
        )
    return principal.org_id
