"""JWT handling for locally issued and identity-provider tokens.

Local tokens: HS256, signed with JWT_SECRET, carry {sub, email, role, org_id}.
IdP tokens: HS256, signed with the provider's shared secret, carry
{sub, email, user_metadata}. Both are bearer tokens on the same header;
callers try local verification first.
"""

import logging
from datetime import timedelta
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError

from src.models.common import utc_now

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenValidationError(Exception):
    """Raised when a bearer token cannot be accepted."""


class MalformedTokenError(TokenValidationError):
    """Raised when a token cannot even be decoded without verification."""


def issue_token(*, user_id: str, email: str, role: str, org_id: str | None,
                secret: str, expires_minutes: int) -> str:
    """Sign a local access token."""
    now = utc_now()
    claims = {
        "sub": user_id,
        "email": email,
        "role": role,
        "org_id": org_id,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def verify_local_token(token: str, secret: str) -> dict[str, Any]:
    """Verify signature and expiry of a locally issued token."""
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except InvalidTokenError as exc:
        raise TokenValidationError(str(exc)) from exc
    if "org_id" not in claims or "role" not in claims:
        # Signed with our secret but not minted by issue_token.
        raise TokenValidationError("Token is missing local claims")
    return claims


def is_locally_signed(token: str, secret: str) -> bool:
    """True when the signature verifies against the local secret, expired or not."""
    try:
        jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"verify_exp": False, "verify_aud": False},
        )
    except InvalidTokenError:
        return False
    return True


def verify_idp_token(token: str, secret: str) -> dict[str, Any]:
    """Verify an identity-provider token against its shared secret.

    Audience is not checked: the provider stamps "authenticated" and the
    service has no audience of its own.
    """
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"verify_aud": False, "require": ["sub", "exp"]},
        )
    except InvalidTokenError as exc:
        raise TokenValidationError(str(exc)) from exc


def decode_unverified(token: str) -> dict[str, Any]:
    """Read claims without checking signature or expiry."""
    try:
        claims = jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
        )
    except InvalidTokenError as exc:
        raise MalformedTokenError(str(exc)) from exc
    if not isinstance(claims, dict):
        raise MalformedTokenError("Token payload is not an object")
    return claims


def read_idp_claims(token: str, *, secret: str,
                    allow_unverified: bool) -> dict[str, Any]:
    """Resolve the claims of a token that failed local verification.

    With a provider secret the token must verify, unless allow_unverified
    permits falling back to an unverified decode. Without a secret only the
    unverified decode is possible, again gated by allow_unverified.
    Claims shaped like a local token (top-level org_id) are never accepted.
    """
    if secret:
        try:
            return _reject_local_shape(verify_idp_token(token, secret))
        except TokenValidationError as exc:
            if not allow_unverified:
                raise
            logger.warning(
                "IdP token verification failed, falling back to decode: %s", exc,
            )
    elif not allow_unverified:
        raise TokenValidationError("No identity provider secret configured")
    return _reject_local_shape(decode_unverified(token))


def _reject_local_shape(claims: dict[str, Any]) -> dict[str, Any]:
    if "org_id" in claims:
        raise TokenValidationError("Local token presented as an identity-provider token")
    return claims
