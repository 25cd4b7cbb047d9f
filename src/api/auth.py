"""FastAPI authentication endpoints.

POST /api/auth/login - exchange email + password for a local token
GET  /api/auth/me    - profile of the current principal
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from src.api.dependencies import get_organization_repo, get_user_repo
from src.api.security import get_current_principal
from src.auth.passwords import check_password_length, verify_password
from src.auth.tokens import issue_token
from src.config.settings import Settings, get_settings
from src.db.tables import OrganizationRow, UserRow
from src.models.auth import Principal
from src.models.common import UserStatus
from src.repositories.organizations import OrganizationRepository
from src.repositories.users import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_length(v)


class OrganizationResponse(BaseModel):
    id: str
    name: str
    slug: str


class ProfileResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    organization: OrganizationResponse | None = None


class LoginResponse(BaseModel):
    token: str
    user: ProfileResponse


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    users: UserRepository = Depends(get_user_repo),
    orgs: OrganizationRepository = Depends(get_organization_repo),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    user = await users.get_by_email(body.email.strip().lower())
    if (
        user is None
        or user.is_deleted
        or user.status == UserStatus.INACTIVE.value
        or not verify_password(body.password, user.password_hash)
    ):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = issue_token(
        user_id=str(user.user_id),
        email=user.email,
        role=user.role,
        org_id=str(user.organization_id),
        secret=settings.JWT_SECRET,
        expires_minutes=settings.JWT_EXPIRES_MINUTES,
    )
    org = await orgs.get(user.organization_id)
    logger.info("User %s signed in", user.user_id)
    return LoginResponse(token=token, user=_profile_response(user, org))


@router.get("/me", response_model=ProfileResponse)
async def me(
    principal: Principal = Depends(get_current_principal),
    users: UserRepository = Depends(get_user_repo),
    orgs: OrganizationRepository = Depends(get_organization_repo),
) -> ProfileResponse:
    user = await users.get(principal.id)
    if user is None or user.is_deleted:
        raise HTTPException(status_code=404, detail="User not found")
    org = await orgs.get(user.organization_id)
    return _profile_response(user, org)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _profile_response(user: UserRow, org: OrganizationRow | None) -> ProfileResponse:
    return ProfileResponse(
        id=str(user.user_id),
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        organization=(
            OrganizationResponse(
                id=str(org.organization_id), name=org.name, slug=org.slug,
            )
            if org is not None else None
        ),
    )
