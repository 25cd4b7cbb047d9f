"""FastAPI user administration endpoints. ADMIN only.

GET    /api/users          - list users of the organization
POST   /api/users          - create user with a local password
PUT    /api/users/{id}     - partial update of names, role, status
DELETE /api/users/{id}     - soft delete
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from src.api.dependencies import get_user_repo
from src.api.security import require_admin, require_org
from src.auth.passwords import check_password_length, hash_password
from src.db.tables import UserRow
from src.models.auth import Principal
from src.models.common import UserRole, UserStatus, new_uuid7
from src.repositories.users import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class CreateUserRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=8, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            msg = "email must look like name@domain"
            raise ValueError(msg)
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_length(v)


class UpdateUserRequest(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    role: UserRole | None = None
    status: UserStatus | None = None


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    status: str
    organization_id: str
    created_at: str
    updated_at: str


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=list[UserResponse])
async def list_users(
    principal: Principal = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
) -> list[UserResponse]:
    rows = await repo.list_by_org(require_org(principal))
    return [_user_response(r) for r in rows]


@router.post("", status_code=201, response_model=UserResponse)
async def create_user(
    body: CreateUserRequest,
    principal: Principal = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
) -> UserResponse:
    org_id = require_org(principal)
    if await repo.get_by_email(body.email) is not None:
        raise HTTPException(status_code=409, detail="A user with this email already exists.")

    row = await repo.create(
        user_id=new_uuid7(),
        email=body.email,
        password_hash=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role.value,
        status=body.status.value,
        organization_id=org_id,
    )
    logger.info("User %s created in org %s by %s", row.user_id, org_id, principal.id)
    return _user_response(row)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    body: UpdateUserRequest,
    principal: Principal = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
) -> UserResponse:
    row = await repo.get_in_org(user_id, require_org(principal))
    if row is None:
        raise HTTPException(status_code=404, detail="User not found")

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    for key in ("role", "status"):
        if key in changes:
            changes[key] = changes[key].value

    await repo.update(row, **changes)
    return _user_response(row)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    principal: Principal = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
) -> MessageResponse:
    if user_id == principal.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account.")
    row = await repo.get_in_org(user_id, require_org(principal))
    if row is None:
        raise HTTPException(status_code=404, detail="User not found")
    await repo.soft_delete(row)
    logger.info("User %s deleted by %s", user_id, principal.id)
    return MessageResponse(message="User deleted")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _user_response(row: UserRow) -> UserResponse:
    return UserResponse(
        id=str(row.user_id),
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        role=row.role,
        status=row.status,
        organization_id=str(row.organization_id),
        created_at=row.created_at.isoformat(),
        updated_at=row.updated_at.isoformat(),
    )
