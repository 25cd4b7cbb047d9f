"""FastAPI category endpoints.

GET    /api/categories          - list with live article counts (published only for users)
POST   /api/categories          - create (ADMIN)
PUT    /api/categories/{id}     - partial update (ADMIN)
DELETE /api/categories/{id}     - soft delete (ADMIN)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError

from src.api.dependencies import get_category_repo
from src.api.security import get_current_principal, require_admin, require_org
from src.db.errors import is_unique_violation
from src.db.tables import CategoryRow
from src.models.auth import Principal
from src.models.common import CategoryIcon, CategoryStatus, new_uuid7
from src.repositories.categories import CategoryRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])

_DUPLICATE_NAME = "A category with this name already exists."


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)
    icon: CategoryIcon = CategoryIcon.SERVER

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    icon: CategoryIcon | None = None
    status: CategoryStatus | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    status: str
    organization_id: str
    article_count: int = 0
    created_at: str
    updated_at: str


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    principal: Principal = Depends(get_current_principal),
    repo: CategoryRepository = Depends(get_category_repo),
) -> list[CategoryResponse]:
    org_id = require_org(principal)
    entries = await repo.list_by_org(org_id, published_only=not principal.is_admin)
    logger.debug("Found %d categories for org %s", len(entries), org_id)
    return [_category_response(e.category, e.article_count) for e in entries]


@router.post("", status_code=201, response_model=CategoryResponse)
async def create_category(
    body: CreateCategoryRequest,
    principal: Principal = Depends(require_admin),
    repo: CategoryRepository = Depends(get_category_repo),
) -> CategoryResponse:
    org_id = require_org(principal)
    name = body.name

    existing = await repo.get_by_name(org_id, name)
    if existing is not None:
        if not existing.is_deleted:
            raise HTTPException(status_code=409, detail=_DUPLICATE_NAME)
        # The unique name is still held by the deleted row: reuse it.
        row = await repo.restore(
            existing, description=body.description, icon=body.icon.value,
        )
        logger.info("Category %s restored in org %s", row.category_id, org_id)
        return _category_response(row, await repo.count_articles(row.category_id))

    row = await repo.create(
        category_id=new_uuid7(),
        organization_id=org_id,
        name=name,
        description=body.description,
        icon=body.icon.value,
    )
    logger.info("Category %s created in org %s", row.category_id, org_id)
    return _category_response(row, 0)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    body: UpdateCategoryRequest,
    principal: Principal = Depends(require_admin),
    repo: CategoryRepository = Depends(get_category_repo),
) -> CategoryResponse:
    org_id = require_org(principal)
    row = await repo.get_in_org(category_id, org_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Category not found")

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        clash = await repo.get_by_name(org_id, changes["name"])
        if clash is not None and clash.category_id != row.category_id:
            raise HTTPException(status_code=409, detail=_DUPLICATE_NAME)
    for key in ("icon", "status"):
        if key in changes:
            changes[key] = changes[key].value

    try:
        await repo.update(row, **changes)
    except IntegrityError as exc:
        if not is_unique_violation(exc):
            raise
        raise HTTPException(status_code=409, detail=_DUPLICATE_NAME) from exc
    return _category_response(row, await repo.count_articles(row.category_id))


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: UUID,
    principal: Principal = Depends(require_admin),
    repo: CategoryRepository = Depends(get_category_repo),
) -> MessageResponse:
    row = await repo.get_in_org(category_id, require_org(principal))
    if row is None:
        raise HTTPException(status_code=404, detail="Category not found")
    await repo.soft_delete(row)
    logger.info("Category %s deleted", category_id)
    return MessageResponse(message="Category deleted")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _category_response(row: CategoryRow, article_count: int) -> CategoryResponse:
    return CategoryResponse(
        id=str(row.category_id),
        name=row.name,
        description=row.description,
        icon=row.icon,
        status=row.status,
        organization_id=str(row.organization_id),
        article_count=article_count,
        created_at=row.created_at.isoformat(),
        updated_at=row.updated_at.isoformat(),
    )
