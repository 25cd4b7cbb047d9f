"""FastAPI article endpoints.

GET    /api/articles            - list / search (drafts for admins only)
GET    /api/articles/{id}       - get article
POST   /api/articles            - create (ADMIN)
PUT    /api/articles/{id}       - partial update (ADMIN)
DELETE /api/articles/{id}       - soft delete (ADMIN)

Every query is scoped to the caller's organization.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from src.api.dependencies import get_article_repo, get_category_repo
from src.api.security import get_current_principal, require_admin, require_org
from src.models.auth import Principal
from src.models.common import ArticleStatus, new_uuid7
from src.repositories.articles import ArticleRecord, ArticleRepository
from src.repositories.categories import CategoryRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/articles", tags=["articles"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class CreateArticleRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    content: str = ""
    category_id: UUID
    status: ArticleStatus = ArticleStatus.PUBLISHED


class UpdateArticleRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    content: str | None = None
    category_id: UUID | None = None
    status: ArticleStatus | None = None


class ArticleCategory(BaseModel):
    id: str
    name: str
    icon: str


class ArticleAuthor(BaseModel):
    first_name: str
    last_name: str


class ArticleResponse(BaseModel):
    id: str
    title: str
    content: str
    status: str
    category_id: str
    author_id: str
    organization_id: str
    category: ArticleCategory
    author: ArticleAuthor
    created_at: str
    updated_at: str


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=list[ArticleResponse])
async def list_articles(
    search: str | None = Query(None, max_length=200),
    principal: Principal = Depends(get_current_principal),
    repo: ArticleRepository = Depends(get_article_repo),
) -> list[ArticleResponse]:
    org_id = require_org(principal)
    records = await repo.search(
        org_id, search=search, published_only=not principal.is_admin,
    )
    return [_article_response(r) for r in records]


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: UUID,
    principal: Principal = Depends(get_current_principal),
    repo: ArticleRepository = Depends(get_article_repo),
) -> ArticleResponse:
    return _article_response(await _load_record(
        repo, article_id, require_org(principal), published_only=not principal.is_admin,
    ))


@router.post("", status_code=201, response_model=ArticleResponse)
async def create_article(
    body: CreateArticleRequest,
    principal: Principal = Depends(require_admin),
    repo: ArticleRepository = Depends(get_article_repo),
    categories: CategoryRepository = Depends(get_category_repo),
) -> ArticleResponse:
    org_id = require_org(principal)
    await _require_category(categories, body.category_id, org_id)

    row = await repo.create(
        article_id=new_uuid7(),
        organization_id=org_id,
        category_id=body.category_id,
        author_id=principal.id,
        title=body.title,
        content=body.content,
        status=body.status.value,
    )
    logger.info("Article %s created in org %s", row.article_id, org_id)
    return _article_response(await _load_record(repo, row.article_id, org_id))


@router.put("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: UUID,
    body: UpdateArticleRequest,
    principal: Principal = Depends(require_admin),
    repo: ArticleRepository = Depends(get_article_repo),
    categories: CategoryRepository = Depends(get_category_repo),
) -> ArticleResponse:
    org_id = require_org(principal)
    row = await repo.get_row_in_org(article_id, org_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Article not found")

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes:
        await _require_category(categories, changes["category_id"], org_id)
    if "status" in changes:
        changes["status"] = changes["status"].value

    await repo.update(row, **changes)
    return _article_response(await _load_record(repo, article_id, org_id))


@router.delete("/{article_id}", response_model=MessageResponse)
async def delete_article(
    article_id: UUID,
    principal: Principal = Depends(require_admin),
    repo: ArticleRepository = Depends(get_article_repo),
) -> MessageResponse:
    row = await repo.get_row_in_org(article_id, require_org(principal))
    if row is None:
        raise HTTPException(status_code=404, detail="Article not found")
    await repo.soft_delete(row)
    logger.info("Article %s deleted", article_id)
    return MessageResponse(message="Article deleted")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _require_category(repo: CategoryRepository, category_id: UUID,
                            org_id: UUID) -> None:
    if await repo.get_in_org(category_id, org_id) is None:
        raise HTTPException(status_code=400, detail="Category not found in organization")


async def _load_record(repo: ArticleRepository, article_id: UUID, org_id: UUID, *,
                       published_only: bool = False) -> ArticleRecord:
    record = await repo.get_in_org(article_id, org_id, published_only=published_only)
    if record is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return record


def _article_response(record: ArticleRecord) -> ArticleResponse:
    article, category, author = record.article, record.category, record.author
    return ArticleResponse(
        id=str(article.article_id),
        title=article.title,
        content=article.content,
        status=article.status,
        category_id=str(article.category_id),
        author_id=str(article.author_id),
        organization_id=str(article.organization_id),
        category=ArticleCategory(
            id=str(category.category_id), name=category.name, icon=category.icon,
        ),
        author=ArticleAuthor(
            first_name=author.first_name, last_name=author.last_name,
        ),
        created_at=article.created_at.isoformat(),
        updated_at=article.updated_at.isoformat(),
    )
