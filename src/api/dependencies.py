"""FastAPI dependency injection factories for repositories.

Each factory takes AsyncSession via Depends(get_async_session) and returns
a repository instance. API endpoints use these via Depends().
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.session import get_async_session
from src.repositories.articles import ArticleRepository
from src.repositories.categories import CategoryRepository
from src.repositories.organizations import OrganizationRepository
from src.repositories.users import UserRepository

# ---------------------------------------------------------------------------
# Tenancy
# ---------------------------------------------------------------------------


async def get_organization_repo(
    session: AsyncSession = Depends(get_async_session),
) -> OrganizationRepository:
    return OrganizationRepository(session)


async def get_user_repo(
    session: AsyncSession = Depends(get_async_session),
) -> UserRepository:
    return UserRepository(session)


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


async def get_category_repo(
    session: AsyncSession = Depends(get_async_session),
) -> CategoryRepository:
    return CategoryRepository(session)


async def get_article_repo(
    session: AsyncSession = Depends(get_async_session),
) -> ArticleRepository:
    return ArticleRepository(session)
