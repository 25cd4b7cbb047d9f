"""Article repository.

Reads always join the category and author so routes can render an article
with its category and author names in one query.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import ArticleRow, CategoryRow, UserRow
from src.models.common import ArticleStatus, utc_now

_MUTABLE_FIELDS = frozenset({"title", "content", "category_id", "status"})


@dataclass(frozen=True)
class ArticleRecord:
    article: ArticleRow
    category: CategoryRow
    author: UserRow


class ArticleRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, article_id: UUID, organization_id: UUID,
                     category_id: UUID, author_id: UUID, title: str,
                     content: str, status: str = "PUBLISHED") -> ArticleRow:
        now = utc_now()
        row = ArticleRow(
            article_id=article_id, organization_id=organization_id,
            category_id=category_id, author_id=author_id, title=title,
            content=content, status=status, is_deleted=False,
            created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    def _scoped(self, organization_id: UUID) -> Select:
        return (
            select(ArticleRow, CategoryRow, UserRow)
            .join(CategoryRow, CategoryRow.category_id == ArticleRow.category_id)
            .join(UserRow, UserRow.user_id == ArticleRow.author_id)
            .where(
                ArticleRow.organization_id == organization_id,
                ArticleRow.is_deleted.is_(False),
            )
        )

    async def get_in_org(self, article_id: UUID, organization_id: UUID, *,
                         published_only: bool = False) -> ArticleRecord | None:
        stmt = self._scoped(organization_id).where(ArticleRow.article_id == article_id)
        if published_only:
            stmt = stmt.where(ArticleRow.status == ArticleStatus.PUBLISHED.value)
        result = await self._session.execute(stmt)
        found = result.first()
        if found is None:
            return None
        return ArticleRecord(*found)

    async def search(self, organization_id: UUID, *, search: str | None = None,
                     published_only: bool = False) -> list[ArticleRecord]:
        """List live articles, newest edit first.

        A non-blank search term is matched as a case-insensitive substring
        against the title, the content, and the category name. LIKE
        wildcards in the term match literally.
        """
        stmt = self._scoped(organization_id)
        if published_only:
            stmt = stmt.where(ArticleRow.status == ArticleStatus.PUBLISHED.value)
        term = (search or "").strip()
        if term:
            stmt = stmt.where(or_(
                ArticleRow.title.icontains(term, autoescape=True),
                ArticleRow.content.icontains(term, autoescape=True),
                CategoryRow.name.icontains(term, autoescape=True),
            ))
        stmt = stmt.order_by(ArticleRow.updated_at.desc(), ArticleRow.article_id.desc())
        result = await self._session.execute(stmt)
        return [ArticleRecord(*found) for found in result.all()]

    async def get_row_in_org(self, article_id: UUID,
                             organization_id: UUID) -> ArticleRow | None:
        result = await self._session.execute(
            select(ArticleRow).where(
                ArticleRow.article_id == article_id,
                ArticleRow.organization_id == organization_id,
                ArticleRow.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def update(self, row: ArticleRow, **changes: object) -> ArticleRow:
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            msg = f"Cannot update article fields: {sorted(unknown)}"
            raise ValueError(msg)
        for key, value in changes.items():
            setattr(row, key, value)
        row.updated_at = utc_now()
        await self._session.flush()
        return row

    async def soft_delete(self, row: ArticleRow) -> None:
        row.is_deleted = True
        row.updated_at = utc_now()
        await self._session.flush()
