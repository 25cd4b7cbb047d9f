"""Category repository."""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import ArticleRow, CategoryRow
from src.models.common import ArticleStatus, utc_now

_MUTABLE_FIELDS = frozenset({"name", "description", "icon", "status"})


def _counted_articles(published_only: bool) -> list:
    conditions = [ArticleRow.is_deleted.is_(False)]
    if published_only:
        conditions.append(ArticleRow.status == ArticleStatus.PUBLISHED.value)
    return conditions


@dataclass(frozen=True)
class CategoryWithCount:
    category: CategoryRow
    article_count: int


class CategoryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, category_id: UUID, organization_id: UUID,
                     name: str, description: str = "", icon: str = "server",
                     status: str = "ACTIVE") -> CategoryRow:
        now = utc_now()
        row = CategoryRow(
            category_id=category_id, organization_id=organization_id,
            name=name, description=description, icon=icon, status=status,
            is_deleted=False, created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get_in_org(self, category_id: UUID,
                         organization_id: UUID) -> CategoryRow | None:
        result = await self._session.execute(
            select(CategoryRow).where(
                CategoryRow.category_id == category_id,
                CategoryRow.organization_id == organization_id,
                CategoryRow.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, organization_id: UUID, name: str) -> CategoryRow | None:
        """Lookup by name, deleted rows included (they still hold the unique name)."""
        result = await self._session.execute(
            select(CategoryRow).where(
                CategoryRow.organization_id == organization_id,
                CategoryRow.name == name,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_org(self, organization_id: UUID, *,
                          published_only: bool = False) -> list[CategoryWithCount]:
        """Live categories of an organization with their live article counts.

        published_only leaves drafts out of the counts.
        """
        article_count = func.count(ArticleRow.article_id)
        stmt = (
            select(CategoryRow, article_count)
            .outerjoin(
                ArticleRow,
                and_(
                    ArticleRow.category_id == CategoryRow.category_id,
                    *_counted_articles(published_only),
                ),
            )
            .where(
                CategoryRow.organization_id == organization_id,
                CategoryRow.is_deleted.is_(False),
            )
            .group_by(CategoryRow.category_id)
            .order_by(CategoryRow.name)
        )
        result = await self._session.execute(stmt)
        return [CategoryWithCount(category=row, article_count=count)
                for row, count in result.all()]

    async def count_articles(self, category_id: UUID, *,
                             published_only: bool = False) -> int:
        result = await self._session.execute(
            select(func.count(ArticleRow.article_id))
            .where(ArticleRow.category_id == category_id)
            .where(*_counted_articles(published_only))
        )
        return int(result.scalar_one())

    async def update(self, row: CategoryRow, **changes: object) -> CategoryRow:
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            msg = f"Cannot update category fields: {sorted(unknown)}"
            raise ValueError(msg)
        for key, value in changes.items():
            setattr(row, key, value)
        row.updated_at = utc_now()
        await self._session.flush()
        return row

    async def restore(self, row: CategoryRow, *, description: str,
                      icon: str) -> CategoryRow:
        """Bring a soft-deleted category back under its old name."""
        row.is_deleted = False
        row.status = "ACTIVE"
        row.description = description
        row.icon = icon
        row.updated_at = utc_now()
        await self._session.flush()
        return row

    async def soft_delete(self, row: CategoryRow) -> None:
        row.is_deleted = True
        row.updated_at = utc_now()
        await self._session.flush()
