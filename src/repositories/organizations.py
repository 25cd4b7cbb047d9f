"""Organization repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import OrganizationRow
from src.models.common import utc_now


class OrganizationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, organization_id: UUID, name: str,
                     slug: str) -> OrganizationRow:
        now = utc_now()
        row = OrganizationRow(
            organization_id=organization_id, name=name, slug=slug,
            created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, organization_id: UUID) -> OrganizationRow | None:
        return await self._session.get(OrganizationRow, organization_id)

    async def get_by_slug(self, slug: str) -> OrganizationRow | None:
        result = await self._session.execute(
            select(OrganizationRow).where(OrganizationRow.slug == slug)
        )
        return result.scalar_one_or_none()

    async def get_first(self) -> OrganizationRow | None:
        """Oldest organization, used as the home of provisioned users."""
        result = await self._session.execute(
            select(OrganizationRow)
            .order_by(OrganizationRow.created_at, OrganizationRow.organization_id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[OrganizationRow]:
        result = await self._session.execute(
            select(OrganizationRow).order_by(OrganizationRow.created_at)
        )
        return list(result.scalars().all())
