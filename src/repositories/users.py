"""User repository.

Deleted users stay in the table (is_deleted) and are filtered out of every
org-scoped read. get_by_email does not filter: the email column is unique
across deleted rows too.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import UserRow
from src.models.common import utc_now

# Columns an administrator may change after creation.
_MUTABLE_FIELDS = frozenset({"first_name", "last_name", "role", "status"})


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, user_id: UUID, email: str, password_hash: str,
                     first_name: str, last_name: str, organization_id: UUID,
                     role: str = "USER", status: str = "ACTIVE") -> UserRow:
        now = utc_now()
        row = UserRow(
            user_id=user_id, email=email, password_hash=password_hash,
            first_name=first_name, last_name=last_name, role=role,
            status=status, is_deleted=False, organization_id=organization_id,
            created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, user_id: UUID) -> UserRow | None:
        return await self._session.get(UserRow, user_id)

    async def get_in_org(self, user_id: UUID, organization_id: UUID) -> UserRow | None:
        result = await self._session.execute(
            select(UserRow).where(
                UserRow.user_id == user_id,
                UserRow.organization_id == organization_id,
                UserRow.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> UserRow | None:
        result = await self._session.execute(
            select(UserRow).where(UserRow.email == email)
        )
        return result.scalar_one_or_none()

    async def list_by_org(self, organization_id: UUID) -> list[UserRow]:
        result = await self._session.execute(
            select(UserRow)
            .where(
                UserRow.organization_id == organization_id,
                UserRow.is_deleted.is_(False),
            )
            .order_by(UserRow.created_at)
        )
        return list(result.scalars().all())

    async def update(self, row: UserRow, **changes: object) -> UserRow:
        """Apply a partial update. Keys outside the mutable set raise ValueError."""
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            msg = f"Cannot update user fields: {sorted(unknown)}"
            raise ValueError(msg)
        for key, value in changes.items():
            setattr(row, key, value)
        row.updated_at = utc_now()
        await self._session.flush()
        return row

    async def soft_delete(self, row: UserRow) -> None:
        row.is_deleted = True
        row.updated_at = utc_now()
        await self._session.flush()
