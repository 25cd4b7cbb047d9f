"""Tests for OrganizationRepository."""

import pytest
from uuid_extensions import uuid7

from src.repositories.organizations import OrganizationRepository


@pytest.fixture
def org_repo(db_session):
    return OrganizationRepository(db_session)


class TestOrganizationRepository:

    @pytest.mark.anyio
    async def test_create_and_get(self, org_repo: OrganizationRepository) -> None:
        oid = uuid7()
        row = await org_repo.create(organization_id=oid, name="Acme", slug="acme")
        assert row.organization_id == oid

        fetched = await org_repo.get(oid)
        assert fetched is not None
        assert fetched.slug == "acme"

    @pytest.mark.anyio
    async def test_get_by_slug(self, org_repo: OrganizationRepository) -> None:
        await org_repo.create(organization_id=uuid7(), name="Acme", slug="acme")
        assert (await org_repo.get_by_slug("acme")).name == "Acme"
        assert await org_repo.get_by_slug("missing") is None

    @pytest.mark.anyio
    async def test_get_first_is_oldest(self, org_repo: OrganizationRepository) -> None:
        assert await org_repo.get_first() is None
        first = await org_repo.create(organization_id=uuid7(), name="One", slug="one")
        await org_repo.create(organization_id=uuid7(), name="Two", slug="two")
        assert (await org_repo.get_first()).organization_id == first.organization_id

    @pytest.mark.anyio
    async def test_list_all(self, org_repo: OrganizationRepository) -> None:
        for slug in ("a", "b", "c"):
            await org_repo.create(organization_id=uuid7(), name=slug, slug=slug)
        rows = await org_repo.list_all()
        assert [r.slug for r in rows] == ["a", "b", "c"]
