"""Seed script - load sample data into the knowledge-base database.

Creates:
1. A demo organization (KB Enterprise)
2. An administrator (admin@kb.com) and a regular user (user@kb.com)
3. The default categories for every organization
4. One published sample article

Idempotent: safe to run multiple times - skips if the demo organization exists.

Usage:
    python -m scripts.seed          # against DATABASE_URL from .env
    pytest tests/scripts/test_seed.py  # against aiosqlite in-memory
"""

import asyncio
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.passwords import hash_password
from src.db.defaults import ensure_default_categories
from src.db.tables import ArticleRow, OrganizationRow, UserRow
from src.models.common import ArticleStatus, UserRole, new_uuid7
from src.repositories.articles import ArticleRepository
from src.repositories.categories import CategoryRepository
from src.repositories.organizations import OrganizationRepository
from src.repositories.users import UserRepository

DEMO_ORG_NAME = "KB Enterprise"
DEMO_ORG_SLUG = "kb-enterprise"

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {"email": "admin@kb.com", "first_name": "Admin", "last_name": "User",
     "role": UserRole.ADMIN.value},
    {"email": "user@kb.com", "first_name": "Normal", "last_name": "User",
     "role": UserRole.USER.value},
]

SAMPLE_ARTICLE = {
    "title": "How to Reset O365 Password",
    "content": (
        "<h2>Resetting an Office 365 password</h2>"
        "<ol><li>Open the Microsoft 365 admin center.</li>"
        "<li>Go to <strong>Users &gt; Active users</strong> and select the account.</li>"
        "<li>Choose <em>Reset password</em> and share the temporary password securely.</li></ol>"
    ),
    "category": "Servers",
}


async def seed_organization(session: AsyncSession) -> OrganizationRow:
    """Create the demo organization."""
    repo = OrganizationRepository(session)
    return await repo.create(
        organization_id=new_uuid7(), name=DEMO_ORG_NAME, slug=DEMO_ORG_SLUG,
    )


async def seed_users(session: AsyncSession, organization_id: UUID) -> list[UserRow]:
    """Create the demo admin and user. Both share DEMO_PASSWORD."""
    repo = UserRepository(session)
    password_hash = hash_password(DEMO_PASSWORD)
    rows = []
    for spec in DEMO_USERS:
        rows.append(await repo.create(
            user_id=new_uuid7(),
            password_hash=password_hash,
            organization_id=organization_id,
            **spec,
        ))
    return rows


async def seed_sample_article(session: AsyncSession, organization_id: UUID,
                              author_id: UUID) -> ArticleRow:
    category = await CategoryRepository(session).get_by_name(
        organization_id, SAMPLE_ARTICLE["category"],
    )
    if category is None:
        msg = f"Category {SAMPLE_ARTICLE['category']!r} must be seeded first"
        raise LookupError(msg)
    return await ArticleRepository(session).create(
        article_id=new_uuid7(),
        organization_id=organization_id,
        category_id=category.category_id,
        author_id=author_id,
        title=SAMPLE_ARTICLE["title"],
        content=SAMPLE_ARTICLE["content"],
        status=ArticleStatus.PUBLISHED.value,
    )


async def seed_demo(session: AsyncSession) -> dict:
    """Idempotent demo seed: organization + users + categories + article.

    Returns dict with keys: created (bool), organization_id, and on creation
    the seeded emails, category count and article id.
    """
    existing = await OrganizationRepository(session).get_by_slug(DEMO_ORG_SLUG)
    if existing is not None:
        return {"created": False, "organization_id": existing.organization_id}

    org = await seed_organization(session)
    users = await seed_users(session, org.organization_id)
    categories_created = await ensure_default_categories(session)
    admin = next(u for u in users if u.role == UserRole.ADMIN.value)
    article = await seed_sample_article(session, org.organization_id, admin.user_id)

    return {
        "created": True,
        "organization_id": org.organization_id,
        "user_emails": [u.email for u in users],
        "categories_created": categories_created,
        "article_id": article.article_id,
    }


# ---------------------------------------------------------------------------
# CLI entry point: python -m scripts.seed
# ---------------------------------------------------------------------------


async def _run_seed() -> None:
    from src.db.session import async_session_factory

    async with async_session_factory() as session:
        result = await seed_demo(session)

        if not result["created"]:
            print(f"Demo data already seeded (organization {DEMO_ORG_SLUG} exists). Skipping.")
            print(f"  Organization: {result['organization_id']}")
            return

        await session.commit()

        print("Seed complete.")
        print(f"  Organization: {result['organization_id']}")
        for email in result["user_emails"]:
            print(f"  User:         {email} / {DEMO_PASSWORD}")
        print(f"  Categories:   {result['categories_created']} created")
        print(f"  Article:      {result['article_id']}")


if __name__ == "__main__":
    asyncio.run(_run_seed())
