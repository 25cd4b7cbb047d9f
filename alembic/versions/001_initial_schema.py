"""Initial schema: organizations, users, categories, articles.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# UUID on Postgres, CHAR(32) elsewhere (matches the ORM's Uuid type).
_uuid = UUID(as_uuid=True).with_variant(sa.Uuid(), "sqlite")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # -- Tenancy --
    op.create_table(
        "organizations",
        sa.Column("organization_id", _uuid, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("user_id", _uuid, primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("role", sa.String(20), nullable=False, server_default="USER"),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("organization_id", _uuid,
                  sa.ForeignKey("organizations.organization_id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_organization_id", "users", ["organization_id"])

    # -- Content --
    op.create_table(
        "categories",
        sa.Column("category_id", _uuid, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("icon", sa.String(50), nullable=False, server_default="server"),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("organization_id", _uuid,
                  sa.ForeignKey("organizations.organization_id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("organization_id", "name", name="uq_category_org_name"),
    )
    op.create_index("ix_categories_organization_id", "categories", ["organization_id"])

    op.create_table(
        "articles",
        sa.Column("article_id", _uuid, primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text, nullable=False, server_default=""),
        sa.Column("status", sa.String(20), nullable=False, server_default="PUBLISHED"),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("category_id", _uuid,
                  sa.ForeignKey("categories.category_id"), nullable=False),
        sa.Column("author_id", _uuid,
                  sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("organization_id", _uuid,
                  sa.ForeignKey("organizations.organization_id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_articles_category_id", "articles", ["category_id"])
    op.create_index("ix_articles_organization_id", "articles", ["organization_id"])


def downgrade() -> None:
    op.drop_index("ix_articles_organization_id", table_name="articles")
    op.drop_index("ix_articles_category_id", table_name="articles")
    op.drop_table("articles")
    op.drop_index("ix_categories_organization_id", table_name="categories")
    op.drop_table("categories")
    op.drop_index("ix_users_organization_id", table_name="users")
    op.drop_table("users")
    op.drop_table("organizations")
