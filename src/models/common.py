"""Shared types, enums, and base models used across knowledge-base domain models."""

from datetime import datetime, timezone
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Shared enums ---


class UserRole(StrEnum):
    """The two roles of the authorization allow-list."""

    ADMIN = "ADMIN"
    USER = "USER"


class UserStatus(StrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class CategoryStatus(StrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class ArticleStatus(StrEnum):
    """Publication state. Drafts are visible to administrators only."""

    PUBLISHED = "PUBLISHED"
    DRAFT = "DRAFT"


class CategoryIcon(StrEnum):
    """Icon keys understood by the front end."""

    SERVER = "server"
    NETWORK = "network"
    CLOUD = "cloud"
    SECURITY = "security"
    MOBILE = "mobile"
    HARD_DRIVE = "hard-drive"


# --- Base model ---


class KBBase(BaseModel):
    """Base model with common configuration for all knowledge-base Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "protected_namespaces": (),
    }
