"""Operator-facing messages for database failures surfaced through the API."""

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

_MISSING_TABLE_MARKERS = ("does not exist", "no such table", "undefinedtable")


def describe_db_error(exc: SQLAlchemyError) -> str:
    """Map a SQLAlchemy error to a message telling the operator what to fix."""
    text = str(exc).lower()
    if any(marker in text for marker in _MISSING_TABLE_MARKERS):
        return "Database tables are missing. Please run migrations (alembic upgrade head)."
    if isinstance(exc, OperationalError):
        return "Database connection failed. Please check your DATABASE_URL."
    return "Internal server error while accessing the database."


def is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate key" in text
