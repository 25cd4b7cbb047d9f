"""Check database connectivity using DATABASE_URL from settings.

Usage:
    python -m scripts.check_db
"""

from __future__ import annotations

import asyncio
import re
import sys

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine

from src.config.settings import get_settings
from src.db.errors import describe_db_error

_PASSWORD_IN_URL = re.compile(r":[^:@/]+@")


def mask_url(url: str) -> str:
    """Hide the password part of a database URL."""
    return _PASSWORD_IN_URL.sub(":****@", url, count=1)


async def check(url: str) -> tuple[bool, str]:
    engine = create_async_engine(url)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return False, describe_db_error(exc)
    finally:
        await engine.dispose()
    return True, "Connected successfully."


def main() -> int:
    url = get_settings().DATABASE_URL
    print(f"Attempting to connect to: {mask_url(url)}")
    ok, message = asyncio.run(check(url))
    print(("  OK: " if ok else "  FAILED: ") + message)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
