"""Tests for database error descriptions."""

from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from src.db.errors import describe_db_error, is_unique_violation


class TestDescribeDbError:

    def test_connection_failure(self) -> None:
        exc = OperationalError("SELECT 1", {}, Exception("could not connect to server"))
        assert "DATABASE_URL" in describe_db_error(exc)

    def test_missing_table_sqlite(self) -> None:
        exc = OperationalError("SELECT * FROM users", {}, Exception("no such table: users"))
        assert "run migrations" in describe_db_error(exc)

    def test_missing_table_postgres(self) -> None:
        exc = ProgrammingError(
            "SELECT * FROM users", {}, Exception('relation "users" does not exist'),
        )
        assert "run migrations" in describe_db_error(exc)

    def test_generic(self) -> None:
        exc = ProgrammingError("SELECT", {}, Exception("syntax error"))
        assert describe_db_error(exc) == "Internal server error while accessing the database."


class TestUniqueViolation:

    def test_sqlite_message(self) -> None:
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
        assert is_unique_violation(exc)

    def test_postgres_message(self) -> None:
        exc = IntegrityError("INSERT", {}, Exception("duplicate key value violates unique constraint"))
        assert is_unique_violation(exc)

    def test_fk_violation_is_not_unique(self) -> None:
        exc = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
        assert not is_unique_violation(exc)
