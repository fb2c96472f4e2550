"""
PostgreSQL adapter implementation.

This module provides PostgreSQL-specific functionality including:
- Connection string validation
- Connection management with connect and statement timeouts
- Error categorization by SQLSTATE
"""

import time
from datetime import UTC, datetime

import psycopg2
import psycopg2.extensions

from cadac.adapters.base import DatabaseAdapter, DatabaseConnection
from cadac.adapters.registry import register_adapter
from cadac.engine.results import ExecutionResult, ExecutionStatus
from cadac.exceptions import (
    ConnectionTimeoutError,
    DatabaseConnectionError,
    ExecutionError,
    ExecutionErrorKind,
    QueryTimeoutError,
)
from cadac.parser.shared.hashing import compute_sql_hash

DEFAULT_CONNECT_TIMEOUT = 30

# SQLSTATE codes mapped to a kind; classes are matched by prefix below
_SQLSTATE_KINDS = {
    "42601": ExecutionErrorKind.SYNTAX,
    "42P01": ExecutionErrorKind.UNDEFINED_OBJECT,
    "42703": ExecutionErrorKind.UNDEFINED_OBJECT,
    "3F000": ExecutionErrorKind.UNDEFINED_OBJECT,
    "42501": ExecutionErrorKind.PERMISSION,
    "57014": ExecutionErrorKind.TIMEOUT,
}
_SQLSTATE_CLASS_KINDS = {
    "23": ExecutionErrorKind.CONSTRAINT,
    "08": ExecutionErrorKind.CONNECTIVITY,
}


def categorize_error(error: Exception) -> ExecutionErrorKind:
    """Map a psycopg2 error to an ExecutionErrorKind."""
    if isinstance(error, psycopg2.extensions.QueryCanceledError):
        return ExecutionErrorKind.TIMEOUT

    pgcode = getattr(error, "pgcode", None)
    if pgcode:
        if pgcode in _SQLSTATE_KINDS:
            return _SQLSTATE_KINDS[pgcode]
        if pgcode[:2] in _SQLSTATE_CLASS_KINDS:
            return _SQLSTATE_CLASS_KINDS[pgcode[:2]]

    if isinstance(error, (psycopg2.OperationalError, psycopg2.InterfaceError)):
        return ExecutionErrorKind.CONNECTIVITY
    return ExecutionErrorKind.UNKNOWN


class PostgreSQLConnection(DatabaseConnection):
    """A psycopg2 connection running statements in explicit transactions."""

    def __init__(self, connection, timeout: float | None = None):
        super().__init__(timeout)
        self.connection = connection

    @property
    def closed(self) -> bool:
        return self.connection is None or bool(self.connection.closed)

    def execute(self, sql: str, timeout: float | None = None) -> ExecutionResult:
        if self.closed:
            raise ExecutionError(
                "Connection is closed", kind=ExecutionErrorKind.CONNECTIVITY
            )

        timeout = self.timeout if timeout is None else timeout
        started_at = datetime.now(UTC)
        start = time.perf_counter()
        try:
            with self.connection.cursor() as cursor:
                if timeout:
                    cursor.execute("SET statement_timeout = %s", (int(timeout * 1000),))
                cursor.execute(sql)
                rows_affected = max(cursor.rowcount, 0)
        except psycopg2.Error as e:
            raise self._translate_error(e, timeout) from e

        elapsed = time.perf_counter() - start
        self.logger.debug(f"Executed statement in {elapsed:.3f}s ({rows_affected} rows): {sql[:100]}")
        return ExecutionResult(
            qualified_name=None,
            status=ExecutionStatus.SUCCESS,
            rows_affected=rows_affected,
            elapsed=elapsed,
            started_at=started_at,
            sql_hash=compute_sql_hash(sql),
        )

    def commit(self) -> None:
        # Deferred constraints and serialization failures surface here
        try:
            self.connection.commit()
        except psycopg2.Error as e:
            raise self._translate_error(e, self.timeout) from e

    def rollback(self) -> None:
        if not self.closed:
            self.connection.rollback()

    def close(self) -> None:
        if self.connection is not None and not self.connection.closed:
            self.connection.close()
            self.logger.debug("Closed PostgreSQL connection")
        self.connection = None

    def _translate_error(self, error: psycopg2.Error, timeout: float | None) -> ExecutionError:
        message = (getattr(error, "pgerror", None) or str(error)).strip()
        kind = categorize_error(error)
        if kind == ExecutionErrorKind.TIMEOUT:
            return QueryTimeoutError(f"Statement exceeded timeout of {timeout}s: {message}")
        return ExecutionError(message, kind=kind)


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL database adapter backed by psycopg2."""

    dialect = "postgres"
    schemes = ("postgresql", "postgres")
    sqlglot_dialect = "postgres"

    def connect(self, connection_string: str, timeout: float | None = None) -> PostgreSQLConnection:
        target = self.validate_connection_string(connection_string)
        connect_timeout = max(1, int(timeout)) if timeout else DEFAULT_CONNECT_TIMEOUT

        try:
            connection = psycopg2.connect(connection_string, connect_timeout=connect_timeout)
        except psycopg2.OperationalError as e:
            message = str(e).strip()
            if "timeout expired" in message:
                raise ConnectionTimeoutError(
                    f"Timed out after {connect_timeout}s connecting to {target.redacted()}",
                    dialect=self.dialect,
                ) from e
            raise DatabaseConnectionError(
                f"Failed to connect to {target.redacted()}: {message}", dialect=self.dialect
            ) from e
        except psycopg2.Error as e:
            # libpq may echo fragments of the connection string, so only the type is kept
            raise DatabaseConnectionError(
                f"Failed to connect to {target.redacted()}: "
                f"connection parameters rejected by the driver ({type(e).__name__})",
                dialect=self.dialect,
            ) from e

        self.logger.info(f"Connected to PostgreSQL: {target.redacted()}")
        return PostgreSQLConnection(connection, timeout=timeout)


# Register the adapter
register_adapter("postgres", PostgreSQLAdapter)
