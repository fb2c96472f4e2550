"""
Core database adapter and connection base classes.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from sqlglot import exp

from cadac.engine.results import ExecutionResult
from cadac.exceptions import InvalidConnectionStringError
from cadac.parser.shared.types import ModelIdentity

from .config import MaterializationType, Target


class DatabaseConnection(ABC):
    """
    An open connection to a target database.

    Statements run inside `transaction()` are committed together when the block
    exits normally and rolled back when it raises.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, sql: str, timeout: float | None = None) -> ExecutionResult:
        """
        Execute one statement.

        Args:
            sql: The statement to execute
            timeout: Statement timeout in seconds (the connection default when None)

        Returns:
            ExecutionResult with the affected row count and timing

        Raises:
            ExecutionError: Categorized statement failure
            QueryTimeoutError: If the statement exceeds its timeout
        """
        pass

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        pass

    @contextmanager
    def transaction(self) -> Iterator["DatabaseConnection"]:
        """Run the enclosed statements as one unit of work."""
        try:
            yield self
        except BaseException:
            self._rollback_quietly()
            raise
        else:
            # A rejected commit leaves the transaction open on some drivers
            try:
                self.commit()
            except BaseException:
                self._rollback_quietly()
                raise

    def _rollback_quietly(self) -> None:
        try:
            self.rollback()
        except Exception as e:
            self.logger.warning(f"Rollback failed: {e}")

    def __enter__(self) -> "DatabaseConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    An adapter knows how to validate connection strings for its platform, open
    connections, and render the statements that materialize a model.
    """

    # Override in subclasses
    dialect: str = ""
    schemes: tuple[str, ...] = ()
    sqlglot_dialect: str | None = None

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def validate_connection_string(self, connection_string: str) -> Target:
        """
        Check that a connection string targets this adapter, without any I/O.

        Returns:
            The parsed target

        Raises:
            InvalidConnectionStringError: If the string has the wrong shape
        """
        target = Target.parse(connection_string)
        if target.scheme not in self.schemes:
            expected = " or ".join(f"{s}://" for s in self.schemes)
            raise InvalidConnectionStringError(
                f"Invalid {self.dialect} connection string: must start with {expected}",
                dialect=self.dialect,
            )
        return target

    @abstractmethod
    def connect(self, connection_string: str, timeout: float | None = None) -> DatabaseConnection:
        """
        Open a connection.

        Args:
            connection_string: Validated connection string
            timeout: Connect and default statement timeout in seconds

        Raises:
            DatabaseConnectionError: If the database cannot be reached
            ConnectionTimeoutError: If connecting exceeds the timeout
        """
        pass

    def render_materialization(
        self, identity: ModelIdentity, sql: str, mode: MaterializationType
    ) -> list[str]:
        """
        Render the statements that materialize a model.

        Args:
            identity: Identity of the model
            sql: The model query
            mode: Materialization mode

        Returns:
            Statements to run, in order, inside one transaction
        """
        mode = MaterializationType.from_value(mode)
        schema = self.quote_identifier(identity.schema_name)
        relation = f"{schema}.{self.quote_identifier(identity.table_name)}"
        query = self.strip_terminator(sql)

        statements = [f"CREATE SCHEMA IF NOT EXISTS {schema}"]
        if mode == MaterializationType.VIEW:
            statements.append(f"CREATE OR REPLACE VIEW {relation} AS\n{query}")
        else:
            statements.append(f"DROP TABLE IF EXISTS {relation}")
            statements.append(f"CREATE TABLE {relation} AS\n{query}")
        return statements

    def quote_identifier(self, name: str) -> str:
        """Render an identifier for this dialect, quoting it only when required."""
        return exp.to_identifier(name).sql(dialect=self.sqlglot_dialect)

    @staticmethod
    def strip_terminator(sql: str) -> str:
        """Remove trailing whitespace and statement terminators from a query."""
        query = sql.strip()
        while query.endswith(";"):
            query = query[:-1].rstrip()
        return query
