"""
Execution engine that materializes models in dependency order.

Models run one at a time in topological order on a single worker. Each model
gets its own connection, closed on every exit path, and its statements run in
one transaction.
"""

import logging
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from cadac.adapters import AdapterRegistry, default_registry
from cadac.adapters.base import DatabaseAdapter, MaterializationType, Target
from cadac.exceptions import (
    ConfigError,
    ConnectionTimeoutError,
    DatabaseConnectionError,
    ExecutionError,
    ExecutionErrorKind,
    ModelNotFoundError,
)
from cadac.parser.core.catalog import ModelCatalog

from .config import DEFAULT_TIMEOUT
from .results import ExecutionResult, ExecutionStatus, RunReport

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    """Options of a single run."""

    include_upstream: bool = False
    include_downstream: bool = False
    dry_run: bool = False
    fail_fast: bool = True
    target: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    materialization: MaterializationType = MaterializationType.TABLE


class ExecutionEngine:
    """
    Runs the models of a catalog against a target database.

    The engine supports:
    - Selection of models with their upstream and downstream models
    - Dry runs that plan without connecting
    - Fail-fast runs that skip everything after the first failure
    - Cooperative cancellation between models
    """

    def __init__(self, catalog: ModelCatalog, registry: AdapterRegistry | None = None) -> None:
        """
        Initialize the execution engine.

        Args:
            catalog: Catalog of the models to run
            registry: Adapter registry (the default registry when None)
        """
        self.catalog = catalog
        self.registry = registry or default_registry()
        self.logger = logging.getLogger(self.__class__.__name__)
        self._cancel_event = threading.Event()

    def cancel(self) -> None:
        """Stop issuing new models; the model in flight completes or rolls back first."""
        self.logger.info("Cancellation requested")
        self._cancel_event.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    def plan(self, models: Iterable[str] | None = None, options: RunOptions | None = None) -> list[str]:
        """
        Compute the ordered list of models a run would execute.

        Args:
            models: Requested models (all models when None or empty)
            options: Run options controlling upstream and downstream expansion

        Returns:
            Qualified names in execution order

        Raises:
            ModelNotFoundError: If a requested model is not in the catalog
            CycleError: If the catalog's models form a cycle
        """
        options = options or RunOptions()
        graph = self.catalog.graph
        requested = list(models or [])
        if not requested:
            return graph.execution_order()

        selected: set[str] = set()
        for name in requested:
            if name not in graph:
                raise ModelNotFoundError(name, available=graph.models)
            selected.add(name)
            if options.include_upstream:
                selected |= graph.upstream(name)
            if options.include_downstream:
                selected |= graph.downstream(name)

        return graph.execution_order(selected, include_upstream=False)

    def run(
        self,
        models: Iterable[str] | None = None,
        options: RunOptions | None = None,
        connection: str | None = None,
    ) -> RunReport:
        """
        Execute models in dependency order.

        Args:
            models: Requested models (all models when None or empty)
            options: Run options
            connection: Connection string, overriding options.target

        Returns:
            RunReport with one result per planned model

        Raises:
            ModelNotFoundError: If a requested model is not in the catalog
            CycleError: If the catalog's models form a cycle
            ConfigError: If no target is given for a non-dry run
            UnsupportedDialectError: If no adapter accepts the target
            InvalidConnectionStringError: If the target has the wrong shape
        """
        options = options or RunOptions()
        start = time.perf_counter()
        report = RunReport(started_at=datetime.now(UTC), dry_run=options.dry_run)
        report.plan = self.plan(models, options)

        adapter = None
        connection_string = connection or options.target
        if not options.dry_run:
            adapter = self._prepare_target(connection_string)

        self.logger.info(
            f"{'Planning' if options.dry_run else 'Executing'} {len(report.plan)} models"
        )
        try:
            for index, name in enumerate(report.plan):
                if self._cancel_event.is_set():
                    report.cancelled = True
                    self._skip_remaining(report, report.plan[index:], "run cancelled")
                    break

                if options.dry_run:
                    self.logger.info(f"[dry run] Would execute {name}")
                    report.results.append(self._skipped(name, "dry run"))
                    continue

                self.logger.info(f"Executing {name} ({index + 1}/{len(report.plan)})")
                result = self._execute_model(name, adapter, connection_string, options)
                report.results.append(result)

                if result.status == ExecutionStatus.FAILED and options.fail_fast:
                    self._skip_remaining(
                        report, report.plan[index + 1 :], f"skipped after failure of {name}"
                    )
                    break
        except KeyboardInterrupt:
            self.logger.warning("Run interrupted")
            report.cancelled = True
            done = {r.qualified_name for r in report.results}
            self._skip_remaining(report, [n for n in report.plan if n not in done], "run interrupted")
        finally:
            self._cancel_event.clear()

        report.elapsed = time.perf_counter() - start
        self.logger.info(report.summary())
        return report

    def _prepare_target(self, connection_string: str | None) -> DatabaseAdapter:
        """Select and check the adapter for a target before any I/O."""
        if not connection_string:
            raise ConfigError("No target connection string configured")

        target = Target.parse(connection_string)
        adapter = self.registry.for_scheme(target.scheme)
        adapter.validate_connection_string(connection_string)
        self.logger.debug(f"Using {adapter.dialect} adapter for {target.redacted()}")
        return adapter

    def _execute_model(
        self, name: str, adapter: DatabaseAdapter, connection_string: str, options: RunOptions
    ) -> ExecutionResult:
        metadata = self.catalog[name]
        started_at = datetime.now(UTC)
        start = time.perf_counter()
        sql_hash = metadata.sql_hash

        rows_affected = 0
        connection = None
        try:
            statements = adapter.render_materialization(
                metadata.identity, metadata.sql, options.materialization
            )
            connection = adapter.connect(connection_string, timeout=options.timeout)
            with connection.transaction():
                for statement in statements:
                    rows_affected = connection.execute(statement, timeout=options.timeout).rows_affected
        except ExecutionError as e:
            return self._failed(name, e, e.kind, started_at, start, sql_hash)
        except ConnectionTimeoutError as e:
            return self._failed(name, e, ExecutionErrorKind.TIMEOUT, started_at, start, sql_hash)
        except DatabaseConnectionError as e:
            return self._failed(name, e, ExecutionErrorKind.CONNECTIVITY, started_at, start, sql_hash)
        except Exception as e:
            # Driver errors that no adapter translated stay scoped to this model
            return self._failed(name, e, ExecutionErrorKind.UNKNOWN, started_at, start, sql_hash)
        finally:
            if connection is not None:
                connection.close()

        elapsed = time.perf_counter() - start
        self.logger.info(f"Materialized {name} as {options.materialization.value} in {elapsed:.2f}s")
        return ExecutionResult(
            qualified_name=name,
            status=ExecutionStatus.SUCCESS,
            rows_affected=rows_affected,
            elapsed=elapsed,
            started_at=started_at,
            sql_hash=sql_hash,
            message=f"{options.materialization.value} materialized",
        )

    def _failed(
        self,
        name: str,
        error: Exception,
        kind: ExecutionErrorKind,
        started_at: datetime,
        start: float,
        sql_hash: str,
    ) -> ExecutionResult:
        self.logger.error(f"Failed to execute {name}: {error}")
        return ExecutionResult(
            qualified_name=name,
            status=ExecutionStatus.FAILED,
            elapsed=time.perf_counter() - start,
            error=str(error) or error.__class__.__name__,
            error_kind=kind,
            started_at=started_at,
            sql_hash=sql_hash,
        )

    def _skipped(self, name: str, message: str) -> ExecutionResult:
        metadata = self.catalog.get(name)
        return ExecutionResult(
            qualified_name=name,
            status=ExecutionStatus.SKIPPED,
            sql_hash=metadata.sql_hash if metadata else "",
            message=message,
        )

    def _skip_remaining(self, report: RunReport, names: list[str], message: str) -> None:
        for name in names:
            self.logger.info(f"Skipping {name}: {message}")
            report.results.append(self._skipped(name, message))
