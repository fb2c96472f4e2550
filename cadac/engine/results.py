"""
Execution results and run reports.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from cadac.exceptions import ExecutionErrorKind


class ExecutionStatus(Enum):
    """Outcome of one model in a run."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of executing SQL against a target.

    Adapters return one per statement (without a qualified name); the engine
    records one per model of the run.

    `sql_hash` of a per-statement result hashes the statement sent to the
    database. For a model result it is the hash of the model's source SQL,
    whatever the status, so that successful, failed and skipped runs of the
    same model compare equal.
    """

    qualified_name: str | None
    status: ExecutionStatus
    rows_affected: int = 0
    elapsed: float = 0.0
    error: str | None = None
    error_kind: ExecutionErrorKind | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    sql_hash: str = ""
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == ExecutionStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "qualified_name": self.qualified_name,
            "status": self.status.value,
            "rows_affected": self.rows_affected,
            "elapsed": round(self.elapsed, 6),
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "started_at": self.started_at.isoformat(),
            "sql_hash": self.sql_hash,
            "message": self.message,
        }


@dataclass
class RunReport:
    """Ordered results of one run, with overall outcome and timing."""

    results: list[ExecutionResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    elapsed: float = 0.0
    dry_run: bool = False
    cancelled: bool = False
    plan: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        return [r.qualified_name for r in self.results if r.status == ExecutionStatus.SUCCESS]

    @property
    def failed(self) -> list[str]:
        return [r.qualified_name for r in self.results if r.status == ExecutionStatus.FAILED]

    @property
    def skipped(self) -> list[str]:
        return [r.qualified_name for r in self.results if r.status == ExecutionStatus.SKIPPED]

    @property
    def success(self) -> bool:
        """True when nothing failed and the run was not cancelled."""
        return not self.failed and not self.cancelled

    def result_for(self, qualified_name: str) -> ExecutionResult | None:
        return next((r for r in self.results if r.qualified_name == qualified_name), None)

    def summary(self) -> str:
        status = "cancelled" if self.cancelled else ("succeeded" if self.success else "failed")
        prefix = "Dry run" if self.dry_run else "Run"
        return (
            f"{prefix} {status}: {len(self.succeeded)} succeeded, {len(self.failed)} failed, "
            f"{len(self.skipped)} skipped in {self.elapsed:.2f}s"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "dry_run": self.dry_run,
            "cancelled": self.cancelled,
            "started_at": self.started_at.isoformat(),
            "elapsed": round(self.elapsed, 6),
            "plan": list(self.plan),
            "results": [r.to_dict() for r in self.results],
            "summary": {
                "succeeded": len(self.succeeded),
                "failed": len(self.failed),
                "skipped": len(self.skipped),
            },
        }
