"""
Exception taxonomy shared by the parser, graph, engine and adapters.

Every error carries the context needed to act on it (file path, qualified
name, cycle path or dialect) so that it can be reported without a debugger.
"""

from enum import Enum
from pathlib import Path


class CadacError(Exception):
    """Base exception for all cadac errors."""

    pass


class ConfigError(CadacError):
    """Raised when project configuration is missing or malformed."""

    pass


class DiscoveryError(CadacError):
    """Raised when model files cannot be enumerated or read."""

    def __init__(self, message: str, file_path: str | Path | None = None) -> None:
        super().__init__(message)
        self.file_path = Path(file_path) if file_path is not None else None


class ModelIdentityError(DiscoveryError):
    """Raised when a qualified name cannot be derived from a model path."""

    pass


class ModelParseError(CadacError):
    """Base class for per-file SQL extraction failures."""

    def __init__(
        self,
        message: str,
        file_path: str | Path | None = None,
        qualified_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.file_path = Path(file_path) if file_path is not None else None
        self.qualified_name = qualified_name

    def __str__(self) -> str:
        message = super().__str__()
        where = self.qualified_name or (str(self.file_path) if self.file_path else None)
        return f"{where}: {message}" if where else message


class ParseError(ModelParseError):
    """Raised when SQL text is malformed or is not a query."""

    pass


class MultipleStatementsError(ModelParseError):
    """Raised when a model file holds more than one top-level statement."""

    def __init__(
        self,
        count: int,
        file_path: str | Path | None = None,
        qualified_name: str | None = None,
    ) -> None:
        super().__init__(
            f"Found {count} SQL statements, but only 1 statement is allowed per model",
            file_path=file_path,
            qualified_name=qualified_name,
        )
        self.count = count


class DuplicateModelError(CadacError):
    """Raised when two files resolve to the same qualified name."""

    def __init__(self, qualified_name: str, paths: list[Path]) -> None:
        joined = ", ".join(str(p) for p in paths)
        super().__init__(f"Model '{qualified_name}' is defined more than once: {joined}")
        self.qualified_name = qualified_name
        self.paths = list(paths)


class CycleError(CadacError):
    """Raised when the dependency graph contains a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        path = " -> ".join(cycle + cycle[:1])
        super().__init__(f"Circular dependency detected: {path}")
        self.cycle = list(cycle)


class ModelNotFoundError(CadacError):
    """Raised when a requested model is not in the catalog."""

    def __init__(self, qualified_name: str, available: list[str] | None = None) -> None:
        message = f"Model '{qualified_name}' not found in catalog"
        if available:
            message += f". Available models: {', '.join(sorted(available))}"
        super().__init__(message)
        self.qualified_name = qualified_name


class UnsupportedDialectError(CadacError):
    """Raised when no adapter is registered for a dialect."""

    def __init__(self, dialect: str, supported: list[str] | None = None) -> None:
        message = f"Unsupported dialect: {dialect}"
        if supported is not None:
            message += f". Supported dialects: {sorted(supported)}"
        super().__init__(message)
        self.dialect = dialect


class InvalidConnectionStringError(CadacError):
    """Raised when a connection string has the wrong shape for its adapter."""

    def __init__(self, message: str, dialect: str | None = None) -> None:
        super().__init__(message)
        self.dialect = dialect


class DatabaseConnectionError(CadacError, ConnectionError):
    """Raised when an adapter cannot open a connection."""

    def __init__(self, message: str, dialect: str | None = None) -> None:
        super().__init__(message)
        self.dialect = dialect


class ConnectionTimeoutError(DatabaseConnectionError, TimeoutError):
    """Raised when opening a connection exceeds its timeout."""

    pass


class ExecutionErrorKind(Enum):
    """Categories of statement execution failures."""

    SYNTAX = "syntax"
    UNDEFINED_OBJECT = "undefined_object"
    PERMISSION = "permission"
    CONSTRAINT = "constraint"
    CONNECTIVITY = "connectivity"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class ExecutionError(CadacError):
    """Raised when a statement fails on the target database."""

    def __init__(
        self,
        message: str,
        kind: ExecutionErrorKind = ExecutionErrorKind.UNKNOWN,
        qualified_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.qualified_name = qualified_name

    def __str__(self) -> str:
        return f"[{self.kind.value}] {super().__str__()}"


class QueryTimeoutError(ExecutionError, TimeoutError):
    """Raised when a statement exceeds its timeout."""

    def __init__(self, message: str, qualified_name: str | None = None) -> None:
        super().__init__(message, kind=ExecutionErrorKind.TIMEOUT, qualified_name=qualified_name)
