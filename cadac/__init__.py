"""
cadac

Discovers SQL models on disk, infers their dependencies by reading their SQL,
and materializes them against a target database in dependency order.
"""

from .parser import DependencyGraph, ModelCatalog, SQLParser, discover, parse  # noqa: I001
from .engine import ExecutionEngine, RunOptions, RunReport
from .adapters import PostgreSQLAdapter, DatabricksAdapter, SnowflakeAdapter
from .executor import load_catalog, run_models

__all__ = [
    "DatabricksAdapter",
    "DependencyGraph",
    "ExecutionEngine",
    "ModelCatalog",
    "PostgreSQLAdapter",
    "RunOptions",
    "RunReport",
    "SQLParser",
    "SnowflakeAdapter",
    "discover",
    "load_catalog",
    "parse",
    "run_models",
]
