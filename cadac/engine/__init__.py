"""
Execution engine, run results and project configuration.
"""

from .results import ExecutionResult, ExecutionStatus, RunReport  # noqa: I001
from .config import ProjectConfig, ProjectConfigManager, TargetConfig, load_project_config
from .execution_engine import ExecutionEngine, RunOptions

__all__ = [
    "ExecutionEngine",
    "ExecutionResult",
    "ExecutionStatus",
    "ProjectConfig",
    "ProjectConfigManager",
    "RunOptions",
    "RunReport",
    "TargetConfig",
    "load_project_config",
]
