"""
Database adapters for the cadac execution engine.

This package provides pluggable database adapters that handle:
- Connection string validation
- Connection management and statement execution
- Rendering of materialization statements per dialect

Each adapter is organized in its own subpackage and registers itself with the
default registry on import.
"""

from .base import DatabaseAdapter, DatabaseConnection, MaterializationType, Target

# Import adapters to register them
from .databricks import DatabricksAdapter
from .postgresql import PostgreSQLAdapter
from .registry import (
    AdapterRegistry,
    default_registry,
    is_adapter_supported,
    list_available_adapters,
    register_adapter,
)
from .snowflake import SnowflakeAdapter

__all__ = [
    # Base classes and configuration
    "DatabaseAdapter",
    "DatabaseConnection",
    "MaterializationType",
    "Target",
    # Registry
    "AdapterRegistry",
    "default_registry",
    "register_adapter",
    "list_available_adapters",
    "is_adapter_supported",
    # Available adapters
    "DatabricksAdapter",
    "PostgreSQLAdapter",
    "SnowflakeAdapter",
]
