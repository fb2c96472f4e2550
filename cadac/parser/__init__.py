"""
Model parsing: SQL metadata extraction, catalog, resolution and dependency graph.
"""

from .analysis import DependencyGraph, ExternalTable, InternalModel, ReferenceResolver, resolve
from .core import ModelCatalog, discover
from .parsers import SQLParser, parse
from .processing import FileDiscovery, read_source
from .shared import (
    ColumnMetadata,
    ModelFailure,
    ModelIdentity,
    ModelMetadata,
    RawReference,
    compute_sql_hash,
)

__all__ = [
    "ColumnMetadata",
    "DependencyGraph",
    "ExternalTable",
    "FileDiscovery",
    "InternalModel",
    "ModelCatalog",
    "ModelFailure",
    "ModelIdentity",
    "ModelMetadata",
    "RawReference",
    "ReferenceResolver",
    "SQLParser",
    "compute_sql_hash",
    "discover",
    "parse",
    "read_source",
    "resolve",
]
