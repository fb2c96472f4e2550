"""
Shared utilities and common types for the parser module.
"""

from .constants import DEFAULT_MODELS_FOLDER, SUPPORTED_SQL_EXTENSIONS
from .hashing import compute_sql_hash
from .types import (
    ColumnMetadata,
    FilePath,
    ModelFailure,
    ModelIdentity,
    ModelMetadata,
    RawReference,
)

__all__ = [
    # Types
    "ColumnMetadata",
    "FilePath",
    "ModelFailure",
    "ModelIdentity",
    "ModelMetadata",
    "RawReference",
    # Constants
    "DEFAULT_MODELS_FOLDER",
    "SUPPORTED_SQL_EXTENSIONS",
    # Utilities
    "compute_sql_hash",
]
