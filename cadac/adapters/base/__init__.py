"""
Base classes and configuration for database adapters.
"""

from .config import MaterializationType, Target
from .core import DatabaseAdapter, DatabaseConnection

__all__ = ["DatabaseAdapter", "DatabaseConnection", "MaterializationType", "Target"]
