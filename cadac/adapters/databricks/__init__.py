"""
Databricks adapter.
"""

from .adapter import DatabricksAdapter

__all__ = ["DatabricksAdapter"]
