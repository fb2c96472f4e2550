"""
Core catalog functionality.
"""

from .catalog import ModelCatalog, discover

__all__ = ["ModelCatalog", "discover"]
