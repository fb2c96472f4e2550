"""
SQL parsing components.
"""

from .base import BaseParser
from .sql_parser import SQLParser, parse

__all__ = ["BaseParser", "SQLParser", "parse"]
