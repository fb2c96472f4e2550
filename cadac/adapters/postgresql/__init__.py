"""
PostgreSQL adapter implementation.
"""

from .adapter import PostgreSQLAdapter, PostgreSQLConnection, categorize_error

__all__ = ["PostgreSQLAdapter", "PostgreSQLConnection", "categorize_error"]
