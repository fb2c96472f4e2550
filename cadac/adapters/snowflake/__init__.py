"""
Snowflake adapter.
"""

from .adapter import SnowflakeAdapter

__all__ = ["SnowflakeAdapter"]
