"""
File discovery and reading of model sources.
"""

from .file_discovery import FileDiscovery, read_source

__all__ = ["FileDiscovery", "read_source"]
