"""
Command-line interface for cadac.
"""

from .main import app, main

__all__ = ["app", "main"]
