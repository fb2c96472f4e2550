"""
CLI utility functions.

Pure, stateless utility functions used across CLI commands.
"""

import json
import logging
from typing import Any

import yaml


def setup_logging(verbose: bool = False) -> None:
    """
    Set up logging configuration.

    Args:
        verbose: If True, set logging level to DEBUG, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s - %(name)s - %(message)s")


def render_output(data: dict[str, Any], output_format: str = "json") -> str:
    """
    Serialize command output.

    Args:
        data: Plain data to render
        output_format: 'json' or 'yaml'

    Returns:
        The rendered text

    Raises:
        ValueError: If the format is not supported
    """
    if output_format == "json":
        return json.dumps(data, indent=2)
    if output_format == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unsupported output format: {output_format}")


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Pluralize a word based on count."""
    if plural is None:
        plural = singular + "s"
    return plural if count != 1 else singular
