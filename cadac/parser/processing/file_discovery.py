"""
File discovery functionality for finding SQL model files.
"""

import logging
from pathlib import Path

from cadac.exceptions import DiscoveryError

from ..shared.constants import SUPPORTED_SQL_EXTENSIONS
from ..shared.types import FilePath

# Configure logging
logger = logging.getLogger(__name__)


class FileDiscovery:
    """Handles discovery of SQL model files below a models root."""

    def __init__(self, models_folder: FilePath):
        """
        Initialize the file discovery.

        Args:
            models_folder: Path to the models folder
        """
        self.models_folder = Path(models_folder)
        self._file_cache: dict[str, list[Path]] = {}

    def discover_sql_files(self) -> list[Path]:
        """
        Discover all SQL files in the models folder, recursively.

        Returns:
            Sorted list of SQL file paths

        Raises:
            DiscoveryError: If the folder does not exist or cannot be listed
        """
        try:
            cache_key = "sql_files"
            if cache_key in self._file_cache:
                return self._file_cache[cache_key]

            if not self.models_folder.exists():
                raise DiscoveryError(
                    f"Models folder not found: {self.models_folder}",
                    file_path=self.models_folder,
                )
            if not self.models_folder.is_dir():
                raise DiscoveryError(
                    f"Models path is not a directory: {self.models_folder}",
                    file_path=self.models_folder,
                )

            sql_files = []
            for ext in SUPPORTED_SQL_EXTENSIONS:
                sql_files.extend(p for p in self.models_folder.rglob(f"*{ext}") if p.is_file())

            # Sort for consistent ordering
            sql_files.sort()

            self._file_cache[cache_key] = sql_files

            logger.debug(f"Discovered {len(sql_files)} SQL files in {self.models_folder}")
            return sql_files

        except DiscoveryError:
            raise
        except OSError as e:
            raise DiscoveryError(
                f"Failed to discover SQL files: {e}", file_path=self.models_folder
            ) from e

    def clear_cache(self) -> None:
        """Clear the file discovery cache."""
        self._file_cache.clear()
        logger.debug("File discovery cache cleared")


def read_source(file_path: FilePath) -> str:
    """
    Read the SQL text of a model file.

    Args:
        file_path: Path to the SQL file

    Returns:
        The file content

    Raises:
        DiscoveryError: If the file cannot be read or is not valid UTF-8
    """
    file_path = Path(file_path)
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DiscoveryError(f"Could not read {file_path}: {e}", file_path=file_path) from e
