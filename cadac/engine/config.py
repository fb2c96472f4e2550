"""
Project configuration management.

This module loads project settings from cadac.toml (or the [tool.cadac] table
of pyproject.toml) and environment variables, with environment variables
taking precedence.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cadac.adapters.base import MaterializationType
from cadac.exceptions import ConfigError
from cadac.parser.shared.constants import DEFAULT_MODELS_FOLDER

CONFIG_FILE_NAME = "cadac.toml"
DEFAULT_TARGET_NAME = "default"
DEFAULT_TIMEOUT = 300.0

# Environment variable -> configuration key
ENV_MAPPINGS = {
    "CADAC_TARGET_URL": "url",
    "CADAC_TIMEOUT": "timeout",
    "CADAC_MODELS_DIR": "models_dir",
}


@dataclass(frozen=True)
class TargetConfig:
    """Connection settings of a named target."""

    name: str
    url: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    materialization: MaterializationType = MaterializationType.TABLE


@dataclass(frozen=True)
class ProjectConfig:
    """Resolved settings of a project."""

    project_folder: Path
    models_dir: str = DEFAULT_MODELS_FOLDER
    dialect: str | None = None
    target: TargetConfig = field(default_factory=lambda: TargetConfig(name=DEFAULT_TARGET_NAME))
    source: Path | None = None

    @property
    def models_path(self) -> Path:
        return self.project_folder / self.models_dir


class ProjectConfigManager:
    """Manages project configuration from multiple sources."""

    def __init__(self, project_folder: str | Path | None = None) -> None:
        self.project_folder = Path(project_folder) if project_folder else Path.cwd()
        self.logger = logging.getLogger(self.__class__.__name__)

    def load_config(self, target_name: str = DEFAULT_TARGET_NAME) -> ProjectConfig:
        """
        Load project configuration from TOML and environment variables.

        Args:
            target_name: Name of the [targets.<name>] table to use

        Returns:
            ProjectConfig with merged configuration

        Raises:
            ConfigError: If the configuration file or a value is malformed
        """
        toml_config, source = self._load_toml_config()
        env_config = self._load_env_config()

        targets = toml_config.get("targets", {})
        if not isinstance(targets, dict):
            raise ConfigError(f"'targets' must be a table in {source}")

        target_config = targets.get(target_name)
        if target_config is None:
            if target_name != DEFAULT_TARGET_NAME:
                raise ConfigError(
                    f"Target '{target_name}' not found. Available targets: {sorted(targets)}"
                )
            target_config = {}
        if not isinstance(target_config, dict):
            raise ConfigError(f"Target '{target_name}' must be a table in {source}")

        # Environment variables override the file
        merged = {**toml_config, **target_config}
        merged.update(env_config)

        return ProjectConfig(
            project_folder=self.project_folder,
            models_dir=self._get_str(merged, "models_dir") or DEFAULT_MODELS_FOLDER,
            dialect=self._get_str(merged, "dialect"),
            target=TargetConfig(
                name=target_name,
                url=self._get_str(merged, "url"),
                timeout=self._get_timeout(merged),
                materialization=self._get_materialization(merged),
            ),
            source=source,
        )

    def _load_toml_config(self) -> tuple[dict[str, Any], Path | None]:
        """Load configuration from cadac.toml or pyproject.toml."""
        config_file = self.project_folder / CONFIG_FILE_NAME
        pyproject_file = self.project_folder / "pyproject.toml"

        if config_file.exists():
            return self._read_toml(config_file), config_file

        if pyproject_file.exists():
            data = self._read_toml(pyproject_file)
            cadac_config = data.get("tool", {}).get("cadac")
            if cadac_config is not None:
                if not isinstance(cadac_config, dict):
                    raise ConfigError(f"[tool.cadac] must be a table in {pyproject_file}")
                return cadac_config, pyproject_file

        self.logger.debug(f"No {CONFIG_FILE_NAME} or [tool.cadac] found, using defaults")
        return {}, None

    @staticmethod
    def _read_toml(path: Path) -> dict[str, Any]:
        try:
            with open(path, "rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Could not read {path}: {e}") from e

    def _load_env_config(self) -> dict[str, Any]:
        """Load configuration from environment variables."""
        env_config = {}
        for env_var, config_key in ENV_MAPPINGS.items():
            value = os.getenv(env_var)
            if value:
                self.logger.debug(f"Using {env_var} from environment")
                env_config[config_key] = value
        return env_config

    @staticmethod
    def _get_str(config: dict[str, Any], key: str) -> str | None:
        value = config.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise ConfigError(f"'{key}' must be a string, got {type(value).__name__}")
        return value

    @staticmethod
    def _get_timeout(config: dict[str, Any]) -> float:
        value = config.get("timeout", DEFAULT_TIMEOUT)
        if isinstance(value, bool):
            raise ConfigError("'timeout' must be a number of seconds")
        try:
            timeout = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"'timeout' must be a number of seconds, got {value!r}") from e
        if timeout <= 0:
            raise ConfigError(f"'timeout' must be positive, got {value!r}")
        return timeout

    @staticmethod
    def _get_materialization(config: dict[str, Any]) -> MaterializationType:
        value = config.get("materialization", MaterializationType.TABLE.value)
        try:
            return MaterializationType.from_value(value)
        except ValueError as e:
            raise ConfigError(str(e)) from e


def load_project_config(
    project_folder: str | Path | None = None, target_name: str = DEFAULT_TARGET_NAME
) -> ProjectConfig:
    """
    Convenience function to load project configuration.

    Args:
        project_folder: Project root directory (defaults to current directory)
        target_name: Name of the target to use

    Returns:
        ProjectConfig object
    """
    return ProjectConfigManager(project_folder).load_config(target_name)
