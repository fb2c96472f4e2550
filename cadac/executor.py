"""
cadac Executor

Handles the complete workflow of discovering, parsing and executing SQL models
based on project configuration.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path

from cadac.engine import ExecutionEngine, ProjectConfig, RunOptions, RunReport, load_project_config
from cadac.parser import ModelCatalog

logger = logging.getLogger(__name__)


def load_catalog(project_folder: str | Path, config: ProjectConfig | None = None) -> ModelCatalog:
    """
    Discover and parse the models of a project.

    Args:
        project_folder: Path to the project folder
        config: Project configuration (loaded from the folder when None)

    Returns:
        The populated catalog, with per-file failures recorded
    """
    config = config or load_project_config(project_folder)
    catalog = ModelCatalog.discover(config.models_path, dialect=config.dialect)
    for failure in catalog.failures:
        logger.warning(f"Model not loaded: {failure}")
    return catalog


def run_models(
    project_folder: str | Path,
    models: Iterable[str] | None = None,
    options: RunOptions | None = None,
    target_name: str = "default",
    connection: str | None = None,
) -> RunReport:
    """
    Execute the models of a project in dependency order.

    Target, timeout and materialization come from the project configuration
    unless set in `options` or `connection`.

    Args:
        project_folder: Path to the project folder
        models: Models to run (all models when None)
        options: Run options
        target_name: Name of the configured target
        connection: Connection string overriding the configured target

    Returns:
        RunReport of the run
    """
    config = load_project_config(project_folder, target_name)
    options = options or RunOptions(
        timeout=config.target.timeout, materialization=config.target.materialization
    )
    if options.target is None and config.target.url:
        options = replace(options, target=config.target.url)

    catalog = load_catalog(project_folder, config)
    engine = ExecutionEngine(catalog)
    return engine.run(models, options, connection=connection)
