"""
Setup shared by the cadac commands.
"""

import traceback
from pathlib import Path
from typing import NoReturn

import typer

from cadac.engine.config import DEFAULT_TARGET_NAME, load_project_config
from cadac.exceptions import ConfigError

from .selection import ModelSelector
from .utils import setup_logging


class CommandContext:
    """
    Per-invocation state of a command.

    Configures logging, resolves the project folder, loads its configuration
    and builds the model selector. Configuration errors end the command with
    exit code 1.
    """

    def __init__(
        self,
        project_folder: str,
        verbose: bool = False,
        select: list[str] | None = None,
        exclude: list[str] | None = None,
        target_name: str = DEFAULT_TARGET_NAME,
    ):
        self.verbose = verbose
        setup_logging(verbose)

        self.project_path = Path(project_folder).resolve()
        self.selector = ModelSelector(select, exclude)

        try:
            self.config = load_project_config(self.project_path, target_name)
        except ConfigError as e:
            self.handle_error(e)

    def handle_error(self, error: Exception, show_traceback: bool | None = None) -> NoReturn:
        """
        Report an error on stderr and exit with code 1.

        The traceback is printed too when running verbose, unless
        `show_traceback` says otherwise.
        """
        prefix = typer.style("Error: ", fg=typer.colors.RED, bold=True)
        typer.echo(f"{prefix}{error}", err=True)
        if self.verbose if show_traceback is None else show_traceback:
            traceback.print_exc()
        raise typer.Exit(1)

    def print_selection_info(self) -> None:
        if not self.verbose:
            return
        if self.selector.select_patterns:
            typer.echo(f"Selecting: {', '.join(self.selector.select_patterns)}")
        if self.selector.exclude_patterns:
            typer.echo(f"Excluding: {', '.join(self.selector.exclude_patterns)}")
