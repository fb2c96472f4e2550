"""
cadac command line.

Commands:
- run: materialize models in dependency order
- parse: export the model catalog as JSON or YAML
- graph: print the execution order and lineage
"""

import typer

from cadac.cli.commands import cmd_graph, cmd_parse, cmd_run
from cadac.parser.shared.constants import EXPORT_FORMATS


class SortedCommandGroup(typer.core.TyperGroup):
    """Lists commands by name in the help output."""

    def list_commands(self, ctx: typer.Context) -> list[str]:
        return sorted(self.commands)


def check_export_format(value: str) -> str:
    if value not in EXPORT_FORMATS:
        choices = ", ".join(EXPORT_FORMATS)
        raise typer.BadParameter(f"'{value}' is not an export format (choose from {choices})")
    return value


app = typer.Typer(
    name="cadac",
    help="Discover, order and materialize SQL models.",
    add_completion=False,
    cls=SortedCommandGroup,
    invoke_without_command=True,
)


@app.callback()
def root(ctx: typer.Context) -> None:
    """Print help when cadac is called without a command."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _help_unless_given(ctx: typer.Context, project_folder: str | None) -> str:
    """Show the command help and stop when the project folder is missing."""
    if project_folder is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    return project_folder


# Shared parameters
PROJECT = typer.Argument(None, help="Project folder (holds cadac.toml and the models folder)")
VERBOSE = typer.Option(False, "-v", "--verbose", help="Log at DEBUG level")
SELECT = typer.Option(None, "-s", "--select", help="Model name or pattern to include (repeatable)")
EXCLUDE = typer.Option(None, "-e", "--exclude", help="Model name or pattern to leave out (repeatable)")


@app.command()
def run(
    ctx: typer.Context,
    project_folder: str | None = PROJECT,
    verbose: bool = VERBOSE,
    select: list[str] | None = SELECT,
    exclude: list[str] | None = EXCLUDE,
    upstream: bool = typer.Option(False, "--upstream", help="Add the models the selection reads from"),
    downstream: bool = typer.Option(
        False, "--downstream", help="Add the models that read from the selection"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the plan without connecting"),
    fail_fast: bool = typer.Option(
        True, "--fail-fast/--no-fail-fast", help="Stop at the first failed model"
    ),
    target: str | None = typer.Option(None, "--target", help="Connection string of the target"),
    target_name: str = typer.Option(
        "default", "--target-name", help="Target table to read from cadac.toml"
    ),
) -> None:
    """Materialize models in dependency order."""
    cmd_run(
        project_folder=_help_unless_given(ctx, project_folder),
        verbose=verbose,
        select=select,
        exclude=exclude,
        upstream=upstream,
        downstream=downstream,
        dry_run=dry_run,
        fail_fast=fail_fast,
        target=target,
        target_name=target_name,
    )


@app.command()
def parse(
    ctx: typer.Context,
    project_folder: str | None = PROJECT,
    output_format: str = typer.Option(
        "json", "-f", "--format", help="json or yaml", callback=check_export_format
    ),
    output_file: str | None = typer.Option(None, "-o", "--output", help="Write the export to a file"),
    verbose: bool = VERBOSE,
) -> None:
    """Export the model catalog and dependency graph."""
    cmd_parse(
        project_folder=_help_unless_given(ctx, project_folder),
        output_format=output_format,
        output_file=output_file,
        verbose=verbose,
    )


@app.command()
def graph(
    ctx: typer.Context,
    project_folder: str | None = PROJECT,
    verbose: bool = VERBOSE,
    select: list[str] | None = SELECT,
    exclude: list[str] | None = EXCLUDE,
) -> None:
    """Print the execution order and lineage of models."""
    cmd_graph(
        project_folder=_help_unless_given(ctx, project_folder),
        verbose=verbose,
        select=select,
        exclude=exclude,
    )


def main() -> None:
    app()
