"""
Parse command implementation.
"""

from pathlib import Path

import typer

from cadac.cli.context import CommandContext
from cadac.cli.utils import render_output
from cadac.executor import load_catalog


def cmd_parse(
    project_folder: str,
    output_format: str = "json",
    output_file: str | None = None,
    verbose: bool = False,
) -> None:
    """Execute the parse command: export the catalog of a project."""
    ctx = CommandContext(project_folder=project_folder, verbose=verbose)

    try:
        catalog = load_catalog(ctx.project_path, ctx.config)
        data = catalog.to_dict()
        data["graph"] = catalog.graph.to_dict()
        rendered = render_output(data, output_format)
    except Exception as e:
        ctx.handle_error(e)

    if output_file:
        Path(output_file).write_text(rendered, encoding="utf-8")
        typer.echo(f"Wrote catalog of {len(catalog)} models to {output_file}")
    else:
        typer.echo(rendered)

    if catalog.has_failures:
        raise typer.Exit(1)
