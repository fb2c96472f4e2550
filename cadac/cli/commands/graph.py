"""
Graph command implementation.
"""

import typer

from cadac.cli.context import CommandContext
from cadac.executor import load_catalog


def cmd_graph(
    project_folder: str,
    verbose: bool = False,
    select: list[str] | None = None,
    exclude: list[str] | None = None,
) -> None:
    """Execute the graph command: show execution order and lineage."""
    ctx = CommandContext(
        project_folder=project_folder, verbose=verbose, select=select, exclude=exclude
    )

    try:
        catalog = load_catalog(ctx.project_path, ctx.config)
        graph = catalog.graph
        subset = ctx.selector.filter_models(catalog.names()) if ctx.selector.is_active else None
        order = graph.execution_order(subset)
    except Exception as e:
        ctx.handle_error(e)

    typer.echo(
        f"{graph.model_count} models, {graph.dependency_count} dependencies\n"
    )
    typer.echo("Execution order:")
    for index, name in enumerate(order, start=1):
        typer.echo(f"  {index}. {name}")

    typer.echo("\nLineage:")
    for name in order:
        upstream = ", ".join(graph.dependencies(name)) or "-"
        downstream = ", ".join(graph.dependents(name)) or "-"
        typer.echo(f"  {name}")
        typer.echo(f"    depends on: {upstream}")
        typer.echo(f"    used by:    {downstream}")
