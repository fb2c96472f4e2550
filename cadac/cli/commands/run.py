"""
Run command implementation.
"""

import typer

from cadac.cli.context import CommandContext
from cadac.cli.utils import pluralize
from cadac.engine import ExecutionEngine, ExecutionStatus, RunOptions, RunReport
from cadac.executor import load_catalog

EXIT_CANCELLED = 130

_STATUS_ICONS = {
    ExecutionStatus.SUCCESS: "✅",
    ExecutionStatus.FAILED: "❌",
    ExecutionStatus.SKIPPED: "⏭️ ",
}


def _print_report(report: RunReport, verbose: bool) -> None:
    for result in report.results:
        icon = _STATUS_ICONS[result.status]
        line = f"  {icon} {result.qualified_name}"
        if result.status == ExecutionStatus.SUCCESS:
            line += f" ({result.rows_affected} {pluralize(result.rows_affected, 'row')}, {result.elapsed:.2f}s)"
        elif result.status == ExecutionStatus.FAILED:
            line += f": {result.error}"
        elif result.message and (verbose or result.message != "dry run"):
            line += f" ({result.message})"
        typer.echo(line)

    typer.echo(f"\n{report.summary()}")


def cmd_run(
    project_folder: str,
    verbose: bool = False,
    select: list[str] | None = None,
    exclude: list[str] | None = None,
    upstream: bool = False,
    downstream: bool = False,
    dry_run: bool = False,
    fail_fast: bool = True,
    target: str | None = None,
    target_name: str = "default",
) -> None:
    """Execute the run command."""
    ctx = CommandContext(
        project_folder=project_folder,
        verbose=verbose,
        select=select,
        exclude=exclude,
        target_name=target_name,
    )

    try:
        typer.echo(f"Running cadac on project: {project_folder}")
        ctx.print_selection_info()

        catalog = load_catalog(ctx.project_path, ctx.config)
        for failure in catalog.failures:
            typer.echo(f"  ⚠️  {failure}", err=True)

        models = None
        if ctx.selector.is_active:
            models = ctx.selector.filter_models(catalog.names())
            if not models:
                typer.echo("No models matched the selection")
                raise typer.Exit(1)

        options = RunOptions(
            include_upstream=upstream,
            include_downstream=downstream,
            dry_run=dry_run,
            fail_fast=fail_fast,
            target=target or ctx.config.target.url,
            timeout=ctx.config.target.timeout,
            materialization=ctx.config.target.materialization,
        )
        report = ExecutionEngine(catalog).run(models, options)
    except typer.Exit:
        raise
    except Exception as e:
        ctx.handle_error(e)

    _print_report(report, ctx.verbose)

    if report.cancelled:
        raise typer.Exit(EXIT_CANCELLED)
    if not report.success or catalog.has_failures:
        raise typer.Exit(1)
