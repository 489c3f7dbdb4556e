"""CLI interface for devcruft."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from devcruft import __version__, filtering
from devcruft.cleaner import clean_projects
from devcruft.config import build_settings, load_config
from devcruft.display import (
    console,
    show_cleanup_result,
    show_cleanup_summary,
    show_dry_run,
    show_errors,
    show_projects,
    show_scanning_progress,
    show_summary,
)
from devcruft.exceptions import DevcruftError
from devcruft.filtering import SortKey
from devcruft.logging_config import setup_logging
from devcruft.models import TypeFilter
from devcruft.scanner import scan_projects
from devcruft.selector import SelectionMode, select_projects, selection_mode

app = typer.Typer(
    name="devcruft",
    help="Find and remove build artifacts (target/, node_modules/, Python caches, vendor/)",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"devcruft version {__version__}")
        raise typer.Exit()


def fail(message: str) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(1)


@app.command()
def main(
    directory: Optional[Path] = typer.Argument(
        None, help="Directory to search for projects [default: current directory]"
    ),
    project_type: Optional[TypeFilter] = typer.Option(
        None, "--project-type", "-p", help="Only clean projects of this type"
    ),
    keep_size: Optional[str] = typer.Option(
        None, "--keep-size", "-s", help="Ignore artifacts smaller than this (e.g. 100MB, 1.5GiB)"
    ),
    keep_days: Optional[int] = typer.Option(
        None, "--keep-days", "-d", min=0, help="Ignore artifacts modified in the last N days"
    ),
    sort: Optional[SortKey] = typer.Option(None, "--sort", help="Order of the project list"),
    reverse: bool = typer.Option(False, "--reverse", help="Reverse the sort order"),
    threads: Optional[int] = typer.Option(
        None, "--threads", "-t", min=0, help="Worker threads (0 = one per CPU)"
    ),
    skip: Optional[list[str]] = typer.Option(
        None, "--skip", help="Directory name or path to skip (repeatable)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show scan errors and debug logs"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
    interactive: bool = typer.Option(
        False, "-i", "--interactive", help="Choose which projects to clean"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be cleaned"),
    keep_executables: bool = typer.Option(
        False, "--keep-executables", help="Copy compiled binaries to <project>/bin first"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", help="Read settings from this file instead of the default"
    ),
    version: bool = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Reclaim disk space from development build artifacts."""
    try:
        settings = build_settings(
            load_config(config_file),
            directory=directory,
            project_type=project_type,
            keep_size=keep_size,
            keep_days=keep_days,
            sort=sort,
            reverse=reverse,
            threads=threads,
            skip=skip,
            verbose=verbose,
            quiet=quiet,
            dry_run=dry_run,
            interactive=interactive,
            yes=yes,
            keep_executables=keep_executables,
        )
    except DevcruftError as e:
        fail(str(e))

    setup_logging(verbose=settings.verbose, quiet=settings.quiet)

    try:
        with show_scanning_progress() as progress:
            task = progress.add_task("Scanning directories...", total=None)
            result = scan_projects(
                settings.root,
                settings.criteria,
                threads=settings.threads or None,
                on_directory=lambda _path: progress.advance(task),
            )
    except DevcruftError as e:
        fail(str(e))

    console.print(f"Found {result.project_count} projects")

    if settings.verbose:
        show_errors(result.errors)

    if not result.projects:
        console.print("[green]✨ No development directories found![/green]")
        raise typer.Exit(0)

    projects = filtering.apply(result.projects, settings.criteria)
    if not projects:
        console.print("[green]✨ No directories match the specified criteria![/green]")
        raise typer.Exit(0)

    projects = filtering.sort_projects(projects, settings.sort, settings.reverse)
    mode = selection_mode(settings.dry_run, settings.yes, settings.interactive)

    console.print("\n[bold]📊 Found projects:[/bold]")
    show_projects(projects, numbered=mode is SelectionMode.INTERACTIVE)
    show_summary(result.model_copy(update={"projects": projects}))

    if mode is SelectionMode.DRY_RUN:
        show_dry_run(projects)
        raise typer.Exit(0)

    selected = select_projects(projects, mode)
    if not selected:
        console.print("[green]✨ No projects selected for cleaning![/green]")
        raise typer.Exit(0)

    console.print("\n[cyan]🧹 Starting cleanup...[/cyan]")
    summary = clean_projects(
        selected,
        keep_executables=settings.keep_executables,
        threads=settings.threads or None,
    )
    for cleanup in summary.results:
        show_cleanup_result(cleanup)
    show_cleanup_summary(summary)

    if settings.verbose:
        show_errors(summary.errors)

    if summary.failure_count:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
