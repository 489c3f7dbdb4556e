"""Rich terminal display for devcruft."""

from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from devcruft.models import (
    DETECTION_ORDER,
    CleanupResult,
    CleanupSummary,
    Project,
    ScanError,
    ScanResult,
)
from devcruft.sizes import format_size

console = Console()


def format_age(project: Project, now: Optional[datetime] = None) -> str:
    days = project.age_days(now)
    if days == 0:
        return "today"
    if days == 1:
        return "1 day"
    return f"{days} days"


def show_projects(projects: list[Project], numbered: bool = False) -> None:
    """Display the projects as a table."""
    table = Table(show_header=True, header_style="bold")
    if numbered:
        table.add_column("#", justify="right", style="dim")
    table.add_column("", width=2)
    table.add_column("Project", style="bold")
    table.add_column("Cleans")
    table.add_column("Size", justify="right")
    table.add_column("Age", justify="right")

    for i, project in enumerate(projects, 1):
        row = [
            project.kind.icon,
            escape(project.display_name),
            escape(str(project.artifacts.path)),
            format_size(project.artifacts.size),
            format_age(project),
        ]
        if numbered:
            row.insert(0, str(i))
        table.add_row(*row)

    console.print(table)


def show_summary(result: ScanResult) -> None:
    """Display per-type counts and the total reclaimable space."""
    counts = result.count_by_type()
    sizes = result.size_by_type()

    lines = []
    for kind in DETECTION_ORDER:
        if kind not in counts:
            continue
        lines.append(f"  {kind.icon} {counts[kind]} {kind.label} projects ({format_size(sizes[kind])})")

    total = format_size(result.total_size)
    lines.append(f"  💾 [bold]Total reclaimable space:[/bold] [bold green]{total}[/bold green]")

    console.print(Panel("\n".join(lines), title="Summary", border_style="blue"))


def show_errors(errors: list[ScanError]) -> None:
    """Display non-fatal scan errors and failed deletions."""
    if not errors:
        return
    console.print(f"\n[yellow]⚠ {len(errors)} path(s) reported errors:[/yellow]")
    for error in errors:
        console.print(f"  [red]{error.kind.value}[/red] {escape(str(error))}", highlight=False)


def show_cleanup_result(result: CleanupResult) -> None:
    """Display result of a single cleanup operation."""
    if result.success:
        verb = "would free" if result.dry_run else "freed"
        console.print(f"  [green]✓[/green] {escape(result.path)}: {format_size(result.bytes_freed)} {verb}")
        for preserved in result.preserved:
            console.print(f"    [dim]kept {escape(preserved)}[/dim]")
    else:
        console.print(f"  [red]✗[/red] {escape(result.path)}: {escape(result.error or '')}")


def show_cleanup_summary(summary: CleanupSummary) -> None:
    """Display cleanup summary."""
    console.print()
    if summary.failure_count:
        console.print("[bold yellow]Cleanup finished with errors[/bold yellow]")
    else:
        console.print("[bold green]Cleanup Complete![/bold green]")
    console.print()

    table = Table(show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Space freed", format_size(summary.total_bytes_freed))
    table.add_row("Projects cleaned", str(summary.success_count))
    if summary.failure_count > 0:
        table.add_row("[red]Failed[/red]", str(summary.failure_count))
    if summary.estimate_difference:
        table.add_row("Difference from estimate", format_size(summary.estimate_difference))

    console.print(table)


def show_dry_run(projects: list[Project]) -> None:
    total = sum(p.artifacts.size for p in projects)
    console.print(f"\n[yellow]🧪 Dry run complete![/yellow] Would free up {format_size(total)}")


def show_scanning_progress() -> Progress:
    """Create a spinner for scanning."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed} checked"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message)
