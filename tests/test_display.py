"""Tests for display module."""

from datetime import datetime, timedelta
from io import StringIO
from pathlib import Path
from unittest.mock import patch

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress

from conftest import project_at
from devcruft.display import (
    confirm_action,
    format_age,
    show_cleanup_result,
    show_cleanup_summary,
    show_dry_run,
    show_errors,
    show_projects,
    show_scanning_progress,
    show_summary,
)
from devcruft.models import (
    CleanupResult,
    CleanupSummary,
    ErrorKind,
    ProjectType,
    ScanError,
    ScanResult,
)

NOW = datetime(2024, 6, 30, 12, 0)


def printed(mock_console) -> str:
    return " ".join(str(call) for call in mock_console.print.call_args_list)


class TestFormatAge:
    def test_today(self):
        assert format_age(project_at(last_modified=NOW), NOW) == "today"

    def test_one_day(self):
        assert format_age(project_at(last_modified=NOW - timedelta(days=1)), NOW) == "1 day"

    def test_many_days(self):
        assert format_age(project_at(last_modified=NOW - timedelta(days=45)), NOW) == "45 days"


class TestShowProjects:
    @patch("devcruft.display.console")
    def test_prints_table(self, mock_console):
        show_projects([project_at(size=2_000_000)])
        mock_console.print.assert_called_once()

    @patch("devcruft.display.console")
    def test_numbered(self, mock_console):
        show_projects([project_at(), project_at(ProjectType.NODE)], numbered=True)
        table = mock_console.print.call_args[0][0]
        assert table.columns[0].header == "#"
        assert table.row_count == 2


class TestShowSummary:
    @patch("devcruft.display.console")
    def test_per_type_lines(self, mock_console):
        show_summary(ScanResult(root=Path("/w"), projects=[
            project_at(size=1_500_000),
            project_at(ProjectType.NODE, "/w/web", size=500_000),
        ]))
        panel = mock_console.print.call_args[0][0]
        assert isinstance(panel, Panel)
        assert "1 Rust projects (1.5 MB)" in panel.renderable
        assert "1 Node.js projects (500.0 KB)" in panel.renderable
        assert "2.0 MB" in panel.renderable
        assert "Go" not in panel.renderable


class TestShowErrors:
    @patch("devcruft.display.console")
    def test_no_errors(self, mock_console):
        show_errors([])
        mock_console.print.assert_not_called()

    @patch("devcruft.display.console")
    def test_escapes_markup(self, mock_console):
        show_errors([ScanError(path="/w/[locked]", message="Permission denied", kind=ErrorKind.ACCESS)])
        output = printed(mock_console)
        assert "1 path(s)" in output
        assert "\\\\[locked]" in output


class TestShowCleanupResult:
    @patch("devcruft.display.console")
    def test_success_result(self, mock_console):
        show_cleanup_result(CleanupResult(project_root="/w/app", path="/w/app/target", bytes_freed=5000))
        output = printed(mock_console)
        assert "✓" in output
        assert "5.0 KB freed" in output

    @patch("devcruft.display.console")
    def test_dry_run_result(self, mock_console):
        show_cleanup_result(
            CleanupResult(project_root="/w/app", path="/w/app/target", bytes_freed=5000, dry_run=True)
        )
        assert "would free" in printed(mock_console)

    @patch("devcruft.display.console")
    def test_preserved_files_listed(self, mock_console):
        show_cleanup_result(
            CleanupResult(project_root="/w/app", path="/w/app/target", preserved=["/w/app/bin/release/app"])
        )
        assert "/w/app/bin/release/app" in printed(mock_console)

    @patch("devcruft.display.console")
    def test_failed_result(self, mock_console):
        show_cleanup_result(
            CleanupResult(project_root="/w/app", path="/w/app/target", success=False, error="Permission denied")
        )
        output = printed(mock_console)
        assert "✗" in output
        assert "Permission denied" in output


class TestShowCleanupSummary:
    @patch("devcruft.display.console")
    def test_complete(self, mock_console):
        summary = CleanupSummary(
            results=[CleanupResult(project_root="/w/app", path="/w/app/target", bytes_freed=10)],
            estimated_bytes=10,
        )
        show_cleanup_summary(summary)
        assert "Cleanup Complete!" in printed(mock_console)

    @patch("devcruft.display.console")
    def test_with_errors(self, mock_console):
        summary = CleanupSummary(
            results=[CleanupResult(project_root="/w/app", path="/w/app/target", success=False, error="x")],
            estimated_bytes=10,
        )
        show_cleanup_summary(summary)
        assert "finished with errors" in printed(mock_console)


class TestShowDryRun:
    @patch("devcruft.display.console")
    def test_total(self, mock_console):
        show_dry_run([project_at(size=3_000), project_at(ProjectType.GO, "/w/svc", size=2_000)])
        output = printed(mock_console)
        assert "Dry run complete!" in output
        assert "5.0 KB" in output


class TestScanningProgress:
    def test_returns_progress(self):
        assert isinstance(show_scanning_progress(), Progress)


class TestConfirmAction:
    @patch("rich.prompt.Confirm.ask", return_value=True)
    def test_confirm_yes(self, mock_ask):
        assert confirm_action("Proceed?") is True
        mock_ask.assert_called_once_with("Proceed?")

    @patch("rich.prompt.Confirm.ask", return_value=False)
    def test_confirm_no(self, mock_ask):
        assert confirm_action("Proceed?") is False


class TestMarkupInNames:
    """Names and paths come from the filesystem and are printed literally."""

    def render(self, func, *args) -> str:
        buffer = StringIO()
        with patch("devcruft.display.console", Console(file=buffer, width=200, color_system=None)):
            func(*args)
        return buffer.getvalue()

    def test_project_name_with_closing_tag(self):
        output = self.render(show_projects, [project_at(ProjectType.NODE, "/w/web", name="[/]x")])
        assert "[/]x" in output

    def test_project_directory_with_style_tag(self):
        output = self.render(show_projects, [project_at(root="/w/proj[red]x", name=None)])
        assert "/w/proj[red]x/target" in output

    def test_cleanup_result_path(self):
        output = self.render(
            show_cleanup_result,
            CleanupResult(project_root="/w/proj[red]x", path="/w/proj[red]x/target", bytes_freed=10),
        )
        assert "/w/proj[red]x/target" in output

    def test_failed_cleanup_result_path(self):
        output = self.render(
            show_cleanup_result,
            CleanupResult(project_root="/w/[b]", path="/w/[b]/target", success=False, error="denied"),
        )
        assert "/w/[b]/target: denied" in output
