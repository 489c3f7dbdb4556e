"""Scan orchestration: discovery followed by size measurement."""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional

from devcruft import filtering
from devcruft.calculator import SizeCalculator
from devcruft.collector import ErrorLog, SizeCache
from devcruft.exceptions import InvalidRootError
from devcruft.models import FilterCriteria, Project, ScanResult
from devcruft.walker import DirectoryWalker

log = logging.getLogger(__name__)


def expand_path(path) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(str(path))))


def validate_root(root) -> Path:
    """
    Resolve the directory to scan, failing before any work starts.

    Raises:
        InvalidRootError: If the path is missing or not a directory
    """
    path = expand_path(root).absolute()
    if not path.exists():
        raise InvalidRootError(path, "directory does not exist")
    if not path.is_dir():
        raise InvalidRootError(path, "not a directory")
    return path


def scan_projects(
    root,
    criteria: Optional[FilterCriteria] = None,
    threads: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    on_directory: Optional[Callable[[Path], None]] = None,
    on_sized: Optional[Callable[[Project, int, int], None]] = None,
) -> ScanResult:
    """
    Find projects below ``root`` and measure their artifacts.

    Both phases share one error log and one size cache, so directories
    measured during detection are not walked twice.

    Args:
        root: Directory to scan
        criteria: Supplies the directories to skip
        threads: Worker count for both phases (defaults to CPU count)
        cancel_event: Set it to stop traversal early
        on_directory: Optional callback(path) after each directory expansion
        on_sized: Optional callback(project, current, total) while measuring

    Returns:
        ScanResult with sized, non-empty projects and all collected errors
    """
    root_path = validate_root(root)
    criteria = criteria or FilterCriteria()
    errors = ErrorLog()
    cache = SizeCache()

    walker = DirectoryWalker(
        threads=threads,
        cancel_event=cancel_event,
        errors=errors,
        cache=cache,
        progress_callback=on_directory,
    )
    discovered = walker.scan(root_path, criteria)
    log.info("Found %d candidate project(s) under %s", discovered.project_count, root_path)

    calculator = SizeCalculator(errors, cache)
    sized = calculator.compute_sizes(
        discovered.projects,
        threads=threads,
        progress_callback=on_sized,
    )

    return ScanResult(
        root=root_path,
        projects=sized,
        errors=errors.snapshot(),
        cancelled=discovered.cancelled,
    )


def find_cleanable(
    root,
    criteria: Optional[FilterCriteria] = None,
    threads: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> tuple[ScanResult, list[Project]]:
    """Scan and filter in one call: returns the scan and the eligible projects."""
    criteria = criteria or FilterCriteria()
    result = scan_projects(root, criteria, threads=threads, cancel_event=cancel_event)
    return result, filtering.apply(result.projects, criteria)
