"""Cleanup execution with safety checks for devcruft."""

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional

from devcruft.calculator import default_threads, directory_size
from devcruft.executables import preserve_executables
from devcruft.models import CleanupResult, CleanupSummary, Project

log = logging.getLogger(__name__)


def is_path_safe(project: Project) -> tuple[bool, Optional[str]]:
    """
    Check that a project's artifacts directory may be deleted.

    The directory must sit strictly inside the project root, must not be a
    symlink, and must never be the home directory or a filesystem root.

    Returns:
        Tuple of (is_safe, reason_if_not)
    """
    path = project.artifacts.path
    root = project.root_path

    if path == root or root not in path.parents:
        return False, f"{path} is not inside project root {root}"
    if path == Path.home() or path == Path(path.anchor):
        return False, f"Refusing to delete {path}"
    if path.is_symlink():
        return False, f"{path} is a symlink"
    return True, None


def delete_path(path: Path, dry_run: bool = False) -> tuple[int, Optional[str]]:
    """
    Delete a directory tree.

    Args:
        path: Directory to delete
        dry_run: If True, don't actually delete

    Returns:
        Tuple of (bytes_freed, error_message)
    """
    if not path.exists():
        return 0, None

    try:
        # Measure again: the tree may have changed since the scan
        size, _ = directory_size(path)

        if dry_run:
            return size, None

        shutil.rmtree(path)
        return size, None

    except PermissionError as e:
        return 0, f"Permission denied: {e}"
    except OSError as e:
        return 0, f"OS error: {e}"


def clean_project(
    project: Project,
    dry_run: bool = False,
    keep_executables: bool = False,
) -> CleanupResult:
    """
    Remove one project's artifacts directory.

    Args:
        project: Project to clean
        dry_run: If True, report what would be freed without deleting
        keep_executables: Copy compiled outputs to <root>/bin first

    Returns:
        CleanupResult; failures are reported, never raised
    """
    path = project.artifacts.path
    result = CleanupResult(
        project_root=str(project.root_path),
        path=str(path),
        dry_run=dry_run,
    )

    safe, reason = is_path_safe(project)
    if not safe:
        result.success = False
        result.error = reason
        return result

    if keep_executables and not dry_run and path.is_dir():
        try:
            preserved = preserve_executables(project)
        except OSError as e:
            result.success = False
            result.error = f"Failed to preserve executables: {e}"
            return result
        result.preserved = [str(p.destination) for p in preserved]

    bytes_freed, error = delete_path(path, dry_run)
    if error:
        log.debug("Failed to clean %s: %s", path, error)
        result.success = False
        result.error = error
    else:
        result.bytes_freed = bytes_freed

    return result


def clean_projects(
    projects: list[Project],
    dry_run: bool = False,
    keep_executables: bool = False,
    threads: Optional[int] = None,
    progress_callback: Optional[Callable[[CleanupResult, int, int], None]] = None,
) -> CleanupSummary:
    """
    Clean several projects in parallel.

    A failure on one project does not stop the others.

    Args:
        projects: Selected projects
        dry_run: If True, don't actually delete
        keep_executables: Preserve compiled outputs before deletion
        threads: Worker count (defaults to CPU count)
        progress_callback: Optional callback(result, current, total)

    Returns:
        CleanupSummary with one result per project, in input order
    """
    summary = CleanupSummary(estimated_bytes=sum(p.artifacts.size for p in projects))
    if not projects:
        return summary

    total = len(projects)
    results: dict[int, CleanupResult] = {}

    with ThreadPoolExecutor(max_workers=threads or default_threads()) as executor:
        future_to_index = {
            executor.submit(clean_project, project, dry_run, keep_executables): i
            for i, project in enumerate(projects)
        }

        for done, future in enumerate(as_completed(future_to_index), start=1):
            i = future_to_index[future]
            results[i] = future.result()

            if progress_callback:
                progress_callback(results[i], done, total)

    summary.results = [results[i] for i in range(total)]
    log.info(
        "Cleaned %d project(s), %d failed",
        summary.success_count,
        summary.failure_count,
    )
    return summary
