"""Build directory size calculation."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional

from devcruft.collector import ErrorLog, SizeCache
from devcruft.models import Project

log = logging.getLogger(__name__)


def default_threads() -> int:
    """Worker count derived from the available CPUs."""
    return os.cpu_count() or 1


def directory_size(path: Path, errors: Optional[ErrorLog] = None) -> tuple[int, int]:
    """
    Sum the sizes of all regular files below a directory.

    Uses os.scandir with an explicit stack so deep trees such as
    node_modules never hit the recursion limit. Symlinks are neither
    followed nor counted. Unreadable entries contribute nothing and are
    recorded in ``errors`` when given.

    Args:
        path: Directory to measure
        errors: Optional error log for entries that cannot be read

    Returns:
        Tuple of (total_bytes, file_count)
    """
    total_size = 0
    file_count = 0
    stack = [path]

    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total_size += entry.stat(follow_symlinks=False).st_size
                            file_count += 1
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(Path(entry.path))
                    except OSError as e:
                        if errors is not None:
                            errors.record_os_error(entry.path, e)
        except OSError as e:
            if errors is not None:
                errors.record_os_error(current, e)

    return total_size, file_count


class SizeCalculator:
    """Measures project artifacts, sharing nothing but the error log and cache."""

    def __init__(
        self,
        errors: Optional[ErrorLog] = None,
        cache: Optional[SizeCache] = None,
    ) -> None:
        self.errors = errors if errors is not None else ErrorLog()
        self.cache = cache

    def measure(self, path: Path) -> tuple[int, int]:
        """Size of a directory, served from the scan cache when available."""
        if self.cache is not None:
            cached = self.cache.get(path)
            if cached is not None:
                return cached

        size, files = directory_size(path, self.errors)
        if self.cache is not None:
            self.cache.put(path, size, files)
        return size, files

    def compute_size(self, project: Project) -> int:
        """Measure a project's artifacts and store the result on it."""
        path = project.artifacts.path
        if not path.is_dir():
            size, files = 0, 0
        else:
            size, files = self.measure(path)

        project.artifacts.size = size
        project.artifacts.file_count = files
        return size

    def compute_sizes(
        self,
        projects: list[Project],
        threads: Optional[int] = None,
        progress_callback: Optional[Callable[[Project, int, int], None]] = None,
        keep_empty: bool = False,
    ) -> list[Project]:
        """
        Measure many projects in parallel, one task per project.

        Args:
            projects: Projects whose artifacts are not measured yet
            threads: Worker count (defaults to CPU count)
            progress_callback: Optional callback(project, current, total)
            keep_empty: Keep projects whose artifacts hold no bytes

        Returns:
            The measured projects in input order, without empty ones
            unless ``keep_empty`` is set
        """
        if not projects:
            return []

        total = len(projects)
        workers = threads or default_threads()

        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_project = {
                executor.submit(self.compute_size, project): project for project in projects
            }

            for i, future in enumerate(as_completed(future_to_project)):
                project = future_to_project[future]
                try:
                    future.result()
                except OSError as e:
                    self.errors.record_os_error(project.artifacts.path, e)

                if progress_callback:
                    progress_callback(project, i + 1, total)

        log.debug("Measured %d project(s)", total)

        if keep_empty:
            return list(projects)
        return [p for p in projects if p.artifacts.size > 0]
