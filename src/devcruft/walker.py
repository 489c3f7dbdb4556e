"""Parallel directory traversal that discovers development projects.

Each directory expansion is one unit of work on a bounded thread pool: the
worker runs project detection on the directory, then lists the children
worth descending into. The coordinating thread submits those children as
new work until nothing is pending. Artifact directories (target/,
node_modules/, Python caches, vendor/) are never entered, so no project is
ever reported from inside another project's build output.
"""

import logging
import os
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Iterable, Optional

from devcruft.calculator import default_threads
from devcruft.collector import ErrorLog, ScanCollector, SizeCache
from devcruft.detector import ProjectDetector
from devcruft.models import DETECTION_ORDER, FilterCriteria, ProjectType, ScanResult

log = logging.getLogger(__name__)

# Version control and tool directories that never hold projects of interest
VCS_DIRECTORIES = frozenset({".git", ".svn", ".hg", ".jj"})

# Hidden directories that are still worth descending into
HIDDEN_ALLOWED = frozenset({".cargo"})

# Every build/cache directory name of every project type
ARTIFACT_DIRECTORIES = frozenset(name for kind in ProjectType for name in kind.artifact_dirs)


def split_skip_entries(skip_dirs: Iterable[str]) -> tuple[frozenset[str], frozenset[Path]]:
    """
    Separate plain directory names from paths in a skip list.

    Entries containing a path separator or starting with ``~`` are paths and
    match that directory and everything below it; anything else matches by
    name anywhere.
    """
    names = set()
    paths = set()
    for entry in skip_dirs:
        entry = entry.strip()
        if not entry:
            continue
        if os.sep in entry or "/" in entry or entry.startswith("~"):
            paths.add(Path(os.path.expanduser(entry)).absolute())
        else:
            names.add(entry)
    return frozenset(names), frozenset(paths)


def is_under(path: Path, prefixes: Iterable[Path]) -> bool:
    """Whether path is one of the prefixes or lies below one of them."""
    return any(path == prefix or prefix in path.parents for prefix in prefixes)


class DirectoryWalker:
    """Walks a tree on a thread pool and collects detected projects."""

    def __init__(
        self,
        threads: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        errors: Optional[ErrorLog] = None,
        cache: Optional[SizeCache] = None,
        progress_callback: Optional[Callable[[Path], None]] = None,
    ) -> None:
        self.threads = threads or default_threads()
        self.cancel_event = cancel_event
        self.errors = errors if errors is not None else ErrorLog()
        self.detector = ProjectDetector(self.errors, cache)
        self.progress_callback = progress_callback

    def should_descend(
        self,
        name: str,
        path: Path,
        skip_names: frozenset[str],
        skip_paths: frozenset[Path],
    ) -> bool:
        """Whether a child directory is worth scanning."""
        if name in skip_names or is_under(path, skip_paths):
            return False
        if name in VCS_DIRECTORIES or name in ARTIFACT_DIRECTORIES:
            return False
        if name.startswith(".") and name not in HIDDEN_ALLOWED:
            return False
        return True

    def _expand(
        self,
        directory: Path,
        collector: ScanCollector,
        skip_names: frozenset[str],
        skip_paths: frozenset[Path],
    ) -> list[Path]:
        """Detect projects in one directory and return the children to visit."""
        for project in self.detector.detect(directory):
            collector.add_project(project)

        children = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    try:
                        if not entry.is_dir(follow_symlinks=False):
                            continue
                    except OSError as e:
                        self.errors.record_os_error(entry.path, e)
                        continue

                    child = Path(entry.path)
                    if self.should_descend(entry.name, child, skip_names, skip_paths):
                        children.append(child)
        except OSError as e:
            self.errors.record_os_error(directory, e)

        if self.progress_callback:
            self.progress_callback(directory)
        return children

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def scan(self, root: Path, criteria: Optional[FilterCriteria] = None) -> ScanResult:
        """
        Discover projects below ``root``.

        Sizes are not measured here; every project comes back with
        ``artifacts.size == 0``.

        Args:
            root: Directory to start from
            criteria: Supplies the directories to skip

        Returns:
            ScanResult with projects sorted by root path, then type priority
        """
        criteria = criteria or FilterCriteria()
        root = Path(os.path.expanduser(str(root))).absolute()
        skip_names, skip_paths = split_skip_entries(criteria.skip_dirs)
        collector = ScanCollector()
        cancelled = False

        if is_under(root, skip_paths):
            log.debug("Root %s is inside a skipped path", root)
            return ScanResult(root=root)

        log.debug("Scanning %s with %d thread(s)", root, self.threads)

        with ThreadPoolExecutor(max_workers=self.threads) as executor:

            def submit(directory: Path) -> Future:
                return executor.submit(
                    self._expand, directory, collector, skip_names, skip_paths
                )

            pending = {submit(root)}
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    children = future.result()
                    if self._cancelled():
                        cancelled = True
                        continue
                    pending.update(submit(child) for child in children)

        if cancelled:
            log.warning("Scan of %s cancelled, results are partial", root)

        priority = {kind: i for i, kind in enumerate(DETECTION_ORDER)}
        projects = sorted(
            collector.projects(),
            key=lambda p: (str(p.root_path), priority[p.kind]),
        )
        return ScanResult(
            root=root,
            projects=projects,
            errors=self.errors.snapshot(),
            cancelled=cancelled,
        )
