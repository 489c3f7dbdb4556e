"""Thread-safe sinks shared by the scanning workers."""

import logging
import threading
from pathlib import Path
from typing import Optional

from devcruft.models import ErrorKind, Project, ScanError

log = logging.getLogger(__name__)


class ErrorLog:
    """Append-only, lock-protected list of non-fatal scan errors."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._errors: list[ScanError] = []

    def record(self, path, message: str, kind: ErrorKind = ErrorKind.ACCESS) -> None:
        error = ScanError(path=str(path), message=message, kind=kind)
        log.debug("%s error at %s: %s", kind.value, path, message)
        with self._lock:
            self._errors.append(error)

    def record_os_error(self, path, exc: OSError) -> None:
        self.record(path, exc.strerror or str(exc), ErrorKind.ACCESS)

    def snapshot(self) -> list[ScanError]:
        with self._lock:
            return list(self._errors)

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)


class ScanCollector:
    """Collects discovered projects from concurrent workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._projects: dict[tuple[str, str], Project] = {}

    def add_project(self, project: Project) -> bool:
        """Add a project; returns False if one with the same identity exists."""
        with self._lock:
            if project.key in self._projects:
                return False
            self._projects[project.key] = project
            return True

    def projects(self) -> list[Project]:
        with self._lock:
            return list(self._projects.values())


class SizeCache:
    """Directory sizes measured during this scan, keyed by path."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sizes: dict[str, tuple[int, int]] = {}

    def get(self, path: Path) -> Optional[tuple[int, int]]:
        with self._lock:
            return self._sizes.get(str(path))

    def put(self, path: Path, size: int, file_count: int) -> None:
        with self._lock:
            self._sizes[str(path)] = (size, file_count)
