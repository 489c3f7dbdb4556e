"""Project detection from marker files and build directories.

A directory is a project root of a given type when it holds both one of the
type's marker files and one of its build/cache directories as direct
children. Names are read from the project configuration; any failure to
read or parse it is recorded as a non-fatal error and the directory name is
used instead.
"""

import configparser
import json
import logging
import re
import tomllib
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from devcruft.calculator import SizeCalculator
from devcruft.collector import ErrorLog, SizeCache
from devcruft.models import (
    DETECTION_ORDER,
    BuildArtifacts,
    ErrorKind,
    Project,
    ProjectType,
)

log = logging.getLogger(__name__)

_GO_MODULE_RE = re.compile(r"^\s*module\s+\"?([^\s\"]+)\"?", re.MULTILINE)
_SETUP_PY_NAME_RE = re.compile(r"""\bname\s*=\s*(['"])([^'"]+)\1""")


class _ConfigReadError(Exception):
    """Marker file unreadable or malformed; already recorded."""


class ProjectDetector:
    """Decides whether a directory is a project root and builds its Project."""

    def __init__(
        self,
        errors: Optional[ErrorLog] = None,
        cache: Optional[SizeCache] = None,
    ) -> None:
        self.errors = errors if errors is not None else ErrorLog()
        self.calculator = SizeCalculator(self.errors, cache if cache is not None else SizeCache())
        self._name_extractors: dict[ProjectType, Callable[[Path], Optional[str]]] = {
            ProjectType.RUST: self._rust_name,
            ProjectType.NODE: self._node_name,
            ProjectType.PYTHON: self._python_name,
            ProjectType.GO: self._go_name,
        }

    def detect(self, candidate_dir: Path) -> list[Project]:
        """Detect every project type rooted at ``candidate_dir``, in priority order."""
        projects = []
        for kind in DETECTION_ORDER:
            project = self.detect_type(candidate_dir, kind)
            if project is not None:
                projects.append(project)
        return projects

    def detect_type(self, candidate_dir: Path, kind: ProjectType) -> Optional[Project]:
        """
        Detect a single project type in a directory.

        Returns:
            The Project, or None if the marker or the build directory is missing
        """
        if not any(_is_file(candidate_dir / marker) for marker in kind.markers):
            return None

        artifact_dir = self._select_artifact_dir(candidate_dir, kind)
        if artifact_dir is None:
            return None

        name = self._extract_name(candidate_dir, kind)
        project = Project(
            kind=kind,
            root_path=candidate_dir,
            artifacts=BuildArtifacts(path=artifact_dir),
            name=name,
            last_modified=self._last_modified(artifact_dir, candidate_dir),
        )
        log.debug("Detected %s project at %s", kind.value, candidate_dir)
        return project

    def artifact_candidates(self, candidate_dir: Path, kind: ProjectType) -> list[Path]:
        """Build/cache directories of ``kind`` that exist in a directory."""
        return [
            candidate_dir / name
            for name in kind.artifact_dirs
            if _is_real_dir(candidate_dir / name)
        ]

    def _select_artifact_dir(self, candidate_dir: Path, kind: ProjectType) -> Optional[Path]:
        candidates = self.artifact_candidates(candidate_dir, kind)
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        # Several Python caches: clean the largest. The probe lands in the
        # shared size cache so the sizing phase does not walk it again.
        sizes = [(self.calculator.measure(path)[0], path) for path in candidates]
        largest = max(sizes, key=lambda item: item[0])
        return largest[1]

    def _last_modified(self, artifact_dir: Path, root: Path) -> datetime:
        for path in (artifact_dir, root):
            try:
                return datetime.fromtimestamp(path.stat().st_mtime)
            except OSError as e:
                self.errors.record_os_error(path, e)
        return datetime.now()

    def _extract_name(self, candidate_dir: Path, kind: ProjectType) -> str:
        fallback = candidate_dir.name or str(candidate_dir)
        try:
            name = self._name_extractors[kind](candidate_dir)
        except _ConfigReadError:
            name = None
        return name or fallback

    def _read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            self.errors.record(path, f"Invalid encoding: {e.reason}", ErrorKind.PARSE)
            raise _ConfigReadError from e
        except OSError as e:
            self.errors.record_os_error(path, e)
            raise _ConfigReadError from e

    def _read_toml(self, path: Path) -> dict:
        text = self._read_text(path)
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            self.errors.record(path, f"Invalid TOML: {e}", ErrorKind.PARSE)
            raise _ConfigReadError from e

    def _rust_name(self, root: Path) -> Optional[str]:
        data = self._read_toml(root / "Cargo.toml")
        return _string_at(data, "package", "name")

    def _node_name(self, root: Path) -> Optional[str]:
        path = root / "package.json"
        text = self._read_text(path)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            self.errors.record(path, f"Invalid JSON: {e}", ErrorKind.PARSE)
            raise _ConfigReadError from e
        if not isinstance(data, dict):
            return None
        name = data.get("name")
        return name if isinstance(name, str) and name else None

    def _go_name(self, root: Path) -> Optional[str]:
        text = self._read_text(root / "go.mod")
        match = _GO_MODULE_RE.search(text)
        if not match:
            return None
        return match.group(1).rstrip("/").rsplit("/", 1)[-1] or None

    def _python_name(self, root: Path) -> Optional[str]:
        pyproject = root / "pyproject.toml"
        if _is_file(pyproject):
            try:
                data = self._read_toml(pyproject)
            except _ConfigReadError:
                data = {}
            name = _string_at(data, "project", "name") or _string_at(
                data, "tool", "poetry", "name"
            )
            if name:
                return name

        setup_cfg = root / "setup.cfg"
        if _is_file(setup_cfg):
            name = self._setup_cfg_name(setup_cfg)
            if name:
                return name

        setup_py = root / "setup.py"
        if _is_file(setup_py):
            try:
                text = self._read_text(setup_py)
            except _ConfigReadError:
                return None
            match = _SETUP_PY_NAME_RE.search(text)
            if match:
                return match.group(2)

        return None

    def _setup_cfg_name(self, path: Path) -> Optional[str]:
        try:
            text = self._read_text(path)
        except _ConfigReadError:
            return None
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read_string(text)
        except configparser.Error as e:
            self.errors.record(path, f"Invalid setup.cfg: {e}", ErrorKind.PARSE)
            return None
        return parser.get("metadata", "name", fallback=None) or None


def _string_at(data: dict, *keys: str) -> Optional[str]:
    node = data
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node if isinstance(node, str) and node else None


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def _is_real_dir(path: Path) -> bool:
    try:
        return path.is_dir() and not path.is_symlink()
    except OSError:
        return False
