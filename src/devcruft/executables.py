"""Copying compiled outputs out of build directories before they are deleted.

- Rust: executables from target/release and target/debug go to bin/<profile>/
- Python: wheels from dist/ and C extensions (.so, .pyd) from build/ go to bin/
- Node and Go: their artifact directories hold dependencies, nothing to keep
"""

import logging
import os
import shutil
import stat
import sys
from dataclasses import dataclass
from pathlib import Path

from devcruft.models import Project, ProjectType

log = logging.getLogger(__name__)

RUST_PROFILES = ("release", "debug")
RUST_EXCLUDED_EXTENSIONS = frozenset({".d", ".rmeta", ".rlib", ".a", ".so", ".dylib", ".dll", ".pdb"})
PYTHON_EXTENSION_SUFFIXES = frozenset({".so", ".pyd"})


@dataclass
class PreservedExecutable:
    """A file copied out of a build directory."""

    source: Path
    destination: Path


def is_executable(path: Path) -> bool:
    """Executable bit on POSIX, .exe extension on Windows."""
    if sys.platform == "win32":
        return path.suffix.lower() == ".exe"
    try:
        return bool(path.stat().st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))
    except OSError:
        return False


def find_rust_executables(profile_dir: Path) -> list[Path]:
    executables = []
    for entry in sorted(profile_dir.iterdir()):
        if not entry.is_file() or entry.is_symlink():
            continue
        if entry.suffix in RUST_EXCLUDED_EXTENSIONS:
            continue
        if is_executable(entry):
            executables.append(entry)
    return executables


def _copy(source: Path, dest_dir: Path) -> PreservedExecutable:
    dest_dir.mkdir(parents=True, exist_ok=True)
    destination = dest_dir / source.name
    shutil.copy2(source, destination)
    log.debug("Preserved %s -> %s", source, destination)
    return PreservedExecutable(source=source, destination=destination)


def preserve_rust_executables(project: Project) -> list[PreservedExecutable]:
    target_dir = project.artifacts.path
    bin_dir = project.root_path / "bin"
    preserved = []

    for profile in RUST_PROFILES:
        profile_dir = target_dir / profile
        if not profile_dir.is_dir():
            continue
        for exe in find_rust_executables(profile_dir):
            preserved.append(_copy(exe, bin_dir / profile))

    return preserved


def preserve_python_executables(project: Project) -> list[PreservedExecutable]:
    root = project.root_path
    bin_dir = root / "bin"
    preserved = []

    dist_dir = root / "dist"
    if dist_dir.is_dir():
        for wheel in sorted(dist_dir.glob("*.whl")):
            if wheel.is_file():
                preserved.append(_copy(wheel, bin_dir))

    build_dir = root / "build"
    if build_dir.is_dir():
        for dirpath, _dirnames, filenames in os.walk(build_dir):
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.suffix in PYTHON_EXTENSION_SUFFIXES and path.is_file():
                    preserved.append(_copy(path, bin_dir))

    return preserved


def preserve_executables(project: Project) -> list[PreservedExecutable]:
    """
    Copy compiled outputs of a project to ``<root>/bin`` before cleaning.

    Raises:
        OSError: If a destination cannot be created or a copy fails
    """
    if project.kind is ProjectType.RUST:
        return preserve_rust_executables(project)
    if project.kind is ProjectType.PYTHON:
        return preserve_python_executables(project)
    return []
