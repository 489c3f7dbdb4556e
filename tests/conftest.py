"""Shared test fixtures: synthetic project trees."""

import json
import os
from datetime import datetime
from pathlib import Path

import pytest

from devcruft.models import BuildArtifacts, Project, ProjectType


def fill(directory: Path, sizes: dict[str, int]) -> Path:
    """Create files of the given byte sizes below a directory."""
    directory.mkdir(parents=True, exist_ok=True)
    for name, size in sizes.items():
        path = directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
    return directory


def make_rust(base: Path, name: str, target_files: dict[str, int] | None = None) -> Path:
    root = base / name
    root.mkdir(parents=True, exist_ok=True)
    (root / "Cargo.toml").write_text(f'[package]\nname = "{name}"\nversion = "0.1.0"\n')
    fill(root / "target", target_files if target_files is not None else {"debug/app": 100})
    return root


def make_node(base: Path, name: str, module_files: dict[str, int] | None = None) -> Path:
    root = base / name
    root.mkdir(parents=True, exist_ok=True)
    (root / "package.json").write_text(json.dumps({"name": name, "version": "1.0.0"}))
    fill(root / "node_modules", module_files if module_files is not None else {"lib/index.js": 50})
    return root


def make_python(base: Path, name: str, caches: dict[str, dict[str, int]] | None = None) -> Path:
    root = base / name
    root.mkdir(parents=True, exist_ok=True)
    (root / "requirements.txt").write_text("requests\n")
    for cache, files in (caches or {"__pycache__": {"main.cpython-312.pyc": 40}}).items():
        fill(root / cache, files)
    return root


def make_go(base: Path, name: str, vendor_files: dict[str, int] | None = None) -> Path:
    root = base / name
    root.mkdir(parents=True, exist_ok=True)
    (root / "go.mod").write_text(f"module github.com/example/{name}\n\ngo 1.22\n")
    fill(root / "vendor", vendor_files if vendor_files is not None else {"modules.txt": 30})
    return root


def set_mtime(path: Path, when: datetime) -> None:
    ts = when.timestamp()
    os.utime(path, (ts, ts))


def project_at(
    kind: ProjectType = ProjectType.RUST,
    root: str = "/work/app",
    artifact: str | None = None,
    size: int = 0,
    name: str | None = "app",
    last_modified: datetime | None = None,
) -> Project:
    """An in-memory project that does not touch the filesystem."""
    artifact = artifact or kind.artifact_dirs[0]
    return Project(
        kind=kind,
        root_path=Path(root),
        artifacts=BuildArtifacts(path=Path(root) / artifact, size=size),
        name=name,
        last_modified=last_modified or datetime(2024, 1, 1),
    )


@pytest.fixture
def workspace(tmp_path):
    """An empty directory to build project trees in."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root
