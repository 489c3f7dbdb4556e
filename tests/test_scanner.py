"""Tests for scan orchestration, including end-to-end scenarios."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import fill, make_go, make_node, make_python, make_rust
from devcruft import filtering
from devcruft.exceptions import InvalidRootError
from devcruft.models import ErrorKind, FilterCriteria, ProjectType
from devcruft.scanner import expand_path, find_cleanable, scan_projects, validate_root


def project_set(result):
    return {(str(p.root_path), p.kind, p.artifacts.size) for p in result.projects}


class TestExpandPath:
    def test_expands_tilde(self):
        result = expand_path("~/test")
        assert str(result).startswith(str(Path.home()))

    def test_handles_absolute_path(self):
        assert str(expand_path("/absolute/path")) == "/absolute/path"


class TestValidateRoot:
    def test_missing(self, tmp_path):
        with pytest.raises(InvalidRootError, match="does not exist"):
            validate_root(tmp_path / "missing")

    def test_file(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(InvalidRootError, match="not a directory"):
            validate_root(path)

    def test_returns_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert validate_root(".") == tmp_path


class TestScenarios:
    def test_rust_project_with_three_files(self, workspace):
        make_rust(workspace, "proj", {"a": 100, "b": 100, "debug/c": 100})

        result = scan_projects(workspace)

        (project,) = result.projects
        assert project.kind is ProjectType.RUST
        assert project.artifacts.size == 300
        assert project.name == "proj"
        assert result.total_size == 300

    def test_keep_size_above_project_size_filters_everything(self, workspace):
        make_rust(workspace, "proj", {"a": 100, "b": 100, "c": 100})
        criteria = FilterCriteria(min_size=1000)

        result, cleanable = find_cleanable(workspace, criteria)

        assert result.project_count == 1
        assert cleanable == []

    def test_named_node_project(self, workspace):
        root = workspace / "frontend"
        root.mkdir()
        (root / "package.json").write_text(json.dumps({"name": "app"}))
        fill(root / "node_modules", {"left-pad.js": 10})

        (project,) = scan_projects(workspace).projects
        assert project.kind is ProjectType.NODE
        assert project.name == "app"
        assert project.artifacts.size == 10

    def test_unreadable_directory_mid_walk(self, workspace):
        make_rust(workspace / "a", "crate")
        locked = workspace / "b"
        make_node(locked, "web")
        make_python(workspace / "c", "tool")
        real_scandir = os.scandir

        def scandir(path):
            if Path(path) == locked:
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        with patch("os.scandir", side_effect=scandir):
            result = scan_projects(workspace, threads=2)

        assert {p.kind for p in result.projects} == {ProjectType.RUST, ProjectType.PYTHON}
        assert [e.path for e in result.errors] == [str(locked)]
        assert result.errors[0].kind is ErrorKind.ACCESS


class TestScanProjects:
    def test_idempotent(self, workspace):
        make_rust(workspace, "crate", {"x": 11})
        make_node(workspace / "apps", "web", {"y": 22})
        make_python(workspace, "py", caches={"venv": {"z": 33}, "__pycache__": {"w": 1}})
        make_go(workspace / "go", "svc", {"v": 44})

        first = scan_projects(workspace, threads=4)
        second = scan_projects(workspace, threads=1)

        assert project_set(first) == project_set(second)
        assert len(first.projects) == 4

    def test_python_largest_cache_size(self, workspace):
        make_python(workspace, "py", caches={"venv": {"z": 330}, "__pycache__": {"w": 1}})
        (project,) = scan_projects(workspace).projects
        assert project.artifacts.path.name == "venv"
        assert project.artifacts.size == 330

    def test_empty_build_dirs_are_not_reported(self, workspace):
        make_rust(workspace, "empty", {})
        assert scan_projects(workspace).projects == []

    def test_parse_errors_are_collected(self, workspace):
        root = make_node(workspace, "broken")
        (root / "package.json").write_text("{")

        result = scan_projects(workspace)
        assert result.projects[0].name == "broken"
        assert [e.kind for e in result.errors] == [ErrorKind.PARSE]

    def test_skip_dirs(self, workspace):
        make_rust(workspace / "skip-me", "crate")
        make_node(workspace, "web")
        result = scan_projects(workspace, FilterCriteria(skip_dirs={"skip-me"}))
        assert [p.kind for p in result.projects] == [ProjectType.NODE]

    def test_skipped_path_covers_nested_root(self, workspace):
        make_rust(workspace / "a" / "b", "crate")
        result = scan_projects(workspace / "a" / "b", FilterCriteria(skip_dirs={str(workspace / "a")}))
        assert result.projects == []

    def test_invalid_root(self, tmp_path):
        with pytest.raises(InvalidRootError):
            scan_projects(tmp_path / "nope")

    def test_callbacks(self, workspace):
        make_rust(workspace, "crate")
        dirs, sized = [], []
        scan_projects(
            workspace,
            on_directory=dirs.append,
            on_sized=lambda p, current, total: sized.append(p.name),
        )
        assert workspace in dirs
        assert sized == ["crate"]


class TestFindCleanable:
    def test_type_filter(self, workspace):
        make_rust(workspace, "crate")
        make_node(workspace, "web")

        result, cleanable = find_cleanable(
            workspace, FilterCriteria(type_filter="node")
        )
        assert result.project_count == 2
        assert [p.kind for p in cleanable] == [ProjectType.NODE]

    def test_matches_manual_filter(self, workspace):
        make_rust(workspace, "a", {"x": 5000})
        make_rust(workspace, "b", {"x": 50})
        criteria = FilterCriteria(min_size=1000)

        result, cleanable = find_cleanable(workspace, criteria)
        assert cleanable == filtering.apply(result.projects, criteria)
        assert [p.name for p in cleanable] == ["a"]
