"""Data models for devcruft."""

from collections import Counter
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class ProjectType(str, Enum):
    """Kind of development project, each with fixed markers and artifact dirs."""

    RUST = "rust"
    NODE = "node"
    PYTHON = "python"
    GO = "go"

    @property
    def markers(self) -> tuple[str, ...]:
        """Files whose presence marks a project root (any one is enough)."""
        return _MARKERS[self]

    @property
    def artifact_dirs(self) -> tuple[str, ...]:
        """Build/cache directory names targeted for cleaning."""
        return _ARTIFACT_DIRS[self]

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


# Fixed detection priority
DETECTION_ORDER = (ProjectType.RUST, ProjectType.NODE, ProjectType.PYTHON, ProjectType.GO)

_MARKERS = {
    ProjectType.RUST: ("Cargo.toml",),
    ProjectType.NODE: ("package.json",),
    ProjectType.PYTHON: (
        "requirements.txt",
        "setup.py",
        "pyproject.toml",
        "setup.cfg",
        "Pipfile",
        "pipenv.lock",
        "poetry.lock",
    ),
    ProjectType.GO: ("go.mod",),
}

_ARTIFACT_DIRS = {
    ProjectType.RUST: ("target",),
    ProjectType.NODE: ("node_modules",),
    ProjectType.PYTHON: (
        "__pycache__",
        ".pytest_cache",
        "venv",
        ".venv",
        "build",
        "dist",
        ".eggs",
        ".tox",
        ".coverage",
    ),
    ProjectType.GO: ("vendor",),
}

_ICONS = {
    ProjectType.RUST: "🦀",
    ProjectType.NODE: "📦",
    ProjectType.PYTHON: "🐍",
    ProjectType.GO: "🐹",
}

_LABELS = {
    ProjectType.RUST: "Rust",
    ProjectType.NODE: "Node.js",
    ProjectType.PYTHON: "Python",
    ProjectType.GO: "Go",
}


class TypeFilter(str, Enum):
    """Project type restriction applied by the filter stage."""

    ALL = "all"
    RUST = "rust"
    NODE = "node"
    PYTHON = "python"
    GO = "go"

    def matches(self, kind: ProjectType) -> bool:
        return self is TypeFilter.ALL or self.value == kind.value


class ErrorKind(str, Enum):
    """Category of a non-fatal error collected during scanning or cleanup."""

    ACCESS = "access"  # permission denied, broken entry, I/O failure
    PARSE = "parse"  # malformed project config
    DELETE = "delete"  # failed to remove an artifact directory


class ScanError(BaseModel):
    """A non-fatal problem encountered while scanning."""

    path: str = Field(..., description="Path that caused the error")
    message: str = Field(..., description="What went wrong")
    kind: ErrorKind = Field(ErrorKind.ACCESS, description="Error category")

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class BuildArtifacts(BaseModel):
    """The directory to clean and its measured size."""

    path: Path = Field(..., description="Absolute path of the build/cache directory")
    size: int = Field(0, ge=0, description="Total size in bytes, 0 until measured")
    file_count: int = Field(0, ge=0, description="Number of regular files, 0 until measured")


class Project(BaseModel):
    """A development project with cleanable build artifacts."""

    kind: ProjectType = Field(..., description="Project type")
    root_path: Path = Field(..., description="Directory holding the marker file")
    artifacts: BuildArtifacts = Field(..., description="Directory targeted for cleaning")
    name: Optional[str] = Field(None, description="Name extracted from the project config")
    last_modified: datetime = Field(
        default_factory=datetime.now,
        description="Modification time of the artifacts directory",
    )

    @model_validator(mode="after")
    def _artifacts_inside_root(self) -> "Project":
        root = self.root_path
        path = self.artifacts.path
        if path == root or root not in path.parents:
            raise ValueError(f"artifacts path {path} is not inside project root {root}")
        return self

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the project: its root and the directory it cleans."""
        return str(self.root_path), str(self.artifacts.path)

    @property
    def display_name(self) -> str:
        return self.name or self.root_path.name or str(self.root_path)

    @property
    def size(self) -> int:
        return self.artifacts.size

    @property
    def size_human(self) -> str:
        from devcruft.sizes import format_size

        return format_size(self.artifacts.size)

    def age_days(self, now: Optional[datetime] = None) -> int:
        """Whole days since the artifacts were last modified."""
        now = now or datetime.now()
        return max(0, (now - self.last_modified).days)

    def __str__(self) -> str:
        if self.name:
            return f"{self.kind.icon} {self.name} ({self.root_path})"
        return f"{self.kind.icon} {self.root_path}"


class ScanResult(BaseModel):
    """Projects found under a root, with the errors collected on the way."""

    root: Path = Field(..., description="Directory that was scanned")
    projects: list[Project] = Field(default_factory=list)
    errors: list[ScanError] = Field(default_factory=list)
    cancelled: bool = Field(False, description="Whether the scan stopped early")

    @property
    def project_count(self) -> int:
        return len(self.projects)

    @property
    def total_size(self) -> int:
        """Total reclaimable bytes across all projects."""
        return sum(p.artifacts.size for p in self.projects)

    def count_by_type(self) -> dict[ProjectType, int]:
        return dict(Counter(p.kind for p in self.projects))

    def size_by_type(self) -> dict[ProjectType, int]:
        sizes: dict[ProjectType, int] = {}
        for project in self.projects:
            sizes[project.kind] = sizes.get(project.kind, 0) + project.artifacts.size
        return sizes


class FilterCriteria(BaseModel):
    """Which projects are eligible for cleaning."""

    type_filter: TypeFilter = Field(TypeFilter.ALL, description="Restrict to one project type")
    min_size: Optional[int] = Field(
        None, ge=0, description="Ignore artifacts smaller than this many bytes"
    )
    max_age_days: Optional[int] = Field(
        None, ge=0, description="Ignore artifacts modified within this many days"
    )
    skip_dirs: set[str] = Field(
        default_factory=set, description="Directory names or paths never descended into"
    )


class CleanupResult(BaseModel):
    """Result of cleaning a single project."""

    project_root: str = Field(..., description="Root of the cleaned project")
    path: str = Field(..., description="Artifacts directory that was removed")
    bytes_freed: int = Field(0, description="Bytes freed by cleanup")
    success: bool = Field(True, description="Whether cleanup succeeded")
    error: Optional[str] = Field(None, description="Error message if failed")
    dry_run: bool = Field(False, description="Whether this was a dry run")
    preserved: list[str] = Field(
        default_factory=list, description="Executables copied out before deletion"
    )


class CleanupSummary(BaseModel):
    """All cleanup results of one run."""

    results: list[CleanupResult] = Field(default_factory=list)
    estimated_bytes: int = Field(0, description="Size reported by the scan")

    @property
    def total_bytes_freed(self) -> int:
        return sum(r.bytes_freed for r in self.results if r.success)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def failures(self) -> list[CleanupResult]:
        return [r for r in self.results if not r.success]

    @property
    def errors(self) -> list[ScanError]:
        """Failed deletions, in the same shape as scan errors."""
        return [
            ScanError(path=r.path, message=r.error or "unknown error", kind=ErrorKind.DELETE)
            for r in self.failures
        ]

    @property
    def estimate_difference(self) -> int:
        return abs(self.estimated_bytes - self.total_bytes_freed)
