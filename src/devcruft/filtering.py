"""Project filtering and sorting.

Filters are pure: they read projects and criteria and return a new list
without touching either.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from devcruft.models import DETECTION_ORDER, FilterCriteria, Project, TypeFilter


class SortKey(str, Enum):
    """Ordering of the final project list."""

    SIZE = "size"  # largest first
    AGE = "age"  # oldest first
    NAME = "name"
    TYPE = "type"
    PATH = "path"


def meets_type_criteria(project: Project, type_filter: TypeFilter) -> bool:
    return type_filter.matches(project.kind)


def meets_size_criteria(project: Project, min_size: Optional[int]) -> bool:
    """Projects below the size threshold are not worth cleaning."""
    if not min_size:
        return True
    return project.artifacts.size >= min_size


def meets_age_criteria(
    project: Project,
    max_age_days: Optional[int],
    now: Optional[datetime] = None,
) -> bool:
    """Projects modified within the last ``max_age_days`` are kept as active work."""
    if not max_age_days:
        return True
    cutoff = (now or datetime.now()) - timedelta(days=max_age_days)
    return project.last_modified <= cutoff


def matches(project: Project, criteria: FilterCriteria, now: Optional[datetime] = None) -> bool:
    """Whether a project passes every active predicate."""
    return (
        meets_type_criteria(project, criteria.type_filter)
        and meets_size_criteria(project, criteria.min_size)
        and meets_age_criteria(project, criteria.max_age_days, now)
    )


def apply(
    projects: list[Project],
    criteria: FilterCriteria,
    now: Optional[datetime] = None,
) -> list[Project]:
    """
    Keep the projects eligible for cleaning.

    Args:
        projects: Sized projects
        criteria: Type, size and age restrictions
        now: Reference time for the age predicate (defaults to now)

    Returns:
        The matching projects, in input order
    """
    now = now or datetime.now()
    return [p for p in projects if matches(p, criteria, now)]


def combine(a: FilterCriteria, b: FilterCriteria) -> Optional[FilterCriteria]:
    """
    Conjunction of two criteria.

    Returns None when the type filters exclude each other, since no
    project can satisfy both.
    """
    if a.type_filter is TypeFilter.ALL:
        type_filter = b.type_filter
    elif b.type_filter is TypeFilter.ALL or b.type_filter is a.type_filter:
        type_filter = a.type_filter
    else:
        return None

    return FilterCriteria(
        type_filter=type_filter,
        min_size=_stricter(a.min_size, b.min_size),
        max_age_days=_stricter(a.max_age_days, b.max_age_days),
        skip_dirs=a.skip_dirs | b.skip_dirs,
    )


def _stricter(x: Optional[int], y: Optional[int]) -> Optional[int]:
    values = [v for v in (x, y) if v]
    return max(values) if values else None


def sort_projects(
    projects: list[Project],
    key: SortKey = SortKey.SIZE,
    reverse: bool = False,
) -> list[Project]:
    """Return projects in the requested order; ``reverse`` flips it."""
    priority = {kind: i for i, kind in enumerate(DETECTION_ORDER)}

    if key is SortKey.SIZE:
        ordered = sorted(projects, key=lambda p: (-p.artifacts.size, str(p.root_path)))
    elif key is SortKey.AGE:
        ordered = sorted(projects, key=lambda p: (p.last_modified, str(p.root_path)))
    elif key is SortKey.NAME:
        ordered = sorted(projects, key=lambda p: (p.display_name.lower(), str(p.root_path)))
    elif key is SortKey.TYPE:
        ordered = sorted(projects, key=lambda p: (priority[p.kind], -p.artifacts.size))
    else:
        ordered = sorted(projects, key=lambda p: (str(p.root_path), priority[p.kind]))

    if reverse:
        ordered.reverse()
    return ordered
