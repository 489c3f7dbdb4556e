"""Choosing which discovered projects are handed to the cleaner."""

import logging
from enum import Enum
from typing import Callable, Optional

from devcruft.models import Project

log = logging.getLogger(__name__)


class SelectionMode(str, Enum):
    DRY_RUN = "dry_run"  # report only, nothing is deleted
    YES = "yes"  # everything, no questions
    INTERACTIVE = "interactive"  # pick individual projects
    CONFIRM = "confirm"  # one yes/no for the whole set


def selection_mode(dry_run: bool, yes: bool, interactive: bool) -> SelectionMode:
    """Dry run wins over interactive, which wins over --yes."""
    if dry_run:
        return SelectionMode.DRY_RUN
    if interactive:
        return SelectionMode.INTERACTIVE
    if yes:
        return SelectionMode.YES
    return SelectionMode.CONFIRM


def parse_selection(text: str, count: int) -> list[int]:
    """
    Parse a selection such as ``"1,3-5"`` into zero-based indices.

    ``all`` (or ``*``) selects everything, ``none`` or an empty string
    selects nothing. Numbers are one-based as shown to the user.

    Raises:
        ValueError: If a number or range is malformed or out of bounds
    """
    text = text.strip().lower()
    if text in ("all", "*", "a"):
        return list(range(count))
    if text in ("", "none", "n"):
        return []

    selected: set[int] = set()
    for part in text.replace(" ", "").split(","):
        if not part:
            continue
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(f"Invalid range: {part}")
        else:
            start = end = int(part)

        if start < 1 or end > count:
            raise ValueError(f"Selection out of range 1-{count}: {part}")
        selected.update(range(start - 1, end))

    return sorted(selected)


def _ask(message: str) -> str:
    from rich.prompt import Prompt

    return Prompt.ask(message, default="all")


def _confirm(message: str) -> bool:
    from devcruft.display import confirm_action

    return confirm_action(message)


def select_projects(
    projects: list[Project],
    mode: SelectionMode,
    ask: Optional[Callable[[str], str]] = None,
    confirm: Optional[Callable[[str], bool]] = None,
) -> list[Project]:
    """
    Decide which projects to clean.

    Args:
        projects: Filtered projects, already sorted for display
        mode: How to select
        ask: Prompt returning the user's selection text (interactive mode)
        confirm: Prompt returning yes/no (confirm mode)

    Returns:
        The selected projects, in their original order
    """
    if not projects:
        return []

    if mode in (SelectionMode.DRY_RUN, SelectionMode.YES):
        return list(projects)

    if mode is SelectionMode.CONFIRM:
        confirm = confirm or _confirm
        return list(projects) if confirm("Proceed with cleanup?") else []

    ask = ask or _ask
    while True:
        answer = ask("Select projects to clean (e.g. 1,3-5, all, none)")
        try:
            indices = parse_selection(answer, len(projects))
        except ValueError as e:
            from devcruft.display import console

            console.print(f"[red]{e}[/red]")
            continue
        log.debug("Selected %d of %d project(s)", len(indices), len(projects))
        return [projects[i] for i in indices]
