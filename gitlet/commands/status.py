"""gitlet status — branches, staged changes and working-directory drift.

Output::

    === Branches ===
    *master
    other-branch

    === Staged Files ===
    wug.txt

    === Removed Files ===
    goodbye.txt

    === Modifications Not Staged For Commit ===
    junk.txt (deleted)
    wug3.txt (modified)

    === Untracked Files ===
    random.stuff

Every section is sorted and followed by a blank line.
"""
from __future__ import annotations

import logging
import pathlib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import require_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.repository import Repository
from gitlet.snapshot import walk_workdir
from gitlet.staging import StagingIndex

logger = logging.getLogger(__name__)


@dataclass
class StatusReport:
    """Everything ``gitlet status`` prints."""

    current_branch: str
    branches: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)


def unstaged_modifications(
    head: Mapping[str, str],
    index: StagingIndex,
    working: Mapping[str, str],
) -> list[str]:
    """Return ``"<name> (modified)"`` / ``"<name> (deleted)"`` entries, sorted.

    A file is listed when:

    - HEAD tracks it, it is not staged, and its working content differs;
    - it is staged for addition with content other than the working copy;
    - it is staged for addition but gone from the working directory;
    - HEAD tracks it, it is not staged for removal, and it is gone.
    """
    entries: dict[str, str] = {}
    for name, object_id in head.items():
        if name in index.added or name in index.removed:
            continue
        if name not in working:
            entries[name] = "deleted"
        elif working[name] != object_id:
            entries[name] = "modified"
    for name, object_id in index.added.items():
        if name not in working:
            entries[name] = "deleted"
        elif working[name] != object_id:
            entries[name] = "modified"
    return [f"{name} ({state})" for name, state in sorted(entries.items())]


def untracked(
    head: Mapping[str, str],
    index: StagingIndex,
    working: Mapping[str, str],
) -> list[str]:
    """Return working files that are neither staged nor tracked, sorted.

    A file staged for removal that has been re-created counts as untracked.
    """
    return sorted(
        name
        for name in working
        if name not in index.added and (name not in head or name in index.removed)
    )


async def _status_async(*, root: pathlib.Path, session: AsyncSession) -> StatusReport:
    """Compute the status report and print it."""
    repo = await Repository.open(root, session)
    head = await repo.head_manifest()
    working = walk_workdir(root)

    report = StatusReport(
        current_branch=repo.head_branch,
        branches=repo.branches(),
        staged=sorted(repo.index.added),
        removed=sorted(repo.index.removed),
        modified=unstaged_modifications(head, repo.index, working),
        untracked=untracked(head, repo.index, working),
    )
    logger.debug(
        "✅ status: %d staged, %d removed, %d modified, %d untracked",
        len(report.staged),
        len(report.removed),
        len(report.modified),
        len(report.untracked),
    )
    typer.echo(render_status(report), nl=False)
    return report


def _section(title: str, lines: Sequence[str]) -> str:
    body = "".join(f"{line}\n" for line in lines)
    return f"=== {title} ===\n{body}\n"


def render_status(report: StatusReport) -> str:
    branches = [
        f"*{name}" if name == report.current_branch else name
        for name in report.branches
    ]
    return "".join(
        (
            _section("Branches", branches),
            _section("Staged Files", report.staged),
            _section("Removed Files", report.removed),
            _section("Modifications Not Staged For Commit", report.modified),
            _section("Untracked Files", report.untracked),
        )
    )


def run_status(operands: Sequence[str] | None = None) -> None:
    """Show branches, staged files and working-directory changes."""
    root = require_repo()
    require_operands(operands, 0)

    async def _core(session: AsyncSession) -> StatusReport:
        return await _status_async(root=root, session=session)

    run_in_session("status", root, _core)
