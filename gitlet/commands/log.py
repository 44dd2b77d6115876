"""gitlet log / global-log — commit history display.

Entry format::

    ===
    commit 3e8bf1d794ca2e9ef8a4007275acf3751c7170ff...
    Merge: 4975af1 2c1ead1
    Date: Thu Nov 09 20:00:05 2017 -0800
    A commit message.

The ``Merge:`` line appears for merge commits only and lists the first
seven hex digits of the parent and the step-parent.  Dates are rendered in
the local timezone.

``log`` walks from HEAD along primary parents to the root commit;
``global-log`` prints every stored commit, oldest first.
"""
from __future__ import annotations

import datetime
import logging
import pathlib
from collections.abc import Sequence

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import require_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.db import list_commits
from gitlet.graph import iter_ancestors
from gitlet.models import GitletCommit
from gitlet.repository import Repository

logger = logging.getLogger(__name__)

_DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"
_SHORT_ID = 7


def format_date(moment: datetime.datetime) -> str:
    """Render *moment* in local time; naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return moment.astimezone().strftime(_DATE_FORMAT)


def format_entry(commit: GitletCommit) -> str:
    """Return the log block for one commit, ending with a blank line."""
    lines = ["===", f"commit {commit.commit_id}"]
    if commit.parent_commit_id and commit.parent2_commit_id:
        lines.append(
            f"Merge: {commit.parent_commit_id[:_SHORT_ID]} "
            f"{commit.parent2_commit_id[:_SHORT_ID]}"
        )
    lines.append(f"Date: {format_date(commit.committed_at)}")
    lines.append(commit.message)
    return "\n".join(lines) + "\n"


async def _log_async(*, root: pathlib.Path, session: AsyncSession) -> list[GitletCommit]:
    """Print the history of HEAD, newest first, and return the commits shown."""
    repo = await Repository.open(root, session)
    shown: list[GitletCommit] = []
    async for commit in iter_ancestors(session, await repo.head_commit()):
        typer.echo(format_entry(commit))
        shown.append(commit)
    return shown


async def _global_log_async(
    *, root: pathlib.Path, session: AsyncSession
) -> list[GitletCommit]:
    """Print every stored commit and return them."""
    commits = await list_commits(session)
    for commit in commits:
        typer.echo(format_entry(commit))
    logger.debug("✅ global-log printed %d commits from %s", len(commits), root)
    return commits


def run_log(operands: Sequence[str] | None = None) -> None:
    """Show the history of the current branch."""
    root = require_repo()
    require_operands(operands, 0)

    async def _core(session: AsyncSession) -> list[GitletCommit]:
        return await _log_async(root=root, session=session)

    run_in_session("log", root, _core)


def run_global_log(operands: Sequence[str] | None = None) -> None:
    """Show every commit ever made."""
    root = require_repo()
    require_operands(operands, 0)

    async def _core(session: AsyncSession) -> list[GitletCommit]:
        return await _global_log_async(root=root, session=session)

    run_in_session("global-log", root, _core)
