"""gitlet find — print the ids of all commits with a given message."""
from __future__ import annotations

import logging
import pathlib
from collections.abc import Sequence

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import require_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.db import find_commits_by_message

logger = logging.getLogger(__name__)

_NO_MATCH = "Found no commit with that message."


async def _find_async(
    *,
    root: pathlib.Path,
    session: AsyncSession,
    message: str,
) -> list[str]:
    """Print one commit id per line for every exact *message* match.

    Prints a notice instead when nothing matches; that is not an error.
    """
    commits = await find_commits_by_message(session, message)
    if not commits:
        typer.echo(_NO_MATCH)
        return []
    for commit in commits:
        typer.echo(commit.commit_id)
    logger.debug("✅ find matched %d commit(s) in %s", len(commits), root)
    return [c.commit_id for c in commits]


def run_find(operands: Sequence[str] | None = None) -> None:
    """Find commits by their exact message."""
    root = require_repo()
    (message,) = require_operands(operands, 1)

    async def _core(session: AsyncSession) -> list[str]:
        return await _find_async(root=root, session=session, message=message)

    run_in_session("find", root, _core)
