"""gitlet commit — record the staged changes as a new commit on HEAD's branch.

The new snapshot is HEAD's snapshot with the staged additions written over
it and the staged removals dropped.  The current branch and HEAD advance to
the new commit, and the staging index is cleared.
"""
from __future__ import annotations

import logging
import pathlib
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import require_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.errors import EmptyCommitMessageError, NothingStagedError
from gitlet.models import GitletCommit
from gitlet.repository import Repository

logger = logging.getLogger(__name__)


async def _commit_async(
    *,
    root: pathlib.Path,
    session: AsyncSession,
    message: str,
) -> GitletCommit:
    """Create a commit from the staging index.

    Raises:
        NothingStagedError:      The staging index is empty.
        EmptyCommitMessageError: *message* is blank.
    """
    repo = await Repository.open(root, session)
    if repo.index.is_empty:
        raise NothingStagedError()
    if not message.strip():
        raise EmptyCommitMessageError()

    commit = await repo.record_commit(message)
    await repo.flush()
    return commit


def run_commit(operands: Sequence[str] | None = None) -> None:
    """Save a snapshot of the staged files as a new commit."""
    root = require_repo()
    (message,) = require_operands(operands, 1)

    async def _core(session: AsyncSession) -> GitletCommit:
        return await _commit_async(root=root, session=session, message=message)

    run_in_session("commit", root, _core)
