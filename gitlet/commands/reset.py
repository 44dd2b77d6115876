"""gitlet reset — move the current branch to an arbitrary commit.

The working directory is switched to the commit's snapshot exactly as a
branch checkout would (same untracked-file guard), the current branch and
HEAD are pointed at the commit, and the staging index is cleared.  The
commit may come from any branch.
"""
from __future__ import annotations

import logging
import pathlib
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import require_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.graph import resolve_commit
from gitlet.models import GitletCommit
from gitlet.repository import Repository

logger = logging.getLogger(__name__)


async def _reset_async(
    *,
    root: pathlib.Path,
    session: AsyncSession,
    commit_ref: str,
) -> GitletCommit:
    """Reset the current branch to *commit_ref*.

    Raises:
        NoCommitWithIdError:        *commit_ref* matches no single commit.
        UntrackedFileConflictError: A file HEAD does not track would be
                                    overwritten.  Nothing is changed.
    """
    repo = await Repository.open(root, session)
    target = await resolve_commit(session, commit_ref)
    await repo.checkout_commit(target)
    repo.set_head(repo.head_branch, target.commit_id)
    repo.index.clear()
    await repo.flush()
    logger.info("✅ Reset %r to %s", repo.head_branch, target.commit_id[:8])
    return target


def run_reset(operands: Sequence[str] | None = None) -> None:
    """Check out every file of a commit and move the current branch to it."""
    root = require_repo()
    (commit_ref,) = require_operands(operands, 1)

    async def _core(session: AsyncSession) -> GitletCommit:
        return await _reset_async(root=root, session=session, commit_ref=commit_ref)

    run_in_session("reset", root, _core)
