"""gitlet branch / rm-branch — create and delete branch pointers.

A branch is only a pointer: creating one does not switch to it, and
deleting one removes the pointer but never its commits.
"""
from __future__ import annotations

import logging
import pathlib
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import require_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.repository import Repository

logger = logging.getLogger(__name__)


async def _branch_async(*, root: pathlib.Path, session: AsyncSession, name: str) -> str:
    """Create branch *name* at the HEAD commit and return that commit id.

    Raises:
        InvalidBranchNameError:   *name* is not a valid branch name.
        BranchAlreadyExistsError: *name* exists.
    """
    repo = await Repository.open(root, session)
    commit_id = repo.create_branch(name)
    await repo.flush()
    logger.info("✅ Created branch %r at %s", name, commit_id[:8])
    return commit_id


async def _rm_branch_async(*, root: pathlib.Path, session: AsyncSession, name: str) -> None:
    """Delete the pointer for branch *name*.

    Raises:
        CannotRemoveCurrentBranchError: *name* is HEAD's branch.
        NoSuchBranchError:              *name* does not exist.
    """
    repo = await Repository.open(root, session)
    repo.delete_branch(name)
    await repo.flush()
    logger.info("✅ Removed branch %r", name)


def run_branch(operands: Sequence[str] | None = None) -> None:
    """Create a new branch pointing at the current commit."""
    root = require_repo()
    (name,) = require_operands(operands, 1)

    async def _core(session: AsyncSession) -> str:
        return await _branch_async(root=root, session=session, name=name)

    run_in_session("branch", root, _core)


def run_rm_branch(operands: Sequence[str] | None = None) -> None:
    """Delete a branch pointer."""
    root = require_repo()
    (name,) = require_operands(operands, 1)

    async def _core(session: AsyncSession) -> None:
        await _rm_branch_async(root=root, session=session, name=name)

    run_in_session("rm-branch", root, _core)
