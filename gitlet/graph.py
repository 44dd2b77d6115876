"""Commit graph queries: id resolution and ancestry walks."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from gitlet.db import find_commits_by_prefix, get_commit
from gitlet.errors import NoCommitWithIdError
from gitlet.models import GitletCommit

logger = logging.getLogger(__name__)


async def resolve_commit(session: AsyncSession, commit_ref: str) -> GitletCommit:
    """Return the single commit whose id starts with *commit_ref*.

    A full 64-character id is looked up directly; anything shorter is
    matched as a prefix.

    Raises:
        NoCommitWithIdError: When nothing matches, or the prefix is ambiguous.
    """
    ref = commit_ref.strip().lower()
    if not ref:
        raise NoCommitWithIdError(commit_ref)

    if len(ref) == 64:
        commit = await get_commit(session, ref)
        if commit is None:
            raise NoCommitWithIdError(commit_ref)
        return commit

    matches = await find_commits_by_prefix(session, ref)
    if len(matches) != 1:
        if matches:
            logger.warning(
                "⚠️ Ambiguous commit prefix %r matches %d commits", ref, len(matches)
            )
        raise NoCommitWithIdError(commit_ref)
    return matches[0]


async def load_commit(session: AsyncSession, commit_id: str) -> GitletCommit:
    """Return the commit with exactly *commit_id*.

    Raises:
        NoCommitWithIdError: If it is not stored.
    """
    commit = await get_commit(session, commit_id)
    if commit is None:
        raise NoCommitWithIdError(commit_id)
    return commit


async def iter_ancestors(
    session: AsyncSession, commit: GitletCommit
) -> AsyncIterator[GitletCommit]:
    """Yield *commit* and then each primary-parent ancestor down to the root.

    Step-parents of merge commits are not followed.
    """
    current: GitletCommit | None = commit
    seen: set[str] = set()
    while current is not None and current.commit_id not in seen:
        seen.add(current.commit_id)
        yield current
        if current.parent_commit_id is None:
            return
        current = await get_commit(session, current.parent_commit_id)
        if current is None:
            logger.warning("⚠️ Ancestry walk stopped at a missing parent commit")
