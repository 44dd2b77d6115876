"""gitlet init — create a new Gitlet repository in the current directory.

Layout written::

    .gitlet/
        HEAD                 refs/heads/master
        refs/heads/master    id of the root commit
        index.json           empty staging index
        objects/             blob store (empty)
        logs/global.log      commit journal (one line, the root commit)
        gitlet.db            commit/snapshot records

Every repository starts from the same root commit: message
``initial commit``, dated at the Unix epoch, tracking no files.  Two
fresh repositories therefore share the root commit id.
"""
from __future__ import annotations

import logging
import pathlib
import shutil
from collections.abc import Sequence

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import gitlet_dir, init_target, require_operands
from gitlet.commands._runner import run_in_session
from gitlet.config import settings
from gitlet.errors import AlreadyInitializedError, ExitCode
from gitlet.models import GitletCommit
from gitlet.object_store import objects_dir
from gitlet.refs import heads_dir, write_branch, write_head_branch
from gitlet.repository import EPOCH, append_journal, store_commit
from gitlet.staging import StagingIndex, write_index

logger = logging.getLogger(__name__)


def create_layout(root: pathlib.Path) -> None:
    """Create the ``.gitlet/`` directory tree (idempotent)."""
    for directory in (objects_dir(root), heads_dir(root), gitlet_dir(root) / "logs"):
        directory.mkdir(parents=True, exist_ok=True)


async def _init_async(*, root: pathlib.Path, session: AsyncSession) -> GitletCommit:
    """Write the root commit and point HEAD and the default branch at it.

    Args:
        root:    Directory to initialise (``.gitlet/`` is created inside it).
        session: Open async DB session with the schema already created.

    Returns:
        The root commit.
    """
    create_layout(root)
    branch = settings.default_branch
    commit = await store_commit(
        session,
        parent_id=None,
        parent2_id=None,
        message=settings.initial_commit_message,
        branch=branch,
        manifest={},
        committed_at=EPOCH,
    )
    await session.commit()
    write_branch(root, branch, commit.commit_id)
    write_head_branch(root, branch)
    write_index(root, StagingIndex())
    append_journal(root, commit)
    logger.info("✅ Initialised Gitlet repository at %s (%s)", root, commit.commit_id[:8])
    return commit


def run_init(operands: Sequence[str] | None = None) -> None:
    """Initialise a Gitlet repository in the current directory."""
    require_operands(operands, 0)
    root = init_target()

    if gitlet_dir(root).exists():
        typer.echo(str(AlreadyInitializedError()))
        raise typer.Exit(code=ExitCode.USER_ERROR)

    try:
        create_layout(root)
    except OSError as exc:
        typer.echo(f"Could not create {gitlet_dir(root)}: {exc.strerror or exc}")
        logger.error("❌ gitlet init failed: %s", exc, exc_info=True)
        raise typer.Exit(code=ExitCode.INTERNAL_ERROR)

    async def _core(session: AsyncSession) -> GitletCommit:
        return await _init_async(root=root, session=session)

    try:
        run_in_session("init", root, _core, ensure_schema=True)
    except typer.Exit:
        shutil.rmtree(gitlet_dir(root), ignore_errors=True)
        logger.info("⚠️ Removed partial %s", gitlet_dir(root))
        raise
