"""gitlet checkout — restore a file, or switch branches.

Forms
-----
* ``gitlet checkout -- <file>`` — overwrite ``<file>`` with HEAD's version.
* ``gitlet checkout <commit> -- <file>`` — overwrite ``<file>`` with the
  version in ``<commit>`` (an id or unique id prefix).
* ``gitlet checkout <branch>`` — make the working directory match the head
  of ``<branch>``, move HEAD there and clear the staging index.

File checkouts never stage anything and never move HEAD.  Every form
refuses to overwrite a file that HEAD does not track.

Click drops the ``--`` separator while parsing, so the command is built
with :class:`RawOperandsCommand`, which keeps the raw argument vector in
``ctx.meta["raw_operands"]`` for :func:`run_checkout`.
"""
from __future__ import annotations

import functools
import logging
import pathlib
from collections.abc import Sequence

import click
from sqlalchemy.ext.asyncio import AsyncSession
from typer.core import TyperCommand

from gitlet._repo import reject_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.errors import (
    AlreadyOnBranchError,
    FileNotInCommitError,
    NoSuchBranchError,
)
from gitlet.graph import load_commit, resolve_commit
from gitlet.models import GitletCommit
from gitlet.repository import Repository
from gitlet.snapshot import list_workdir_files
from gitlet.workdir import check_untracked, restore_file, tracked_name

logger = logging.getLogger(__name__)

_SEPARATOR = "--"
RAW_OPERANDS_KEY = "raw_operands"


class RawOperandsCommand(TyperCommand):
    """A Typer command that records its unparsed arguments in ``ctx.meta``."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta[RAW_OPERANDS_KEY] = list(args)
        return super().parse_args(ctx, args)


async def _checkout_file_async(
    *,
    root: pathlib.Path,
    session: AsyncSession,
    filename: str,
    commit_ref: str | None = None,
) -> str:
    """Write *filename* as stored in *commit_ref* (default HEAD).

    Returns:
        The blob id written.

    Raises:
        NoCommitWithIdError:        *commit_ref* matches no single commit.
        FileNotInCommitError:       The commit does not track *filename*.
        UntrackedFileConflictError: *filename* exists untracked.
    """
    repo = await Repository.open(root, session)
    commit = (
        await resolve_commit(session, commit_ref)
        if commit_ref is not None
        else await repo.head_commit()
    )
    manifest = await repo.manifest_of(commit)
    name = tracked_name(root, filename)
    if name is None or name not in manifest:
        raise FileNotInCommitError(filename)

    object_id = manifest[name]
    check_untracked({name: object_id}, await repo.head_manifest(), list_workdir_files(root))
    restore_file(root, name, object_id)
    logger.info("✅ Checked out %s from %s", name, commit.commit_id[:8])
    return object_id


async def _checkout_branch_async(
    *,
    root: pathlib.Path,
    session: AsyncSession,
    branch: str,
) -> GitletCommit:
    """Switch the working directory and HEAD to *branch*.

    Raises:
        NoSuchBranchError:          *branch* does not exist.
        AlreadyOnBranchError:       *branch* is the current branch.
        UntrackedFileConflictError: A file HEAD does not track would be
                                    overwritten.  Nothing is changed.
    """
    repo = await Repository.open(root, session)
    target_id = repo.branch_pointer(branch)
    if target_id is None:
        raise NoSuchBranchError(branch, "No such branch exists.")
    if branch == repo.head_branch:
        raise AlreadyOnBranchError(branch)

    target = await load_commit(session, target_id)
    written, deleted = await repo.checkout_commit(target)
    repo.set_head(branch, target.commit_id)
    repo.index.clear()
    await repo.flush()
    logger.info(
        "✅ Switched to %r at %s (%d written, %d deleted)",
        branch,
        target.commit_id[:8],
        written,
        deleted,
    )
    return target


def run_checkout(operands: Sequence[str] | None = None) -> None:
    """Dispatch on the three checkout forms.

    *operands* must be the raw argument vector, ``--`` included.
    """
    root = require_repo()
    ops = list(operands or [])

    if len(ops) == 2 and ops[0] == _SEPARATOR:
        core = functools.partial(_checkout_file_async, root=root, filename=ops[1])
    elif len(ops) == 3 and ops[1] == _SEPARATOR:
        core = functools.partial(
            _checkout_file_async, root=root, filename=ops[2], commit_ref=ops[0]
        )
    elif len(ops) == 1 and ops[0] != _SEPARATOR:
        core = functools.partial(_checkout_branch_async, root=root, branch=ops[0])
    else:
        reject_operands()

    async def _core(session: AsyncSession) -> object:
        return await core(session=session)

    run_in_session("checkout", root, _core)
