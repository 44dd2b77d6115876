"""gitlet merge — merge a branch into the current branch.

Algorithm
---------
1. Refuse if the staging index is not empty.
2. Refuse if the given branch does not exist, or is the current branch.
3. Refuse if the working directory holds any file HEAD does not track.
4. Find the split point: the first commit on the given branch's
   primary-parent chain that is also a primary-parent ancestor of HEAD.
5. **Ancestor** — split == given branch head: nothing to do.
6. **Fast-forward** — split == HEAD: switch the working directory to the
   given branch's snapshot and advance the current branch to it.  No
   merge commit.
7. **3-way merge** — classify every path (see
   :mod:`gitlet.merge_engine`), write taken and conflicted files, stage the
   results, and commit ``Merged <given> into <current>.`` with the given
   branch head as step-parent.  Conflicts are reported per file and do not
   stop the merge commit; the conflict markers are committed.
"""
from __future__ import annotations

import logging
import pathlib
from collections.abc import Sequence

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import require_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.db import upsert_object
from gitlet.errors import (
    NoSuchBranchError,
    SelfMergeError,
    UncommittedChangesError,
    UntrackedFileConflictError,
)
from gitlet.graph import load_commit
from gitlet.merge_engine import (
    MergeAction,
    MergeKind,
    MergeOutcome,
    find_split_point,
    plan_merge,
    render_conflict,
)
from gitlet.object_store import get_blob, put_blob
from gitlet.repository import Repository
from gitlet.snapshot import list_workdir_files
from gitlet.workdir import delete_file, restore_file, untracked_files, write_file

logger = logging.getLogger(__name__)

ANCESTOR_MESSAGE = "Given branch is an ancestor of the current branch."
FAST_FORWARD_MESSAGE = "Current branch fast-forwarded."
CONFLICT_MESSAGE = "Encountered a merge conflict."


async def _merge_async(
    *,
    root: pathlib.Path,
    session: AsyncSession,
    branch: str,
) -> MergeOutcome:
    """Run the merge pipeline.

    All filesystem and DB side-effects are isolated here so tests can inject
    an in-memory SQLite session and a ``tmp_path`` root.

    Args:
        root:    Repository root (directory containing ``.gitlet/``).
        session: Open async DB session.
        branch:  Name of the branch to merge into the current branch.

    Raises:
        UncommittedChangesError:    The staging index is not empty.
        NoSuchBranchError:          *branch* does not exist.
        SelfMergeError:             *branch* is the current branch.
        UntrackedFileConflictError: The working directory has untracked files.
    """
    repo = await Repository.open(root, session)

    # ── Preconditions ────────────────────────────────────────────────────
    if not repo.index.is_empty:
        raise UncommittedChangesError()
    other_id = repo.branch_pointer(branch)
    if other_id is None:
        raise NoSuchBranchError(branch)
    if branch == repo.head_branch:
        raise SelfMergeError(branch)

    head = await repo.head_commit()
    head_manifest = await repo.manifest_of(head)
    stray = untracked_files(list_workdir_files(root), head_manifest)
    if stray:
        raise UntrackedFileConflictError(stray[0])

    current_branch = repo.head_branch
    split_id = await find_split_point(session, head.commit_id, other_id)

    # ── Given branch already merged ──────────────────────────────────────
    if split_id == other_id:
        typer.echo(ANCESTOR_MESSAGE)
        return MergeOutcome(kind=MergeKind.ANCESTOR, commit_id=head.commit_id)

    other = await load_commit(session, other_id)

    # ── Fast-forward ─────────────────────────────────────────────────────
    if split_id == head.commit_id:
        await repo.checkout_commit(other)
        repo.set_head(current_branch, other.commit_id)
        repo.index.clear()
        await repo.flush()
        typer.echo(FAST_FORWARD_MESSAGE)
        logger.info("✅ gitlet merge fast-forward %r to %s", current_branch, other_id[:8])
        return MergeOutcome(kind=MergeKind.FAST_FORWARD, commit_id=other.commit_id)

    # ── 3-way merge ──────────────────────────────────────────────────────
    split_manifest = await repo.manifest_of(await load_commit(session, split_id))
    other_manifest = await repo.manifest_of(other)

    conflicts: list[str] = []
    for resolution in plan_merge(split_manifest, head_manifest, other_manifest):
        name = resolution.path
        if resolution.action is MergeAction.TAKE_OTHER:
            if resolution.other_id is None:
                delete_file(root, name)
                repo.index.stage_removal(name)
            else:
                restore_file(root, name, resolution.other_id)
                repo.index.stage_addition(name, resolution.other_id)
        elif resolution.action is MergeAction.CONFLICT:
            content = render_conflict(
                get_blob(root, resolution.head_id) if resolution.head_id else None,
                get_blob(root, resolution.other_id) if resolution.other_id else None,
            )
            object_id = put_blob(root, content)
            await upsert_object(session, object_id, len(content))
            write_file(root, name, content)
            repo.index.stage_addition(name, object_id)
            conflicts.append(name)
            typer.echo(CONFLICT_MESSAGE)

    merge_commit = await repo.record_commit(
        f"Merged {branch} into {current_branch}.",
        parent2_id=other.commit_id,
    )
    await repo.flush()
    logger.info(
        "✅ gitlet merge commit %s on %r (parents: %s, %s; %d conflict(s))",
        merge_commit.commit_id[:8],
        current_branch,
        head.commit_id[:8],
        other.commit_id[:8],
        len(conflicts),
    )
    return MergeOutcome(
        kind=MergeKind.MERGED,
        commit_id=merge_commit.commit_id,
        conflict_paths=conflicts,
    )


def run_merge(operands: Sequence[str] | None = None) -> None:
    """Merge a branch into the current branch."""
    root = require_repo()
    (branch,) = require_operands(operands, 1)

    async def _core(session: AsyncSession) -> MergeOutcome:
        return await _merge_async(root=root, session=session, branch=branch)

    run_in_session("merge", root, _core)
