"""Tests for ``gitlet branch``, ``gitlet rm-branch`` and ``gitlet reset``."""
from __future__ import annotations

import pathlib

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from gitlet.commands.add import _add_async
from gitlet.commands.branch import _branch_async, _rm_branch_async
from gitlet.commands.checkout import _checkout_branch_async
from gitlet.commands.commit import _commit_async
from gitlet.commands.reset import _reset_async
from gitlet.commands.rm import _rm_async
from gitlet.db import get_commit
from gitlet.errors import (
    BranchAlreadyExistsError,
    CannotRemoveCurrentBranchError,
    InvalidBranchNameError,
    NoCommitWithIdError,
    NoSuchBranchError,
    UntrackedFileConflictError,
)
from gitlet.models import GitletCommit
from gitlet.refs import list_branches, read_branch, read_head_branch
from gitlet.staging import read_index


async def _commit_files(
    root: pathlib.Path, session: AsyncSession, files: dict[str, str], message: str
) -> GitletCommit:
    for name, content in files.items():
        (root / name).write_text(content)
        await _add_async(root=root, session=session, filename=name)
    return await _commit_async(root=root, session=session, message=message)


# ---------------------------------------------------------------------------
# branch / rm-branch
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_branch_points_at_head_without_switching(
    repo_root: pathlib.Path, gitlet_db_session: AsyncSession
) -> None:
    head = await _commit_files(repo_root, gitlet_db_session, {"a.txt": "1"}, "one")

    commit_id = await _branch_async(root=repo_root, session=gitlet_db_session, name="feature/x")

    assert commit_id == head.commit_id
    assert read_branch(repo_root, "feature/x") == head.commit_id
    assert read_head_branch(repo_root) == "master"


@pytest.mark.asyncio
async def test_branch_errors(
    repo_root: pathlib.Path, gitlet_db_session: AsyncSession
) -> None:
    with pytest.raises(BranchAlreadyExistsError) as exc_info:
        await _branch_async(root=repo_root, session=gitlet_db_session, name="master")
    assert str(exc_info.value) == "A branch with that name already exists."

    with pytest.raises(InvalidBranchNameError):
        await _branch_async(root=repo_root, session=gitlet_db_session, name="bad name")
    assert list_branches(repo_root) == ["master"]


@pytest.mark.asyncio
async def test_rm_branch_keeps_commits(
    repo_root: pathlib.Path, gitlet_db_session: AsyncSession
) -> None:
    await _branch_async(root=repo_root, session=gitlet_db_session, name="other")
    await _checkout_branch_async(root=repo_root, session=gitlet_db_session, branch="other")
    on_other = await _commit_files(repo_root, gitlet_db_session, {"a.txt": "1"}, "other work")
    await _checkout_branch_async(root=repo_root, session=gitlet_db_session, branch="master")

    await _rm_branch_async(root=repo_root, session=gitlet_db_session, name="other")

    assert list_branches(repo_root) == ["master"]
    assert await get_commit(gitlet_db_session, on_other.commit_id) is not None


@pytest.mark.asyncio
async def test_rm_branch_errors(
    repo_root: pathlib.Path, gitlet_db_session: AsyncSession
) -> None:
    with pytest.raises(CannotRemoveCurrentBranchError) as current:
        await _rm_branch_async(root=repo_root, session=gitlet_db_session, name="master")
    assert str(current.value) == "Cannot remove the current branch."
    assert list_branches(repo_root) == ["master"]

    with pytest.raises(NoSuchBranchError) as missing:
        await _rm_branch_async(root=repo_root, session=gitlet_db_session, name="nope")
    assert str(missing.value) == "A branch with that name does not exist."


# ---------------------------------------------------------------------------
# reset
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_reset_moves_current_branch_and_tree(
    repo_root: pathlib.Path, gitlet_db_session: AsyncSession
) -> None:
    first = await _commit_files(repo_root, gitlet_db_session, {"a.txt": "1"}, "one")
    await _commit_files(repo_root, gitlet_db_session, {"a.txt": "2", "b.txt": "b"}, "two")
    (repo_root / "c.txt").write_text("c")
    await _add_async(root=repo_root, session=gitlet_db_session, filename="c.txt")

    target = await _reset_async(
        root=repo_root, session=gitlet_db_session, commit_ref=first.commit_id[:10]
    )

    assert target.commit_id == first.commit_id
    assert read_branch(repo_root, "master") == first.commit_id
    assert read_head_branch(repo_root) == "master"
    assert (repo_root / "a.txt").read_text() == "1"
    assert not (repo_root / "b.txt").exists()
    # c.txt was only staged, never tracked by HEAD: it stays on disk.
    assert (repo_root / "c.txt").exists()
    assert read_index(repo_root).is_empty


@pytest.mark.asyncio
async def test_reset_to_commit_from_other_branch_moves_current_branch(
    repo_root: pathlib.Path, gitlet_db_session: AsyncSession
) -> None:
    await _branch_async(root=repo_root, session=gitlet_db_session, name="other")
    await _checkout_branch_async(root=repo_root, session=gitlet_db_session, branch="other")
    theirs = await _commit_files(repo_root, gitlet_db_session, {"t.txt": "t"}, "theirs")
    await _checkout_branch_async(root=repo_root, session=gitlet_db_session, branch="master")

    await _reset_async(root=repo_root, session=gitlet_db_session, commit_ref=theirs.commit_id)

    assert read_head_branch(repo_root) == "master"
    assert read_branch(repo_root, "master") == theirs.commit_id
    assert (repo_root / "t.txt").read_text() == "t"


@pytest.mark.asyncio
async def test_reset_errors(
    repo_root: pathlib.Path, gitlet_db_session: AsyncSession
) -> None:
    first = await _commit_files(repo_root, gitlet_db_session, {"a.txt": "1"}, "one")
    await _rm_and_replace(repo_root, gitlet_db_session)

    with pytest.raises(NoCommitWithIdError):
        await _reset_async(root=repo_root, session=gitlet_db_session, commit_ref="not-a-commit")

    (repo_root / "a.txt").write_text("untracked copy")
    head_before = read_branch(repo_root, "master")
    with pytest.raises(UntrackedFileConflictError):
        await _reset_async(root=repo_root, session=gitlet_db_session, commit_ref=first.commit_id)
    assert read_branch(repo_root, "master") == head_before
    assert (repo_root / "a.txt").read_text() == "untracked copy"


async def _rm_and_replace(root: pathlib.Path, session: AsyncSession) -> None:
    """Commit a state where a.txt is no longer tracked."""
    await _rm_async(root=root, session=session, filename="a.txt")
    await _commit_files(root, session, {"z.txt": "z"}, "drop a")
