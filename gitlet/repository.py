"""Repository handle — the explicit per-command repository context.

Every command opens one :class:`Repository` at the start of its async core.
The handle reads HEAD, the branch pointers and the staging index once,
buffers every pointer/index change in memory, and writes them back in a
single :meth:`Repository.flush` after the command has succeeded.  ``flush()``
commits the database transaction before touching any file, so a failed
commit leaves ``.gitlet/`` exactly as it was.  A command that raises before
``flush()`` changes nothing either (``open_session()`` rolls back).

The handle also owns the commit-recording and snapshot-switching primitives
shared by ``commit``, ``checkout``, ``reset`` and ``merge``.
"""
from __future__ import annotations

import datetime
import json
import logging
import pathlib
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import gitlet_dir
from gitlet.db import get_commit, get_commit_manifest, insert_commit, upsert_snapshot
from gitlet.errors import (
    BranchAlreadyExistsError,
    CannotRemoveCurrentBranchError,
    NoSuchBranchError,
)
from gitlet.models import GitletCommit
from gitlet.refs import (
    delete_branch_file,
    list_branches,
    read_branch,
    read_head_branch,
    validate_branch_name,
    write_branch,
    write_head_branch,
)
from gitlet.snapshot import compute_commit_id, compute_snapshot_id, list_workdir_files
from gitlet.staging import StagingIndex, read_index, write_index
from gitlet.workdir import apply_snapshot, check_untracked

logger = logging.getLogger(__name__)

_JOURNAL_PATH = ("logs", "global.log")

# The root commit of every repository is dated at the Unix epoch so two
# fresh repositories share the same root fingerprint.
EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


async def store_commit(
    session: AsyncSession,
    *,
    parent_id: str | None,
    parent2_id: str | None,
    message: str,
    branch: str,
    manifest: dict[str, str],
    committed_at: datetime.datetime,
) -> GitletCommit:
    """Persist the snapshot and commit rows for a new commit and return it."""
    snapshot_id = compute_snapshot_id(manifest)
    await upsert_snapshot(session, manifest=manifest, snapshot_id=snapshot_id)
    await session.flush()

    commit_id = compute_commit_id(
        parent_id=parent_id,
        parent2_id=parent2_id,
        message=message,
        committed_at_iso=committed_at.isoformat(),
        branch=branch,
        snapshot_id=snapshot_id,
    )
    commit = GitletCommit(
        commit_id=commit_id,
        branch=branch,
        parent_commit_id=parent_id,
        parent2_commit_id=parent2_id,
        snapshot_id=snapshot_id,
        message=message,
        committed_at=committed_at,
    )
    await insert_commit(session, commit)
    await session.flush()
    return commit


def append_journal(root: pathlib.Path, commit: GitletCommit) -> None:
    """Append one line describing *commit* to ``.gitlet/logs/global.log``."""
    path = gitlet_dir(root).joinpath(*_JOURNAL_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    entry = {
        "commit": commit.commit_id,
        "parent": commit.parent_commit_id,
        "parent2": commit.parent2_commit_id,
        "branch": commit.branch,
        "committed_at": commit.committed_at.isoformat(),
        "message": commit.message,
    }
    with path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(entry, sort_keys=True) + "\n")


@dataclass
class Repository:
    """Loaded repository state for one command invocation.

    Attributes:
        root:        Repository root (the directory containing ``.gitlet/``).
        session:     Open async DB session.
        head_branch: Name of the branch HEAD points at.
        index:       The staging index.
    """

    root: pathlib.Path
    session: AsyncSession
    head_branch: str
    index: StagingIndex
    _ref_updates: dict[str, str | None] = field(default_factory=dict)
    _new_commits: list[GitletCommit] = field(default_factory=list)
    _head_moved: bool = False

    @classmethod
    async def open(cls, root: pathlib.Path, session: AsyncSession) -> Repository:
        return cls(
            root=root,
            session=session,
            head_branch=read_head_branch(root),
            index=read_index(root),
        )

    # ── Reference set ─────────────────────────────────────────────────────

    def branch_pointer(self, name: str) -> str | None:
        """Return the commit id *name* points at, or ``None`` if no such branch."""
        if name in self._ref_updates:
            return self._ref_updates[name]
        return read_branch(self.root, name)

    def branch_exists(self, name: str) -> bool:
        return self.branch_pointer(name) is not None

    def branches(self) -> list[str]:
        names = set(list_branches(self.root))
        for name, target in self._ref_updates.items():
            if target is None:
                names.discard(name)
            else:
                names.add(name)
        return sorted(names)

    def set_branch_pointer(self, name: str, commit_id: str) -> None:
        validate_branch_name(name)
        self._ref_updates[name] = commit_id

    def create_branch(self, name: str) -> str:
        """Point a new branch *name* at the HEAD commit and return that id."""
        validate_branch_name(name)
        if self.branch_exists(name):
            raise BranchAlreadyExistsError(name)
        commit_id = self.head_commit_id
        self.set_branch_pointer(name, commit_id)
        return commit_id

    def delete_branch(self, name: str) -> None:
        if name == self.head_branch:
            raise CannotRemoveCurrentBranchError(name)
        if not self.branch_exists(name):
            raise NoSuchBranchError(name)
        self._ref_updates[name] = None

    def set_head(self, branch: str, commit_id: str) -> None:
        """Move HEAD to *branch* and point *branch* at *commit_id*, as a pair."""
        self.set_branch_pointer(branch, commit_id)
        if branch != self.head_branch:
            self.head_branch = branch
            self._head_moved = True

    @property
    def head_commit_id(self) -> str:
        commit_id = self.branch_pointer(self.head_branch)
        if commit_id is None:
            raise RuntimeError(f"HEAD branch {self.head_branch!r} has no commit")
        return commit_id

    async def head_commit(self) -> GitletCommit:
        commit = await get_commit(self.session, self.head_commit_id)
        if commit is None:
            raise RuntimeError(f"HEAD commit {self.head_commit_id[:8]} not found in DB")
        return commit

    async def head_manifest(self) -> dict[str, str]:
        return await get_commit_manifest(self.session, await self.head_commit())

    async def manifest_of(self, commit: GitletCommit) -> dict[str, str]:
        return await get_commit_manifest(self.session, commit)

    # ── Commit recording ──────────────────────────────────────────────────

    async def record_commit(
        self,
        message: str,
        *,
        parent2_id: str | None = None,
        committed_at: datetime.datetime | None = None,
    ) -> GitletCommit:
        """Fold the staging index into HEAD's snapshot and commit the result.

        Advances the current branch (and HEAD) to the new commit and clears
        the index.  Callers validate that there is something to commit.
        """
        head = await self.head_commit()
        manifest = self.index.apply_to(await self.manifest_of(head))
        commit = await store_commit(
            self.session,
            parent_id=head.commit_id,
            parent2_id=parent2_id,
            message=message,
            branch=self.head_branch,
            manifest=manifest,
            committed_at=committed_at or datetime.datetime.now(datetime.timezone.utc),
        )
        self._new_commits.append(commit)
        self.set_head(self.head_branch, commit.commit_id)
        self.index.clear()
        logger.info(
            "✅ Recorded commit %s on %r (%d files)",
            commit.commit_id[:8],
            self.head_branch,
            len(manifest),
        )
        return commit

    # ── Working-directory switching ───────────────────────────────────────

    async def checkout_commit(self, target: GitletCommit) -> tuple[int, int]:
        """Make the working directory match *target*'s snapshot.

        Aborts with :class:`~gitlet.errors.UntrackedFileConflictError` before
        touching anything if a file HEAD does not track would be overwritten.
        Does not move HEAD; callers decide which pointer to advance.

        Returns:
            ``(files_written, files_deleted)``.
        """
        head_manifest = await self.head_manifest()
        target_manifest = await self.manifest_of(target)
        check_untracked(target_manifest, head_manifest, list_workdir_files(self.root))
        return apply_snapshot(self.root, target_manifest, tracked=head_manifest.keys())

    # ── Persistence ───────────────────────────────────────────────────────

    async def flush(self) -> None:
        """Commit the DB transaction, then write buffered pointer and index changes.

        Ref files only ever name commits that are durably stored.
        """
        await self.session.commit()
        for name, target in self._ref_updates.items():
            if target is None:
                delete_branch_file(self.root, name)
            else:
                write_branch(self.root, name, target)
        if self._head_moved:
            write_head_branch(self.root, self.head_branch)
        write_index(self.root, self.index)
        for commit in self._new_commits:
            append_journal(self.root, commit)
        self._ref_updates.clear()
        self._new_commits.clear()
        self._head_moved = False
