"""Gitlet merge engine — split-point discovery and 3-way path classification.

Public API
----------
Pure functions (no I/O):

- :func:`classify_path` — decide one path's fate from its split/head/other ids.
- :func:`plan_merge` — classify every path in the union of three snapshots.
- :func:`render_conflict` — build the conflict-marker text for one file.

Async helpers (require a DB session):

- :func:`find_split_point` — the split point of two commits.

Classification matrix
---------------------

Blob ids are compared by value; a path missing from a snapshot compares as
``None``.

======================  =====================  ==================
head vs split           other vs split         action
======================  =====================  ==================
head == other (any)                            ``KEEP_HEAD``
unchanged               changed                ``TAKE_OTHER``
changed                 unchanged              ``KEEP_HEAD``
changed                 changed, != head       ``CONFLICT``
======================  =====================  ==================
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gitlet.graph import iter_ancestors, load_commit

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

CONFLICT_HEAD_MARKER = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_END_MARKER = b">>>>>>>\n"


class MergeAction(str, enum.Enum):
    """What a 3-way merge does with one path."""

    KEEP_HEAD = "keep_head"
    TAKE_OTHER = "take_other"
    CONFLICT = "conflict"


class MergeKind(str, enum.Enum):
    """How a ``gitlet merge`` invocation concluded."""

    ANCESTOR = "ancestor"
    FAST_FORWARD = "fast_forward"
    MERGED = "merged"


@dataclass(frozen=True)
class PathResolution:
    """The classification of one path.

    Attributes:
        path:     POSIX file name.
        action:   The :class:`MergeAction` to apply.
        head_id:  Blob id on the current branch, ``None`` if absent.
        other_id: Blob id on the given branch, ``None`` if absent.
    """

    path: str
    action: MergeAction
    head_id: str | None
    other_id: str | None


@dataclass
class MergeOutcome:
    """Result of a merge, returned by the command core for tests and logging.

    Attributes:
        kind:           How the merge concluded.
        commit_id:      The commit HEAD points at afterwards.
        conflict_paths: Files written with conflict markers.
    """

    kind: MergeKind
    commit_id: str
    conflict_paths: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Pure merge functions (no I/O, no DB)
# ---------------------------------------------------------------------------


def classify_path(
    split_id: str | None,
    head_id: str | None,
    other_id: str | None,
) -> MergeAction:
    """Return the :class:`MergeAction` for one path."""
    if head_id == other_id:
        return MergeAction.KEEP_HEAD
    if head_id == split_id:
        return MergeAction.TAKE_OTHER
    if other_id == split_id:
        return MergeAction.KEEP_HEAD
    return MergeAction.CONFLICT


def plan_merge(
    split_manifest: Mapping[str, str],
    head_manifest: Mapping[str, str],
    other_manifest: Mapping[str, str],
) -> list[PathResolution]:
    """Classify every path in the union of the three manifests.

    Args:
        split_manifest: ``{path: object_id}`` of the split point.
        head_manifest:  ``{path: object_id}`` of the current branch head.
        other_manifest: ``{path: object_id}`` of the given branch head.

    Returns:
        One :class:`PathResolution` per path, sorted by path.
    """
    paths = set(split_manifest) | set(head_manifest) | set(other_manifest)
    plan: list[PathResolution] = []
    for path in sorted(paths):
        head_id = head_manifest.get(path)
        other_id = other_manifest.get(path)
        action = classify_path(split_manifest.get(path), head_id, other_id)
        plan.append(PathResolution(path, action, head_id, other_id))
    return plan


def _conflict_side(content: bytes | None) -> bytes:
    if not content:
        return b""
    if content.endswith(b"\n"):
        return content
    return content + b"\n"


def render_conflict(head: bytes | None, other: bytes | None) -> bytes:
    """Return the conflict-marker text for a file changed on both sides.

    An absent side renders as empty.  A side that does not end in a newline
    gets one so the markers always start on their own line.
    """
    return (
        CONFLICT_HEAD_MARKER
        + _conflict_side(head)
        + CONFLICT_SEPARATOR
        + _conflict_side(other)
        + CONFLICT_END_MARKER
    )


# ---------------------------------------------------------------------------
# Async merge helpers (require a DB session)
# ---------------------------------------------------------------------------


async def find_split_point(
    session: AsyncSession,
    head_commit_id: str,
    other_commit_id: str,
) -> str:
    """Return the split point of two commits.

    Collects the primary-parent ancestry of *head_commit_id* (inclusive),
    then walks *other_commit_id*'s primary-parent chain until the first
    commit found in that set.  Step-parents are not followed.  When the
    chains share nothing the root of *other*'s chain is returned.
    """
    head_ancestors: set[str] = set()
    async for commit in iter_ancestors(session, await load_commit(session, head_commit_id)):
        head_ancestors.add(commit.commit_id)

    last = other_commit_id
    async for commit in iter_ancestors(session, await load_commit(session, other_commit_id)):
        if commit.commit_id in head_ancestors:
            return commit.commit_id
        last = commit.commit_id

    logger.warning(
        "⚠️ No shared ancestor for %s and %s; using %s",
        head_commit_id[:8],
        other_commit_id[:8],
        last[:8],
    )
    return last
