"""Working-directory reconciliation for checkout, reset and merge.

Every operation that replaces working-directory content calls
:func:`check_untracked` first and only then :func:`apply_snapshot`, so an
untracked file in the way aborts the command before any file changes.
"""
from __future__ import annotations

import logging
import pathlib
from collections.abc import Collection, Iterable, Mapping

from gitlet.errors import UntrackedFileConflictError
from gitlet.object_store import restore_object
from gitlet.snapshot import normalize_path

logger = logging.getLogger(__name__)


def tracked_name(root: pathlib.Path, filename: str) -> str | None:
    """Return the tracked-file name for operand *filename*.

    Returns ``None`` when *filename* does not name a file inside the
    working directory, including a path that leaves it through a symlink.
    """
    name = normalize_path(filename)
    if name is None:
        return None
    resolved_root = root.resolve()
    if not (resolved_root / name).resolve().is_relative_to(resolved_root):
        logger.info("⚠️ %r resolves outside %s", filename, resolved_root)
        return None
    return name


def untracked_files(
    present: Iterable[str], head: Mapping[str, str]
) -> list[str]:
    """Return the working-directory files *head* does not track, sorted."""
    return sorted(name for name in present if name not in head)


def check_untracked(
    target: Mapping[str, str],
    head: Mapping[str, str],
    present: Iterable[str],
) -> None:
    """Refuse to overwrite a file that HEAD does not track.

    Raises:
        UntrackedFileConflictError: For the first file in *present* that
            *target* contains but *head* does not.
    """
    for name in sorted(present):
        if name in target and name not in head:
            logger.info("⚠️ Untracked file %r would be overwritten", name)
            raise UntrackedFileConflictError(name)


def write_file(root: pathlib.Path, name: str, content: bytes) -> None:
    dest = root / name
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(content)


def restore_file(root: pathlib.Path, name: str, object_id: str) -> None:
    """Write the stored blob *object_id* to ``<root>/<name>``."""
    restore_object(root, object_id, root / name)


def delete_file(root: pathlib.Path, name: str) -> bool:
    """Delete ``<root>/<name>`` and prune directories it leaves empty.

    Returns ``False`` when the file was already gone.
    """
    path = root / name
    if not path.is_file():
        return False
    path.unlink()
    parent = path.parent
    while parent != root and not any(parent.iterdir()):
        parent.rmdir()
        parent = parent.parent
    return True


def apply_snapshot(
    root: pathlib.Path,
    target: Mapping[str, str],
    tracked: Collection[str],
) -> tuple[int, int]:
    """Make the working directory hold exactly *target*'s tracked files.

    Every file in *target* is written (created or overwritten).  Files in
    *tracked* (the outgoing HEAD's snapshot) that *target* lacks are
    deleted.  Untracked files are never deleted.

    Returns:
        ``(files_written, files_deleted)``.
    """
    written = 0
    for name, object_id in sorted(target.items()):
        restore_file(root, name, object_id)
        written += 1

    deleted = 0
    for name in sorted(tracked):
        if name not in target and delete_file(root, name):
            deleted += 1

    logger.debug("✅ Applied snapshot (%d written, %d deleted)", written, deleted)
    return written, deleted
