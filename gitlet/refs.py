"""Branch pointers and HEAD, stored as plain files under ``.gitlet/``.

Layout::

    .gitlet/HEAD                 "refs/heads/<branch>"
    .gitlet/refs/heads/<branch>  "<commit_id>"

HEAD names the current branch; the current commit is whatever that branch
points at, so HEAD and the current branch pointer cannot disagree.
"""
from __future__ import annotations

import logging
import pathlib
import re

from gitlet._repo import gitlet_dir
from gitlet.errors import InvalidBranchNameError

logger = logging.getLogger(__name__)

_HEAD_FILE = "HEAD"
_HEADS_PREFIX = "refs/heads/"

# Branch names follow the same rules as Git: no spaces, no control chars,
# no leading dots, no double dots, no trailing slash.
_BRANCH_RE = re.compile(r"^[a-zA-Z0-9._\-/]+$")


def validate_branch_name(name: str) -> None:
    """Raise :class:`InvalidBranchNameError` if *name* is not a valid branch."""
    if (
        not _BRANCH_RE.match(name)
        or ".." in name
        or name.startswith(".")
        or name.startswith("/")
        or name.endswith("/")
    ):
        raise InvalidBranchNameError(name)


def heads_dir(root: pathlib.Path) -> pathlib.Path:
    return gitlet_dir(root) / "refs" / "heads"


def branch_path(root: pathlib.Path, branch: str) -> pathlib.Path:
    return heads_dir(root) / branch


def read_head_branch(root: pathlib.Path) -> str:
    """Return the current branch name recorded in ``.gitlet/HEAD``."""
    head_ref = (gitlet_dir(root) / _HEAD_FILE).read_text().strip()
    return head_ref.removeprefix(_HEADS_PREFIX)


def write_head_branch(root: pathlib.Path, branch: str) -> None:
    (gitlet_dir(root) / _HEAD_FILE).write_text(f"{_HEADS_PREFIX}{branch}\n")
    logger.debug("✅ HEAD → %s", branch)


def read_branch(root: pathlib.Path, branch: str) -> str | None:
    """Return the commit id *branch* points at, or ``None`` if it does not exist."""
    path = branch_path(root, branch)
    if not path.is_file():
        return None
    raw = path.read_text().strip()
    return raw or None


def write_branch(root: pathlib.Path, branch: str, commit_id: str) -> None:
    path = branch_path(root, branch)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(commit_id)
    logger.debug("✅ Branch %r → %s", branch, commit_id[:8])


def delete_branch_file(root: pathlib.Path, branch: str) -> bool:
    """Remove the pointer file for *branch*; return ``False`` if it was absent."""
    path = branch_path(root, branch)
    if not path.is_file():
        return False
    path.unlink()
    # Drop now-empty namespace directories (``feature/`` after ``feature/x``).
    parent = path.parent
    stop = heads_dir(root)
    while parent != stop and not any(parent.iterdir()):
        parent.rmdir()
        parent = parent.parent
    logger.debug("✅ Deleted branch %r", branch)
    return True


def list_branches(root: pathlib.Path) -> list[str]:
    """Return every branch name, sorted."""
    base = heads_dir(root)
    if not base.is_dir():
        return []
    return sorted(
        p.relative_to(base).as_posix() for p in base.rglob("*") if p.is_file()
    )
