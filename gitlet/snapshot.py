"""Content fingerprinting and working-directory scanning.

All functions here are side-effect-free (no DB, no writes).  They are kept
separate so they can be unit-tested without a database.

ID derivation contract (deterministic, no random/UUID components):

    object_id   = sha256(file_bytes).hexdigest()
    snapshot_id = sha256("|".join(sorted(f"{path}:{oid}" for path, oid in manifest.items()))).hexdigest()
    commit_id   = sha256(canonical_json({
                    "parent": parent_id, "parent2": step_parent_id,
                    "message": message, "committed_at": committed_at_iso,
                    "branch": branch, "snapshot": snapshot_id,
                  })).hexdigest()

``canonical_json`` is ``json.dumps`` with sorted keys and no whitespace, so
the commit fingerprint depends on nothing but those six fields.
"""
from __future__ import annotations

import hashlib
import json
import pathlib
import posixpath

from gitlet.config import settings


def hash_bytes(content: bytes) -> str:
    """Return the sha256 hex digest of *content* — the blob's ``object_id``."""
    return hashlib.sha256(content).hexdigest()


def hash_file(path: pathlib.Path) -> str:
    """Return the sha256 hex digest of a file's raw bytes.

    Reading in chunks keeps memory usage constant regardless of file size.
    """
    h = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def normalize_path(name: str) -> str | None:
    """Return *name* as a POSIX path relative to the repository root.

    ``./a.txt``, ``a.txt`` and ``d/../a.txt`` all name the same tracked file.
    Returns ``None`` for names that cannot be tracked: empty, absolute,
    escaping the root with ``..``, or inside the metadata directory.
    """
    posix = name.replace("\\", "/")
    if not posix or posixpath.isabs(posix):
        return None
    norm = posixpath.normpath(posix)
    head = norm.split("/", 1)[0]
    if norm == "." or head in ("..", settings.repo_dir_name):
        return None
    return norm


def list_workdir_files(root: pathlib.Path) -> list[str]:
    """Return every plain file under *root* as sorted POSIX relative paths.

    Everything below the metadata directory (``.gitlet/``) is excluded.
    Dotfiles elsewhere are listed like any other file.  Symlinks are skipped.
    """
    files: list[str] = []
    for file_path in sorted(root.rglob("*")):
        rel = file_path.relative_to(root)
        if rel.parts[0] == settings.repo_dir_name:
            continue
        if file_path.is_symlink() or not file_path.is_file():
            continue
        files.append(rel.as_posix())
    return files


def walk_workdir(root: pathlib.Path) -> dict[str, str]:
    """Walk *root* recursively and return ``{rel_path: object_id}``."""
    return {rel: hash_file(root / rel) for rel in list_workdir_files(root)}


def compute_snapshot_id(manifest: dict[str, str]) -> str:
    """Return sha256 of the sorted ``path:object_id`` pairs.

    Sorting ensures two identical trees always produce the same snapshot_id,
    regardless of insertion order.
    """
    parts = sorted(f"{path}:{oid}" for path, oid in manifest.items())
    payload = "|".join(parts).encode()
    return hashlib.sha256(payload).hexdigest()


def commit_payload(
    *,
    parent_id: str | None,
    parent2_id: str | None,
    message: str,
    committed_at_iso: str,
    branch: str,
    snapshot_id: str,
) -> bytes:
    """Return the canonical serialized form of a commit's identifying fields."""
    fields = {
        "branch": branch,
        "committed_at": committed_at_iso,
        "message": message,
        "parent": parent_id,
        "parent2": parent2_id,
        "snapshot": snapshot_id,
    }
    return json.dumps(fields, sort_keys=True, separators=(",", ":")).encode()


def compute_commit_id(
    *,
    parent_id: str | None,
    parent2_id: str | None,
    message: str,
    committed_at_iso: str,
    branch: str,
    snapshot_id: str,
) -> str:
    """Return sha256 of the commit's canonical payload.

    Given the same arguments on two machines the result is identical.
    """
    payload = commit_payload(
        parent_id=parent_id,
        parent2_id=parent2_id,
        message=message,
        committed_at_iso=committed_at_iso,
        branch=branch,
        snapshot_id=snapshot_id,
    )
    return hashlib.sha256(payload).hexdigest()
