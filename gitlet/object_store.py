"""Blob storage under ``.gitlet/objects/``.

Every command that reads or writes file content (``add``, ``checkout``,
``reset``, ``merge``) goes through these helpers; none builds object paths
itself.

Blobs are keyed by the SHA-256 of their bytes and sharded on the first two
hex digits, the way Git lays out loose objects::

    .gitlet/objects/3f/1c9a...   (62 more hex digits)

Stores are append-only.  Writing a blob that is already present does
nothing, and nothing is ever removed.
"""
from __future__ import annotations

import logging
import pathlib
import shutil

from gitlet._repo import gitlet_dir
from gitlet.errors import ObjectNotFoundError
from gitlet.snapshot import hash_bytes

logger = logging.getLogger(__name__)


def objects_dir(root: pathlib.Path) -> pathlib.Path:
    return gitlet_dir(root) / "objects"


def object_path(root: pathlib.Path, object_id: str) -> pathlib.Path:
    """Return where blob *object_id* lives (the file may not exist yet)."""
    return objects_dir(root) / object_id[:2] / object_id[2:]


def has_object(root: pathlib.Path, object_id: str) -> bool:
    return object_path(root, object_id).is_file()


def write_object(root: pathlib.Path, object_id: str, content: bytes) -> bool:
    """Store *content* as *object_id*; return ``False`` if it was already there."""
    if has_object(root, object_id):
        logger.debug("⚠️ Blob %s present, not rewritten", object_id[:8])
        return False
    target = object_path(root, object_id)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    logger.debug("✅ Wrote blob %s (%d bytes)", object_id[:8], len(content))
    return True


def put_blob(root: pathlib.Path, content: bytes) -> str:
    """Store *content* and return its blob id.  Idempotent."""
    object_id = hash_bytes(content)
    write_object(root, object_id, content)
    return object_id


def read_object(root: pathlib.Path, object_id: str) -> bytes | None:
    """Return the bytes of *object_id*, or ``None`` if the store lacks it."""
    source = object_path(root, object_id)
    if not source.is_file():
        return None
    return source.read_bytes()


def get_blob(root: pathlib.Path, object_id: str) -> bytes:
    """Return the bytes of *object_id*.

    Raises:
        ObjectNotFoundError: The blob is not in the store.
    """
    content = read_object(root, object_id)
    if content is None:
        raise ObjectNotFoundError(object_id)
    return content


def restore_object(root: pathlib.Path, object_id: str, dest: pathlib.Path) -> None:
    """Copy blob *object_id* to *dest*, creating parent directories.

    The copy streams from disk; the blob is never loaded whole.

    Raises:
        ObjectNotFoundError: The blob is not in the store.
    """
    source = object_path(root, object_id)
    if not source.is_file():
        raise ObjectNotFoundError(object_id)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
    logger.debug("✅ Copied blob %s to %s", object_id[:8], dest)
