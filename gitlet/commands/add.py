"""gitlet add — stage the current content of one file for the next commit."""
from __future__ import annotations

import logging
import pathlib
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import require_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.db import upsert_object
from gitlet.errors import WorkdirFileNotFoundError
from gitlet.object_store import put_blob
from gitlet.repository import Repository
from gitlet.snapshot import hash_bytes
from gitlet.workdir import tracked_name

logger = logging.getLogger(__name__)


async def _add_async(
    *,
    root: pathlib.Path,
    session: AsyncSession,
    filename: str,
) -> bool:
    """Stage *filename* for addition.

    A pending removal of the file is cancelled.  When the working copy is
    identical to the version HEAD tracks nothing is staged and any stale
    pending addition is dropped.

    Returns:
        ``True`` if the file is now staged for addition.

    Raises:
        WorkdirFileNotFoundError: The file is not in the working directory,
            or the name points outside it.
    """
    repo = await Repository.open(root, session)
    name = tracked_name(root, filename)
    if name is None or not (root / name).is_file():
        raise WorkdirFileNotFoundError(filename)
    path = root / name

    content = path.read_bytes()
    object_id = hash_bytes(content)
    head_manifest = await repo.head_manifest()

    if head_manifest.get(name) == object_id:
        repo.index.unstage(name)
        staged = False
        logger.debug("⚠️ %s matches HEAD, nothing staged", name)
    else:
        put_blob(root, content)
        await upsert_object(session, object_id, len(content))
        repo.index.stage_addition(name, object_id)
        staged = True
        logger.info("✅ Staged %s (%s)", name, object_id[:8])

    await repo.flush()
    return staged


def run_add(operands: Sequence[str] | None = None) -> None:
    """Add a copy of a file to the staging area."""
    root = require_repo()
    (filename,) = require_operands(operands, 1)

    async def _core(session: AsyncSession) -> bool:
        return await _add_async(root=root, session=session, filename=filename)

    run_in_session("add", root, _core)
