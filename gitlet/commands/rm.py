"""gitlet rm — unstage a file, and stop tracking it if HEAD tracks it."""
from __future__ import annotations

import logging
import pathlib
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from gitlet._repo import require_operands, require_repo
from gitlet.commands._runner import run_in_session
from gitlet.errors import NothingToRemoveError
from gitlet.repository import Repository
from gitlet.workdir import delete_file, tracked_name

logger = logging.getLogger(__name__)


async def _rm_async(
    *,
    root: pathlib.Path,
    session: AsyncSession,
    filename: str,
) -> bool:
    """Drop *filename*'s pending addition; if HEAD tracks it, stage its removal.

    A file HEAD tracks is also deleted from the working directory.

    Returns:
        ``True`` when a removal was staged.

    Raises:
        NothingToRemoveError: The file is neither staged nor tracked.
    """
    repo = await Repository.open(root, session)
    name = tracked_name(root, filename)
    if name is None:
        raise NothingToRemoveError(filename)
    head_manifest = await repo.head_manifest()

    tracked = name in head_manifest
    if name not in repo.index.added and not tracked:
        raise NothingToRemoveError(name)

    if tracked:
        repo.index.stage_removal(name)
        delete_file(root, name)
        logger.info("✅ Staged removal of %s", name)
    else:
        repo.index.unstage(name)
        logger.info("✅ Unstaged %s", name)

    await repo.flush()
    return tracked


def run_rm(operands: Sequence[str] | None = None) -> None:
    """Unstage a file and remove it from the working directory if tracked."""
    root = require_repo()
    (filename,) = require_operands(operands, 1)

    async def _core(session: AsyncSession) -> bool:
        return await _rm_async(root=root, session=session, filename=filename)

    run_in_session("rm", root, _core)
