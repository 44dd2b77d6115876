"""Shared async runner for the Gitlet subcommands."""
from __future__ import annotations

import asyncio
import logging
import pathlib
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from gitlet.db import open_session
from gitlet.errors import ExitCode, GitletError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_in_session(
    command: str,
    root: pathlib.Path,
    core: Callable[[AsyncSession], Awaitable[T]],
    *,
    ensure_schema: bool = False,
) -> T:
    """Run *core* inside one DB session and map failures to exit codes.

    :class:`GitletError` messages are echoed verbatim and exit with the
    error's code; the session is rolled back and nothing under ``.gitlet/``
    is rewritten.  Anything else is logged with its traceback and exits
    with ``INTERNAL_ERROR``.
    """

    async def _run() -> T:
        async with open_session(root, ensure_schema=ensure_schema) as session:
            return await core(session)

    try:
        return asyncio.run(_run())
    except typer.Exit:
        raise
    except GitletError as exc:
        typer.echo(str(exc))
        logger.info("⚠️ gitlet %s refused: %s", command, exc)
        raise typer.Exit(code=exc.exit_code)
    except Exception as exc:
        typer.echo(f"gitlet {command} failed: {exc}")
        logger.error("❌ gitlet %s error: %s", command, exc, exc_info=True)
        raise typer.Exit(code=ExitCode.INTERNAL_ERROR)
