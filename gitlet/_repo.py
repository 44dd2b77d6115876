"""Repository detection and pre-flight guards for the Gitlet CLI.

Walking up the directory tree to locate a ``.gitlet/`` directory is the
single most-called internal primitive. Every subcommand except ``init``
uses it.  Keeping the semantics clear (``None`` on miss, never raises)
makes callers simpler and test isolation easier (``GITLET_REPO_ROOT``
env-var override).
"""
from __future__ import annotations

import logging
import os
import pathlib
from collections.abc import Sequence
from typing import NoReturn

import typer

from gitlet.config import settings
from gitlet.errors import BadOperandCountError, NotInitializedError

logger = logging.getLogger(__name__)


def gitlet_dir(root: pathlib.Path) -> pathlib.Path:
    """Return ``<root>/.gitlet`` (the metadata directory, may not exist yet)."""
    return root / settings.repo_dir_name


def find_repo_root(start: pathlib.Path | None = None) -> pathlib.Path | None:
    """Walk up from *start* (default ``Path.cwd()``) looking for ``.gitlet/``.

    Returns the first directory that contains ``.gitlet/``, or ``None`` if no
    such ancestor exists.  Never raises; callers handle a miss.

    The ``GITLET_REPO_ROOT`` environment variable overrides discovery
    entirely; set it in tests to avoid ``os.chdir`` calls.
    """
    if env_root := os.environ.get("GITLET_REPO_ROOT"):
        p = pathlib.Path(env_root).resolve()
        logger.debug("⚠️ GITLET_REPO_ROOT override active: %s", p)
        return p if gitlet_dir(p).is_dir() else None

    current = (start or pathlib.Path.cwd()).resolve()
    while True:
        if gitlet_dir(current).is_dir():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def require_repo(start: pathlib.Path | None = None) -> pathlib.Path:
    """Return the repo root or exit 2 with the standard error message.

    The error text echoes to stdout so that ``typer.testing.CliRunner``
    captures it in ``result.output``.
    """
    root = find_repo_root(start)
    if root is None:
        err = NotInitializedError()
        typer.echo(str(err))
        raise typer.Exit(code=err.exit_code)
    return root


def init_target(start: pathlib.Path | None = None) -> pathlib.Path:
    """Return the directory ``gitlet init`` should initialise.

    Honours ``GITLET_REPO_ROOT`` so tests can initialise a ``tmp_path``
    without changing the process working directory.
    """
    if env_root := os.environ.get("GITLET_REPO_ROOT"):
        return pathlib.Path(env_root).resolve()
    return (start or pathlib.Path.cwd()).resolve()


def reject_operands() -> NoReturn:
    """Exit 1 with ``Incorrect operands.``."""
    err = BadOperandCountError()
    typer.echo(str(err))
    raise typer.Exit(code=err.exit_code)


def require_operands(operands: Sequence[str] | None, count: int) -> list[str]:
    """Return *operands* as a list, or exit 1 with ``Incorrect operands.``."""
    ops = list(operands or [])
    if len(ops) != count:
        reject_operands()
    return ops
