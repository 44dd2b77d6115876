"""Gitlet CLI — Typer application root.

Entry point for the ``gitlet`` console script.  Every subcommand is a plain
``@cli.command()`` taking a variadic operand list, so the operand counts
(and the ``Incorrect operands.`` message) are enforced by the command
modules rather than by Click.
"""
from __future__ import annotations

import logging
from typing import Optional

import click
import typer
from typer.core import TyperGroup

from gitlet.commands.add import run_add
from gitlet.commands.branch import run_branch, run_rm_branch
from gitlet.commands.checkout import RAW_OPERANDS_KEY, RawOperandsCommand, run_checkout
from gitlet.commands.commit import run_commit
from gitlet.commands.find import run_find
from gitlet.commands.init import run_init
from gitlet.commands.log import run_global_log, run_log
from gitlet.commands.merge import run_merge
from gitlet.commands.reset import run_reset
from gitlet.commands.rm import run_rm
from gitlet.commands.status import run_status
from gitlet.config import settings
from gitlet.errors import ExitCode


class GitletGroup(TyperGroup):
    """Reports an unknown subcommand with the Gitlet wording."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[Optional[str], Optional[click.Command], list[str]]:
        name = args[0] if args else None
        if name and not name.startswith("-") and self.get_command(ctx, name) is None:
            typer.echo("No command with that name exists.")
            raise typer.Exit(code=ExitCode.USER_ERROR)
        return super().resolve_command(ctx, args)


cli = typer.Typer(
    name="gitlet",
    help="Gitlet — a tiny local version-control system.",
    cls=GitletGroup,
    add_completion=False,
)

_OPERANDS = typer.Argument(None, metavar="[OPERANDS]...")
_PASSTHROUGH = {"ignore_unknown_options": True, "allow_extra_args": True}


@cli.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        typer.echo("Please enter a command.")
        raise typer.Exit(code=ExitCode.USER_ERROR)


@cli.command("init", context_settings=_PASSTHROUGH)
def _init_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Create a new Gitlet repository in the current directory."""
    run_init(operands)


@cli.command("add", context_settings=_PASSTHROUGH)
def _add_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Stage a file for the next commit."""
    run_add(operands)


@cli.command("commit", context_settings=_PASSTHROUGH)
def _commit_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Record the staged changes as a new commit."""
    run_commit(operands)


@cli.command("rm", context_settings=_PASSTHROUGH)
def _rm_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Unstage a file and stop tracking it."""
    run_rm(operands)


@cli.command("log", context_settings=_PASSTHROUGH)
def _log_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Show the history of the current branch."""
    run_log(operands)


@cli.command("global-log", context_settings=_PASSTHROUGH)
def _global_log_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Show every commit ever made."""
    run_global_log(operands)


@cli.command("find", context_settings=_PASSTHROUGH)
def _find_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Print the ids of commits with the given message."""
    run_find(operands)


@cli.command("status", context_settings=_PASSTHROUGH)
def _status_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Show branches, staged files and working-directory changes."""
    run_status(operands)


# checkout is built with RawOperandsCommand: Click consumes the "--" that
# separates a commit id from a file name, and the three checkout forms are
# told apart by where that separator sits.
@cli.command("checkout", cls=RawOperandsCommand, context_settings=_PASSTHROUGH)
def _checkout_cmd(
    ctx: typer.Context,
    operands: Optional[list[str]] = _OPERANDS,
) -> None:
    """Restore a file from a commit, or switch to a branch."""
    run_checkout(ctx.meta.get(RAW_OPERANDS_KEY, operands))


@cli.command("branch", context_settings=_PASSTHROUGH)
def _branch_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Create a branch at the current commit."""
    run_branch(operands)


@cli.command("rm-branch", context_settings=_PASSTHROUGH)
def _rm_branch_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Delete a branch pointer."""
    run_rm_branch(operands)


@cli.command("reset", context_settings=_PASSTHROUGH)
def _reset_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Move the current branch to a commit and check it out."""
    run_reset(operands)


@cli.command("merge", context_settings=_PASSTHROUGH)
def _merge_cmd(operands: Optional[list[str]] = _OPERANDS) -> None:
    """Merge a branch into the current branch."""
    run_merge(operands)


if __name__ == "__main__":
    cli()
