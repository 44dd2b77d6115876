"""CLI contract tests — operand checks, messages and exit codes.

Every test runs the real Typer application through ``CliRunner`` against a
file-backed database in ``tmp_path``.  ``GITLET_REPO_ROOT`` points repo
discovery at ``tmp_path`` so no ``os.chdir`` is needed.
"""
from __future__ import annotations

import pathlib

import pytest
from click.testing import Result
from typer.testing import CliRunner

from gitlet.app import cli
from gitlet.errors import ExitCode

runner = CliRunner()


@pytest.fixture
def repo_env(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> pathlib.Path:
    monkeypatch.setenv("GITLET_REPO_ROOT", str(tmp_path))
    return tmp_path


def _run(*args: str) -> Result:
    return runner.invoke(cli, list(args))


def _init(root: pathlib.Path) -> None:
    result = _run("init")
    assert result.exit_code == 0, result.output
    assert (root / ".gitlet" / "gitlet.db").is_file()


def test_help_lists_every_command() -> None:
    result = _run("--help")
    assert result.exit_code == 0
    for name in (
        "init", "add", "commit", "rm", "log", "global-log", "find",
        "status", "checkout", "branch", "rm-branch", "reset", "merge",
    ):
        assert name in result.output


def test_no_command() -> None:
    result = _run()
    assert result.output == "Please enter a command.\n"
    assert result.exit_code == ExitCode.USER_ERROR


def test_unknown_command() -> None:
    result = _run("frobnicate")
    assert result.output == "No command with that name exists.\n"
    assert result.exit_code == ExitCode.USER_ERROR


@pytest.mark.parametrize("command", ["status", "log", "add", "merge", "checkout"])
def test_outside_repository(repo_env: pathlib.Path, command: str) -> None:
    result = _run(command, "x")
    assert result.output == "Not in an initialized Gitlet directory.\n"
    assert result.exit_code == ExitCode.REPO_NOT_FOUND


def test_init_twice(repo_env: pathlib.Path) -> None:
    _init(repo_env)
    result = _run("init")
    assert result.output == (
        "A Gitlet version-control system already exists in the current directory.\n"
    )
    assert result.exit_code == ExitCode.USER_ERROR


@pytest.mark.parametrize(
    "args",
    [
        ("add",),
        ("add", "a.txt", "b.txt"),
        ("commit",),
        ("log", "extra"),
        ("status", "extra"),
        ("find",),
        ("branch",),
        ("rm-branch",),
        ("reset",),
        ("merge",),
        ("checkout",),
        ("checkout", "a.txt", "b.txt"),
        ("checkout", "abc", "++", "a.txt"),
        ("checkout", "--"),
    ],
)
def test_incorrect_operands(repo_env: pathlib.Path, args: tuple[str, ...]) -> None:
    _init(repo_env)
    result = _run(*args)
    assert result.output == "Incorrect operands.\n"
    assert result.exit_code == ExitCode.USER_ERROR


def test_end_to_end_workflow(repo_env: pathlib.Path) -> None:
    """init → add → commit → edit → checkout -- file → branch → merge."""
    _init(repo_env)
    (repo_env / "a.txt").write_text("1")

    assert _run("add", "a.txt").exit_code == 0
    assert _run("commit", "first").exit_code == 0

    log = _run("log")
    assert log.exit_code == 0
    assert log.output.index("first") < log.output.index("initial commit")

    (repo_env / "a.txt").write_text("scratch")
    result = _run("checkout", "--", "a.txt")
    assert result.exit_code == 0, result.output
    assert (repo_env / "a.txt").read_text() == "1"

    first_id = _run("find", "first").output.strip()
    (repo_env / "a.txt").write_text("2")
    _run("add", "a.txt")
    _run("commit", "second")
    result = _run("checkout", first_id[:8], "--", "a.txt")
    assert result.exit_code == 0, result.output
    assert (repo_env / "a.txt").read_text() == "1"

    assert _run("branch", "other").exit_code == 0
    status = _run("status")
    assert "=== Branches ===\n*master\nother\n" in status.output
    assert "a.txt (modified)" in status.output

    result = _run("merge", "other")
    assert result.output == "Given branch is an ancestor of the current branch.\n"
    assert result.exit_code == 0

    global_log = _run("global-log").output
    assert global_log.count("===") == 3


def test_user_errors_echo_message_and_exit_1(repo_env: pathlib.Path) -> None:
    _init(repo_env)

    result = _run("commit", "nothing")
    assert result.output == "No changes added to the commit.\n"
    assert result.exit_code == ExitCode.USER_ERROR

    result = _run("rm", "ghost.txt")
    assert result.output == "No reason to remove the file.\n"

    result = _run("checkout", "nope")
    assert result.output == "No such branch exists.\n"

    result = _run("find", "no such message")
    assert result.output == "Found no commit with that message.\n"
    assert result.exit_code == 0


def test_failed_command_leaves_refs_untouched(repo_env: pathlib.Path) -> None:
    _init(repo_env)
    head_ref = repo_env / ".gitlet" / "refs" / "heads" / "master"
    before = head_ref.read_text()

    result = _run("rm-branch", "master")
    assert result.output == "Cannot remove the current branch.\n"
    assert head_ref.read_text() == before


def test_failed_init_removes_partial_layout(
    repo_env: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _broken_store(*args: object, **kwargs: object) -> None:
        raise RuntimeError("schema mismatch")

    monkeypatch.setattr("gitlet.commands.init.store_commit", _broken_store)
    result = _run("init")
    assert result.exit_code == ExitCode.INTERNAL_ERROR
    assert "gitlet init failed: schema mismatch" in result.output
    assert not (repo_env / ".gitlet").exists()

    monkeypatch.undo()
    monkeypatch.setenv("GITLET_REPO_ROOT", str(repo_env))
    _init(repo_env)


def test_add_rejects_path_outside_repository(repo_env: pathlib.Path) -> None:
    _init(repo_env)
    outside = repo_env.parent / f"{repo_env.name}-cli-outside.txt"
    outside.write_text("x")

    result = _run("add", f"../{outside.name}")
    assert result.output == "File does not exist.\n"
    assert result.exit_code == ExitCode.USER_ERROR
