"""Exit-code contract and exception types for the Gitlet CLI.

Every user-facing failure is a :class:`GitletError` subclass whose message
is the exact text printed to the user.  The service layer raises them at
the point of detection, before anything is persisted; the Typer callbacks
echo the message and exit with :attr:`GitletError.exit_code`.
"""
from __future__ import annotations

import enum


class ExitCode(enum.IntEnum):
    """Standardised CLI exit codes.

    0 — success
    1 — user error (bad arguments, invalid input)
    2 — repo-not-found / config invalid
    3 — server / internal error
    """

    SUCCESS = 0
    USER_ERROR = 1
    REPO_NOT_FOUND = 2
    INTERNAL_ERROR = 3


UNTRACKED_IN_THE_WAY = (
    "There is an untracked file in the way; delete it, or add and commit it first."
)


class GitletError(Exception):
    """Base exception for Gitlet CLI errors."""

    def __init__(self, message: str, exit_code: ExitCode = ExitCode.USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class NotInitializedError(GitletError):
    """Raised when the current directory is not a Gitlet repository."""

    def __init__(self, message: str = "Not in an initialized Gitlet directory.") -> None:
        super().__init__(message, exit_code=ExitCode.REPO_NOT_FOUND)


class AlreadyInitializedError(GitletError):
    def __init__(self) -> None:
        super().__init__(
            "A Gitlet version-control system already exists in the current directory."
        )


class BadOperandCountError(GitletError):
    def __init__(self) -> None:
        super().__init__("Incorrect operands.")


class WorkdirFileNotFoundError(GitletError):
    """``add`` was given a name that is not present in the working directory."""

    def __init__(self, filename: str) -> None:
        super().__init__("File does not exist.")
        self.filename = filename


class NothingStagedError(GitletError):
    def __init__(self) -> None:
        super().__init__("No changes added to the commit.")


class EmptyCommitMessageError(GitletError):
    def __init__(self) -> None:
        super().__init__("Please enter a commit message.")


class NothingToRemoveError(GitletError):
    def __init__(self, filename: str) -> None:
        super().__init__("No reason to remove the file.")
        self.filename = filename


class NoCommitWithIdError(GitletError):
    """A commit id prefix matched no stored commit, or more than one."""

    def __init__(self, commit_ref: str) -> None:
        super().__init__("No commit with that id exists.")
        self.commit_ref = commit_ref


class FileNotInCommitError(GitletError):
    def __init__(self, filename: str) -> None:
        super().__init__("File does not exist in that commit.")
        self.filename = filename


class NoSuchBranchError(GitletError):
    """The named branch has no pointer under ``refs/heads/``.

    ``checkout`` and ``rm-branch``/``merge`` historically word this
    differently; callers pass the wording they need.
    """

    def __init__(
        self, branch: str, message: str = "A branch with that name does not exist."
    ) -> None:
        super().__init__(message)
        self.branch = branch


class BranchAlreadyExistsError(GitletError):
    def __init__(self, branch: str) -> None:
        super().__init__("A branch with that name already exists.")
        self.branch = branch


class InvalidBranchNameError(GitletError):
    def __init__(self, branch: str) -> None:
        super().__init__(
            f"Invalid branch name '{branch}'. "
            "Use letters, digits, hyphens, underscores, dots, or forward slashes."
        )
        self.branch = branch


class CannotRemoveCurrentBranchError(GitletError):
    def __init__(self, branch: str) -> None:
        super().__init__("Cannot remove the current branch.")
        self.branch = branch


class AlreadyOnBranchError(GitletError):
    def __init__(self, branch: str) -> None:
        super().__init__("No need to checkout the current branch.")
        self.branch = branch


class UntrackedFileConflictError(GitletError):
    """An overwrite would clobber a file the current commit does not track."""

    def __init__(self, filename: str) -> None:
        super().__init__(UNTRACKED_IN_THE_WAY)
        self.filename = filename


class SelfMergeError(GitletError):
    def __init__(self, branch: str) -> None:
        super().__init__("Cannot merge a branch with itself.")
        self.branch = branch


class UncommittedChangesError(GitletError):
    def __init__(self) -> None:
        super().__init__("You have uncommitted changes.")


class ObjectNotFoundError(GitletError):
    """Raised when blob content is missing from ``.gitlet/objects/``.

    Attributes:
        object_id: The missing content-addressed object SHA.
    """

    def __init__(self, object_id: str) -> None:
        super().__init__(
            f"Object {object_id[:8]} not found in .gitlet/objects/.",
            exit_code=ExitCode.INTERNAL_ERROR,
        )
        self.object_id = object_id
