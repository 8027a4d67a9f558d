"""Custom exception hierarchy for git-worktree-manager."""

from __future__ import annotations


class WorktreeError(Exception):
    """Base error for all custom exceptions."""


class ConfigError(WorktreeError):
    """Raised when a setting from the environment or CLI is unusable."""


class ValidationError(WorktreeError):
    """Raised when user input is invalid."""


class InvalidBranchName(ValidationError):
    """Raised when a branch name sanitizes to nothing."""

    def __init__(self, raw: str):
        super().__init__(f"Branch name is invalid after sanitization: {raw!r}")
        self.raw = raw


class AlreadyExists(WorktreeError):
    """Raised when the target worktree directory is already present."""

    def __init__(self, path):
        super().__init__(f"Worktree already exists at: {path}")
        self.path = path


class CollaboratorError(WorktreeError):
    """Raised when git cannot carry out a requested operation."""


class GitCommandError(CollaboratorError):
    """Raised when a git invocation fails."""

    def __init__(self, command: list[str], returncode: int, stderr: str | None = None):
        message = "Git command failed"
        if command:
            message = f"Git command failed: {' '.join(command)}"
        self.stderr = (stderr or "").strip()
        if self.stderr:
            message = f"{message}\n{self.stderr}"
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class NoSelection(WorktreeError):
    """Raised when the user cancels an interactive choice."""


class NotFound(WorktreeError):
    """Raised when there is nothing available to choose from."""


__all__ = [
    "WorktreeError",
    "ConfigError",
    "ValidationError",
    "InvalidBranchName",
    "AlreadyExists",
    "CollaboratorError",
    "GitCommandError",
    "NoSelection",
    "NotFound",
]
