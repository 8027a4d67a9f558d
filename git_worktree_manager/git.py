"""Thin wrappers around git CLI commands.

Every helper takes the repository path explicitly and runs git with it as the
working directory; the process working directory is never changed. ``timeout``
is the number of seconds before a command is abandoned, None waits forever.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Iterable

from .exceptions import GitCommandError

logger = logging.getLogger(__name__)


def run_git(
    args: Iterable[str],
    *,
    cwd: Path,
    raise_on_error: bool = True,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command and optionally raise on failure."""

    cmd = ["git", *args]
    logger.debug("Running %s in %s", " ".join(cmd), cwd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        # Missing git binary or a repository path that vanished.
        raise GitCommandError(cmd, 127, str(exc)) from exc
    except subprocess.TimeoutExpired as exc:
        raise GitCommandError(cmd, -1, f"timed out after {exc.timeout} seconds") from exc
    if raise_on_error and proc.returncode != 0:
        raise GitCommandError(cmd, proc.returncode, proc.stderr)
    return proc


def list_refs(path: Path, *, timeout: float | None = None) -> list[str]:
    """Full ref names of local branches and remote-tracking branches."""

    proc = run_git(
        ["for-each-ref", "--format=%(refname)", "refs/heads", "refs/remotes"],
        cwd=path,
        timeout=timeout,
    )
    return [line.strip() for line in proc.stdout.splitlines() if line.strip()]


def list_short_refs(path: Path, *, timeout: float | None = None) -> list[str]:
    proc = run_git(["branch", "-a", "--format=%(refname:short)"], cwd=path, timeout=timeout)
    return [line.strip() for line in proc.stdout.splitlines() if line.strip()]


def fetch_all(path: Path, prune: bool = True, *, timeout: float | None = None) -> None:
    args = ["fetch", "--all"]
    if prune:
        args.append("--prune")
    run_git(args, cwd=path, timeout=timeout)


def fetch_branch(path: Path, branch: str, remote: str = "origin", *, timeout: float | None = None) -> bool:
    proc = run_git(["fetch", remote, branch], cwd=path, raise_on_error=False, timeout=timeout)
    return proc.returncode == 0


def pull_ff_only(path: Path, branch: str, remote: str = "origin", *, timeout: float | None = None) -> bool:
    proc = run_git(["pull", "--ff-only", remote, branch], cwd=path, raise_on_error=False, timeout=timeout)
    return proc.returncode == 0


def ref_exists(path: Path, ref: str, *, timeout: float | None = None) -> bool:
    proc = run_git(["show-ref", "--verify", "--quiet", ref], cwd=path, raise_on_error=False, timeout=timeout)
    return proc.returncode == 0


def branch_exists(path: Path, branch: str, *, timeout: float | None = None) -> bool:
    return ref_exists(path, f"refs/heads/{branch}", timeout=timeout)


def remote_branch_exists(path: Path, branch: str, remote: str = "origin", *, timeout: float | None = None) -> bool:
    return ref_exists(path, f"refs/remotes/{remote}/{branch}", timeout=timeout)


def current_branch(path: Path, *, timeout: float | None = None) -> str:
    """Name of the checked-out branch, or an empty string on a detached HEAD."""

    proc = run_git(["branch", "--show-current"], cwd=path, timeout=timeout)
    return proc.stdout.strip()


def has_uncommitted_changes(path: Path, *, timeout: float | None = None) -> bool:
    unstaged = run_git(["diff", "--quiet"], cwd=path, raise_on_error=False, timeout=timeout)
    if unstaged.returncode != 0:
        return True
    staged = run_git(["diff", "--cached", "--quiet"], cwd=path, raise_on_error=False, timeout=timeout)
    return staged.returncode != 0


def delete_branch(path: Path, branch: str, force: bool = False, *, timeout: float | None = None) -> None:
    run_git(["branch", "-D" if force else "-d", branch], cwd=path, timeout=timeout)


def worktree_add_new(
    path: Path,
    target: Path,
    branch: str,
    start_point: str,
    *,
    timeout: float | None = None,
) -> None:
    run_git(["worktree", "add", "-b", branch, str(target), start_point], cwd=path, timeout=timeout)


def worktree_remove(path: Path, target: Path, force: bool = False, *, timeout: float | None = None) -> None:
    args = ["worktree", "remove"]
    if force:
        args.append("--force")
    args.append(str(target))
    run_git(args, cwd=path, timeout=timeout)


def worktree_prune(path: Path, *, timeout: float | None = None) -> None:
    run_git(["worktree", "prune"], cwd=path, timeout=timeout)


def worktree_list(path: Path, *, timeout: float | None = None) -> list[str]:
    proc = run_git(["worktree", "list"], cwd=path, timeout=timeout)
    return [line.rstrip() for line in proc.stdout.splitlines() if line.strip()]


__all__ = [
    "run_git",
    "list_refs",
    "list_short_refs",
    "fetch_all",
    "fetch_branch",
    "pull_ff_only",
    "ref_exists",
    "branch_exists",
    "remote_branch_exists",
    "current_branch",
    "has_uncommitted_changes",
    "delete_branch",
    "worktree_add_new",
    "worktree_remove",
    "worktree_prune",
    "worktree_list",
]
