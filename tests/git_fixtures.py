"""Throwaway git repositories for integration tests.

A sandbox holds bare "remote" repositories and a root directory with clones
of them, mirroring the layout the tool manages.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

GIT_AVAILABLE = shutil.which("git") is not None

_IDENTITY = [
    "-c",
    "user.name=Test User",
    "-c",
    "user.email=test@example.com",
    "-c",
    "commit.gpgsign=false",
    "-c",
    "init.defaultBranch=main",
]


def git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(
        ["git", *_IDENTITY, *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str | None = None) -> str:
    (repo / name).parent.mkdir(parents=True, exist_ok=True)
    (repo / name).write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-m", message or f"update {name}")
    return git(repo, "rev-parse", "HEAD")


class GitSandbox:
    def __init__(self, base: Path):
        self.base = base
        self.root = base / "office"
        self.root.mkdir()
        self._remotes = base / "remotes"
        self._remotes.mkdir()
        self._seeds: dict[str, Path] = {}
        self._pushes = 0

    def make_remote(
        self,
        name: str,
        *,
        default: str = "main",
        branches: tuple[str, ...] = (),
    ) -> Path:
        """Create a bare remote with one commit on ``default`` and on each branch."""

        bare = self._remotes / f"{name}.git"
        git(self._remotes, "init", "--bare", f"--initial-branch={default}", str(bare))
        seed = self.base / f"seed-{name}"
        git(self.base, "init", f"--initial-branch={default}", str(seed))
        git(seed, "remote", "add", "origin", str(bare))
        commit_file(seed, "README.md", f"# {name}\n", "Initial commit")
        git(seed, "push", "origin", default)
        for branch in branches:
            git(seed, "checkout", "-b", branch, default)
            commit_file(seed, f"{branch.replace('/', '_')}.txt", f"{branch}\n")
            git(seed, "push", "origin", branch)
            git(seed, "checkout", default)
        self._seeds[name] = seed
        return bare

    def clone(self, name: str) -> Path:
        target = self.root / name
        git(self.root, "clone", str(self._remotes / f"{name}.git"), name)
        return target

    def add_repo(self, name: str, **kwargs) -> Path:
        self.make_remote(name, **kwargs)
        return self.clone(name)

    def push_upstream_commit(self, name: str, branch: str = "main") -> str:
        """Advance ``branch`` on the remote, returning the new tip."""

        seed = self._seeds[name]
        self._pushes += 1
        git(seed, "checkout", branch)
        sha = commit_file(seed, "upstream.txt", f"upstream change {self._pushes} on {branch}\n")
        git(seed, "push", "origin", branch)
        return sha

    def remote_tip(self, name: str, branch: str) -> str:
        return git(self._remotes / f"{name}.git", "rev-parse", f"refs/heads/{branch}")
