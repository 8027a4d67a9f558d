"""Discovery of repositories under the root and of their branches."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from . import git
from .models import Repository

logger = logging.getLogger(__name__)

GIT_DIR = ".git"


@dataclass
class RepositoryCatalog:
    root: Path

    def list_repositories(self) -> list[Repository]:
        """Repositories directly under the root, most recently touched first."""

        repos: list[Repository] = []
        for child in self._children():
            git_dir = child / GIT_DIR
            # Linked worktrees carry a .git file, only real clones have a directory.
            if not git_dir.is_dir():
                continue
            try:
                mtime = git_dir.stat().st_mtime
            except OSError as exc:
                logger.debug("Skipping %s: %s", child, exc)
                continue
            repos.append(Repository(name=child.name, path=child, last_modified=mtime))
        return sorted(repos, key=lambda repo: (-repo.last_modified, repo.name))

    def get(self, name: str) -> Repository | None:
        for repo in self.list_repositories():
            if repo.name == name:
                return repo
        return None

    def path_for(self, name: str) -> Path:
        return self.root / name

    def child_directories(self) -> list[str]:
        return sorted(child.name for child in self._children())

    def is_repository(self, name: str) -> bool:
        return (self.path_for(name) / GIT_DIR).is_dir()

    def _children(self) -> list[Path]:
        if not self.root.is_dir():
            logger.debug("Root directory %s does not exist", self.root)
            return []
        try:
            entries = list(self.root.iterdir())
        except OSError as exc:
            logger.debug("Cannot read root directory %s: %s", self.root, exc)
            return []
        return [entry for entry in entries if entry.is_dir() and not entry.name.startswith(".")]


@dataclass
class BranchCatalog:
    """Branch names of a repository, local and remote folded together."""

    timeout: float | None = None

    def list_branches(self, repo: Repository) -> list[str]:
        names = set()
        for ref in git.list_refs(repo.path, timeout=self.timeout):
            name = normalize_branch_name(ref)
            if name and name != "HEAD":
                names.add(name)
        return sorted(names)

    def list_refs(self, repo: Repository) -> list[str]:
        return git.list_short_refs(repo.path, timeout=self.timeout)


def normalize_branch_name(ref: str) -> str:
    if ref.startswith("refs/heads/"):
        return ref[len("refs/heads/") :]
    if ref.startswith("refs/remotes/"):
        # refs/remotes/<remote>/<branch>
        parts = ref.split("/", 3)
        return parts[3] if len(parts) == 4 else ""
    return ref


__all__ = ["GIT_DIR", "RepositoryCatalog", "BranchCatalog", "normalize_branch_name"]
