"""High-level orchestration for worktree operations."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from . import git
from .catalog import BranchCatalog, RepositoryCatalog
from .config import Settings
from .exceptions import (
    AlreadyExists,
    CollaboratorError,
    GitCommandError,
    InvalidBranchName,
    NotFound,
    WorktreeError,
)
from .models import CreatedWorktree, DeletionReport, FetchReport, Repository, WorktreeListing
from .naming import WorktreeNaming, sanitize_branch_name

logger = logging.getLogger(__name__)

FETCH_PREVIEW_LIMIT = 20


@dataclass
class WorktreeService:
    settings: Settings
    naming: WorktreeNaming = field(init=False)
    repositories: RepositoryCatalog = field(init=False)
    branches: BranchCatalog = field(init=False)

    def __post_init__(self) -> None:
        self.naming = WorktreeNaming(self.settings.suffix)
        self.repositories = RepositoryCatalog(self.settings.root)
        self.branches = BranchCatalog(timeout=self.settings.git_timeout)

    @property
    def root(self) -> Path:
        return self.settings.root

    @property
    def timeout(self) -> float | None:
        return self.settings.git_timeout

    def target_path(self, repo: Repository, branch: str) -> Path:
        return self.root / self.naming.worktree_dir_name(repo.name, branch)

    def refresh_remote_refs(self, repo: Repository) -> None:
        try:
            git.fetch_all(repo.path, timeout=self.timeout)
        except GitCommandError as exc:
            logger.warning("Fetching %s failed, remote branches may be stale: %s", repo.name, exc)

    def create_from_existing_branch(
        self,
        repo: Repository,
        branch: str,
        *,
        refresh: bool = True,
    ) -> CreatedWorktree:
        """Check out ``origin/<branch>`` into a new worktree.

        A local branch with the same name is force-deleted first so the
        worktree always starts from the remote tip. Commits that only exist on
        that local branch are lost.
        """

        if refresh:
            self.refresh_remote_refs(repo)
        target = self.target_path(repo, branch)
        if target.exists():
            raise AlreadyExists(target)
        remote_ref = f"origin/{branch}"
        if not git.remote_branch_exists(repo.path, branch, timeout=self.timeout):
            raise CollaboratorError(f"Remote branch {remote_ref} does not exist in {repo.name}.")
        if git.branch_exists(repo.path, branch, timeout=self.timeout):
            logger.warning(
                "Deleting local branch '%s' in %s to recreate it from %s; local-only commits are discarded",
                branch,
                repo.name,
                remote_ref,
            )
            git.delete_branch(repo.path, branch, force=True, timeout=self.timeout)
        git.worktree_add_new(repo.path, target, branch, remote_ref, timeout=self.timeout)
        logger.info("Created worktree %s on branch %s", target, branch)
        return CreatedWorktree(path=target, branch=branch, requested=branch)

    def create_with_new_branch(
        self,
        repo: Repository,
        base_branch: str,
        raw_name: str,
        *,
        refresh: bool = True,
    ) -> CreatedWorktree:
        if refresh:
            self.refresh_remote_refs(repo)
        branch = sanitize_branch_name(raw_name)
        if not branch:
            raise InvalidBranchName(raw_name)
        if branch != raw_name:
            logger.info("Branch name sanitized: '%s' -> '%s'", raw_name, branch)
        target = self.target_path(repo, branch)
        if target.exists():
            raise AlreadyExists(target)
        git.worktree_add_new(repo.path, target, branch, f"origin/{base_branch}", timeout=self.timeout)
        logger.info("Created worktree %s on new branch %s from origin/%s", target, branch, base_branch)
        return CreatedWorktree(path=target, branch=branch, requested=raw_name)

    def list_worktrees(self) -> WorktreeListing:
        registered: list[tuple[Repository, list[str]]] = []
        for repo in self.repositories.list_repositories():
            try:
                lines = git.worktree_list(repo.path, timeout=self.timeout)
            except GitCommandError as exc:
                logger.warning("Could not list worktrees of %s: %s", repo.name, exc)
                continue
            # The first line is the primary checkout.
            if len(lines) > 1:
                registered.append((repo, lines))
        return WorktreeListing(registered=registered, directories=self.worktree_directories())

    def worktree_directories(self) -> list[str]:
        return [
            name
            for name in self.repositories.child_directories()
            if self.naming.is_worktree_dir(name) and not self.repositories.is_repository(name)
        ]

    def delete_worktree(
        self,
        dir_name: str,
        *,
        confirm: Callable[[str], bool],
    ) -> DeletionReport | None:
        """Remove a worktree directory, returning None when the user declines.

        Git is asked to deregister the worktree first. Whatever git reports,
        a directory left behind is then removed from disk.
        """

        # A bare name directly under the root, never a path.
        if Path(dir_name).name != dir_name:
            raise NotFound(f"{dir_name!r} is not a worktree directory under {self.root}.")
        if not self.naming.is_worktree_dir(dir_name) or self.repositories.is_repository(dir_name):
            raise NotFound(f"{dir_name!r} is not a worktree directory.")
        target = self.root / dir_name
        if not target.is_dir():
            raise NotFound(f"Worktree directory not found: {target}")
        if not confirm(dir_name):
            return None

        repo_name = self.naming.repo_name_from_worktree_dir(dir_name)
        repo_path = self.repositories.path_for(repo_name)
        repo_exists = self.repositories.is_repository(repo_name)
        deregistered, git_error = self._deregister(repo_path, target) if repo_exists else (False, None)

        removed_from_disk = False
        if target.exists():
            self._remove_directory(target)
            removed_from_disk = True
            if repo_exists and not deregistered:
                self._prune(repo_path)
        logger.info("Deleted worktree %s", target)
        return DeletionReport(
            path=target,
            repository=repo_name if repo_exists else None,
            deregistered=deregistered,
            removed_from_disk=removed_from_disk,
            git_error=git_error,
        )

    def fetch_repository(self, repo: Repository, *, limit: int = FETCH_PREVIEW_LIMIT) -> FetchReport:
        git.fetch_all(repo.path, timeout=self.timeout)
        refs = self.branches.list_refs(repo)
        return FetchReport(repository=repo, refs=refs[:limit], total=len(refs))

    def _deregister(self, repo_path: Path, target: Path) -> tuple[bool, str | None]:
        try:
            git.worktree_remove(repo_path, target, force=True, timeout=self.timeout)
        except GitCommandError as exc:
            logger.warning("git could not remove worktree %s, removing it from disk: %s", target, exc)
            return False, exc.stderr or str(exc)
        return True, None

    @staticmethod
    def _remove_directory(target: Path) -> None:
        try:
            shutil.rmtree(target)
        except OSError as exc:
            raise WorktreeError(f"Failed to remove {target}: {exc}") from exc

    def _prune(self, repo_path: Path) -> None:
        try:
            git.worktree_prune(repo_path, timeout=self.timeout)
        except GitCommandError as exc:
            logger.warning("git worktree prune failed in %s: %s", repo_path, exc)


__all__ = ["WorktreeService", "FETCH_PREVIEW_LIMIT"]
