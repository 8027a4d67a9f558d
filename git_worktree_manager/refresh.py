"""Bulk synchronization of every repository's default branch."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from . import git
from .catalog import RepositoryCatalog
from .exceptions import WorktreeError
from .models import RefreshOutcome, RefreshResult, RefreshSummary, Repository

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_CANDIDATES = ("main", "master")


@dataclass
class RefreshOrchestrator:
    catalog: RepositoryCatalog
    timeout: float | None = None

    def refresh_all(self) -> RefreshSummary:
        summary = RefreshSummary()
        for result in self.iter_refresh():
            summary.add(result)
        return summary

    def iter_refresh(self) -> Iterator[RefreshResult]:
        """Yield one result per repository, in catalog order."""

        for repo in self.catalog.list_repositories():
            yield self.refresh_repository(repo)

    def refresh_repository(self, repo: Repository) -> RefreshResult:
        try:
            return self._refresh(repo)
        except WorktreeError as exc:
            logger.debug("Refreshing %s failed", repo.name, exc_info=True)
            return RefreshResult(repo, RefreshOutcome.FAILED, str(exc).splitlines()[0])

    def _refresh(self, repo: Repository) -> RefreshResult:
        default = detect_default_branch(repo, timeout=self.timeout)
        if default is None:
            return RefreshResult(repo, RefreshOutcome.SKIPPED, "no main/master branch")

        current = git.current_branch(repo.path, timeout=self.timeout)
        if current == default:
            if git.has_uncommitted_changes(repo.path, timeout=self.timeout):
                return RefreshResult(repo, RefreshOutcome.SKIPPED, "uncommitted changes", default, current)
            if git.pull_ff_only(repo.path, default, timeout=self.timeout):
                return RefreshResult(repo, RefreshOutcome.PULLED, f"updated {default}", default, current)
            return RefreshResult(repo, RefreshOutcome.FAILED, "pull failed", default, current)

        if git.fetch_branch(repo.path, default, timeout=self.timeout):
            return RefreshResult(repo, RefreshOutcome.FETCHED, f"fetched {default}", default, current)
        return RefreshResult(repo, RefreshOutcome.FAILED, "fetch failed", default, current)


def detect_default_branch(repo: Repository, *, timeout: float | None = None) -> str | None:
    for candidate in DEFAULT_BRANCH_CANDIDATES:
        if git.remote_branch_exists(repo.path, candidate, timeout=timeout):
            return candidate
    return None


__all__ = ["RefreshOrchestrator", "detect_default_branch", "DEFAULT_BRANCH_CANDIDATES"]
