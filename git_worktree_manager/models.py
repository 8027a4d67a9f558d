"""Dataclasses and enums shared across modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class Repository:
    """A clone discovered directly under the root directory."""

    name: str
    path: Path
    last_modified: float = 0.0


@dataclass(frozen=True)
class CreatedWorktree:
    path: Path
    branch: str
    requested: str

    @property
    def was_sanitized(self) -> bool:
        return self.branch != self.requested


@dataclass(frozen=True)
class WorktreeListing:
    """Worktrees registered with git plus worktree-looking directories on disk."""

    registered: list[tuple[Repository, list[str]]] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.registered and not self.directories


@dataclass(frozen=True)
class DeletionReport:
    """What each phase of a worktree deletion did."""

    path: Path
    repository: str | None
    deregistered: bool
    removed_from_disk: bool
    git_error: str | None = None


@dataclass(frozen=True)
class FetchReport:
    repository: Repository
    refs: list[str]
    total: int

    @property
    def remaining(self) -> int:
        return max(self.total - len(self.refs), 0)


class RefreshOutcome(str, Enum):
    PULLED = "pulled"
    FETCHED = "fetched"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RefreshResult:
    repository: Repository
    outcome: RefreshOutcome
    reason: str
    default_branch: str | None = None
    current_branch: str | None = None


@dataclass
class RefreshSummary:
    """Per-repository results of a bulk refresh with running counts."""

    results: list[RefreshResult] = field(default_factory=list)

    def add(self, result: RefreshResult) -> None:
        self.results.append(result)

    def count(self, outcome: RefreshOutcome) -> int:
        return sum(1 for result in self.results if result.outcome is outcome)

    @property
    def pulled(self) -> int:
        return self.count(RefreshOutcome.PULLED)

    @property
    def fetched(self) -> int:
        return self.count(RefreshOutcome.FETCHED)

    @property
    def failed(self) -> int:
        return self.count(RefreshOutcome.FAILED)

    @property
    def skipped(self) -> int:
        return self.count(RefreshOutcome.SKIPPED)

    def as_dict(self) -> dict[str, int]:
        return {
            "pulled": self.pulled,
            "fetched": self.fetched,
            "failed": self.failed,
            "skipped": self.skipped,
        }


class MenuAction(Enum):
    CREATE_FROM_EXISTING = (1, "Create worktree from existing branch")
    CREATE_NEW_BRANCH = (2, "Create worktree with new branch")
    DELETE = (3, "Delete worktree")
    LIST = (4, "List all worktrees")
    FETCH_ONE = (5, "Fetch all branches for a repo")
    REFRESH_ALL = (6, "Refresh all repos (pull main/master)")
    EXIT = (7, "Exit")

    @property
    def number(self) -> int:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]

    @property
    def display(self) -> str:
        return f"{self.number}) {self.label}"


__all__ = [
    "Repository",
    "CreatedWorktree",
    "WorktreeListing",
    "DeletionReport",
    "FetchReport",
    "RefreshOutcome",
    "RefreshResult",
    "RefreshSummary",
    "MenuAction",
]
