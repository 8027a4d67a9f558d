"""Branch name sanitization and worktree directory naming."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .exceptions import ValidationError

DEFAULT_SUFFIX = "-wr-"

_WHITESPACE = re.compile(r"\s+")
_FORBIDDEN = re.compile(r"[~^:?*\[\\]")
_DOTS = re.compile(r"\.{2,}")
_HYPHENS = re.compile(r"-{2,}")
_SLASHES = re.compile(r"/{2,}")
_EDGE_CHARS = "-/."
_LOCK_SUFFIX = ".lock"


def _sanitize_once(name: str) -> str:
    name = name.strip()
    name = _WHITESPACE.sub("-", name)
    name = _FORBIDDEN.sub("", name).replace("@{", "")
    name = _DOTS.sub(".", name)
    name = _HYPHENS.sub("-", name)
    name = _SLASHES.sub("/", name)
    name = name.strip(_EDGE_CHARS)
    if name.endswith(_LOCK_SUFFIX):
        name = name[: -len(_LOCK_SUFFIX)]
    return name


def sanitize_branch_name(raw: str) -> str:
    """Turn arbitrary text into a branch name git accepts.

    Returns an empty string when nothing usable is left; callers must reject
    that. Removing ``.lock`` or ``@{`` can expose a new trailing separator or
    another removable sequence, so the pipeline is repeated until the name
    stops changing. Passes after the first only remove characters, which
    bounds the loop.
    """

    name = raw
    while True:
        cleaned = _sanitize_once(name)
        if cleaned == name:
            return cleaned
        name = cleaned


@dataclass(frozen=True)
class WorktreeNaming:
    """Maps (repository, branch) to a worktree directory name and back.

    The repository name is everything before the first occurrence of the
    suffix, so only the repository side must keep the suffix out of it.
    """

    suffix: str = DEFAULT_SUFFIX

    def __post_init__(self) -> None:
        validate_suffix(self.suffix)

    def worktree_dir_name(self, repo_name: str, branch: str) -> str:
        if not repo_name:
            raise ValidationError("Repository name cannot be empty.")
        # "x-wr" + "-wr-" would parse back as "x", so check the joined prefix too.
        if (repo_name + self.suffix).find(self.suffix) != len(repo_name):
            raise ValidationError(
                f"Repository name {repo_name!r} cannot be recovered from worktree names using suffix {self.suffix!r}."
            )
        if not branch:
            raise ValidationError("Branch name cannot be empty.")
        return f"{repo_name}{self.suffix}{branch.replace('/', '-')}"

    def repo_name_from_worktree_dir(self, dir_name: str) -> str:
        repo_name, found, _ = dir_name.partition(self.suffix)
        if not found or not repo_name:
            raise ValidationError(f"{dir_name!r} is not a worktree directory name.")
        return repo_name

    def is_worktree_dir(self, dir_name: str) -> bool:
        repo_name, found, _ = dir_name.partition(self.suffix)
        return bool(found and repo_name)


def validate_suffix(suffix: str) -> str:
    if not suffix:
        raise ValidationError("Worktree suffix cannot be empty.")
    if "/" in suffix or _WHITESPACE.search(suffix):
        raise ValidationError(f"Worktree suffix cannot contain '/' or whitespace: {suffix!r}")
    return suffix


__all__ = [
    "DEFAULT_SUFFIX",
    "sanitize_branch_name",
    "validate_suffix",
    "WorktreeNaming",
]
