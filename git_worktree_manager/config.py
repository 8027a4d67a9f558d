"""Resolve runtime settings from CLI flags and environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ConfigError, ValidationError
from .naming import DEFAULT_SUFFIX, validate_suffix

ROOT_ENV = "GIT_WORKTREE_MANAGER_ROOT"
SUFFIX_ENV = "GIT_WORKTREE_MANAGER_SUFFIX"
TIMEOUT_ENV = "GIT_WORKTREE_MANAGER_GIT_TIMEOUT"
DEFAULT_ROOT = "~/dev/office"


@dataclass(frozen=True)
class Settings:
    """Root directory holding the clones and the worktree naming suffix."""

    root: Path
    suffix: str = DEFAULT_SUFFIX
    git_timeout: float | None = None


def load_settings(
    root_override: Path | None = None,
    suffix_override: str | None = None,
) -> Settings:
    root = resolve_root(root_override)
    suffix = suffix_override if suffix_override is not None else os.environ.get(SUFFIX_ENV, DEFAULT_SUFFIX)
    try:
        validate_suffix(suffix)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
    return Settings(root=root, suffix=suffix, git_timeout=_parse_timeout(os.environ.get(TIMEOUT_ENV)))


def resolve_root(root_override: Path | None) -> Path:
    """The root does not have to exist; an absent root simply holds no repositories."""

    if root_override is not None:
        return root_override.expanduser()
    raw = os.environ.get(ROOT_ENV) or DEFAULT_ROOT
    return Path(raw).expanduser()


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}.") from exc
    if value <= 0:
        raise ConfigError(f"{TIMEOUT_ENV} must be positive, got {raw!r}.")
    return value


def configure_logging(verbose: bool) -> None:
    # The console already reports progress; plain runs only surface warnings.
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


__all__ = [
    "ROOT_ENV",
    "SUFFIX_ENV",
    "TIMEOUT_ENV",
    "DEFAULT_ROOT",
    "Settings",
    "load_settings",
    "resolve_root",
    "configure_logging",
]
