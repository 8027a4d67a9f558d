"""Interactive prompt helpers built on InquirerPy.

Every prompt returns None (or False for confirmations) when the user skips it
or presses Ctrl-C; callers treat that as cancelling the current action. The
menu prompt is the exception: Ctrl-C there propagates so the menu can exit.
"""

from __future__ import annotations

import sys
from typing import Sequence

from InquirerPy import inquirer
from InquirerPy.base.control import Choice

from .exceptions import NoSelection, ValidationError
from .models import MenuAction


def _ensure_tty() -> None:
    if not sys.stdin.isatty():
        raise ValidationError(
            "Interactive mode requires a TTY. Use the subcommands to run non-interactively."
        )


def choose(message: str, items: Sequence[str]) -> str | None:
    """Type-to-filter picker over ``items``."""

    _ensure_tty()
    try:
        return inquirer.fuzzy(
            message=message,
            choices=list(items),
            mandatory=False,
            instruction="(type to search)",
        ).execute()
    except KeyboardInterrupt:
        return None


def select_action(actions: Sequence[MenuAction]) -> MenuAction | None:
    """Numbered menu; None when skipped. KeyboardInterrupt is not caught."""

    _ensure_tty()
    choices = [Choice(value=action, name=action.display) for action in actions]
    return inquirer.select(message="Select an action:", choices=choices, mandatory=False).execute()


def text_input(message: str) -> str | None:
    _ensure_tty()
    try:
        value = inquirer.text(message=message, mandatory=False).execute()
    except KeyboardInterrupt:
        return None
    return value


def confirm(message: str, default: bool = False) -> bool:
    _ensure_tty()
    try:
        return bool(inquirer.confirm(message=message, default=default).execute())
    except KeyboardInterrupt:
        return False


def require(selection: str | None) -> str:
    """Turn a cancelled prompt into NoSelection."""

    if selection is None:
        raise NoSelection()
    return selection


__all__ = ["choose", "select_action", "text_input", "confirm", "require"]
