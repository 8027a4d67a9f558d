"""Typer-based CLI for git-worktree-manager."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__, interactive
from .config import Settings, configure_logging, load_settings
from .exceptions import NoSelection, NotFound, ValidationError, WorktreeError
from .models import (
    CreatedWorktree,
    DeletionReport,
    FetchReport,
    MenuAction,
    RefreshOutcome,
    RefreshResult,
    RefreshSummary,
    Repository,
    WorktreeListing,
)
from .refresh import RefreshOrchestrator
from .worktrees import WorktreeService

app = typer.Typer(
    help="Manage git worktrees across a directory of repositories",
    add_completion=False,
    no_args_is_help=False,
)


@dataclass
class AppState:
    settings: Settings
    service: WorktreeService
    refresher: RefreshOrchestrator
    console: Console


def build_state(settings: Settings, console: Console | None = None) -> AppState:
    service = WorktreeService(settings)
    return AppState(
        settings=settings,
        service=service,
        refresher=RefreshOrchestrator(service.repositories, timeout=settings.git_timeout),
        console=console or Console(),
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"git-worktree-manager {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Directory whose direct children are the repositories (default: $GIT_WORKTREE_MANAGER_ROOT or ~/dev/office).",
        file_okay=False,
        dir_okay=True,
    ),
    suffix: str | None = typer.Option(
        None,
        "--suffix",
        help="Delimiter between repository and branch in worktree directory names (default: -wr-).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show git commands and debug information."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the git-worktree-manager version and exit.",
    ),
) -> None:
    _ = version  # handled via callback
    configure_logging(verbose)
    try:
        settings = load_settings(root, suffix)
    except WorktreeError as err:
        _fail(str(err))
    state = build_state(settings)
    ctx.obj = state
    if ctx.invoked_subcommand is None:
        try:
            run_menu(state)
        except ValidationError as err:
            _fail(str(err))


@app.command(help="List worktrees of every repository under the root")
def ls(ctx: typer.Context) -> None:
    state = _require_state(ctx)
    _run_command(state, lambda: render_listing(state.console, state.service.list_worktrees()))


@app.command(help="Pull or fetch main/master in every repository")
def refresh(ctx: typer.Context) -> None:
    state = _require_state(ctx)
    refresh_all(state)


@app.command(help="Fetch all branches of one repository")
def fetch(ctx: typer.Context, repo: str = typer.Argument(..., help="Repository directory name.")) -> None:
    state = _require_state(ctx)

    def _fetch() -> None:
        repository = _lookup_repository(state, repo)
        with state.console.status(f"Fetching all branches for {repository.name}…"):
            report = state.service.fetch_repository(repository)
        render_fetch(state.console, report)

    _run_command(state, _fetch)


@app.command(help="Create a worktree from an existing remote branch")
def add(
    ctx: typer.Context,
    repo: str = typer.Argument(..., help="Repository directory name."),
    branch: str = typer.Argument(..., help="Branch to check out from origin."),
) -> None:
    state = _require_state(ctx)

    def _add() -> None:
        repository = _lookup_repository(state, repo)
        with state.console.status("Creating worktree…"):
            created = state.service.create_from_existing_branch(repository, branch)
        render_created(state.console, created)

    _run_command(state, _add)


@app.command(help="Create a worktree with a new branch based on an origin branch")
def new(
    ctx: typer.Context,
    repo: str = typer.Argument(..., help="Repository directory name."),
    base: str = typer.Argument(..., help="Remote branch to start from."),
    name: str = typer.Argument(..., help="New branch name; sanitized before use."),
) -> None:
    state = _require_state(ctx)

    def _new() -> None:
        repository = _lookup_repository(state, repo)
        with state.console.status("Creating worktree with new branch…"):
            created = state.service.create_with_new_branch(repository, base, name)
        render_created(state.console, created)

    _run_command(state, _new)


@app.command(help="Delete a worktree directory")
def rm(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Worktree directory name under the root."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    state = _require_state(ctx)

    def _confirm(dir_name: str) -> bool:
        if yes:
            return True
        return typer.confirm(f"Delete worktree '{dir_name}'?", default=False)

    _run_command(state, lambda: render_deletion(state.console, state.service.delete_worktree(name, confirm=_confirm)))


def run_menu(state: AppState) -> None:
    """Show the menu until Exit is chosen or Ctrl-C is pressed at the prompt."""

    print_header(state.console)
    while True:
        try:
            action = interactive.select_action(list(MenuAction))
        except KeyboardInterrupt:
            action = MenuAction.EXIT
        state.console.print("")
        if action is None:
            continue
        if action is MenuAction.EXIT:
            state.console.print("[green]Goodbye![/green]")
            return
        run_action(state, action)


def run_action(state: AppState, action: MenuAction) -> None:
    """Run one menu action; errors are reported and the menu continues."""

    handler = ACTIONS[action]
    try:
        handler(state)
    except NoSelection:
        return
    except NotFound as err:
        if str(err):
            state.console.print(f"[yellow]{escape(str(err))}[/yellow]")
    except WorktreeError as err:
        state.console.print(f"[red]{escape(str(err))}[/red]")


def create_from_existing_action(state: AppState) -> None:
    repo = select_repository(state, "Select repository for worktree")
    with state.console.status("Fetching latest branches…"):
        state.service.refresh_remote_refs(repo)
    branch = select_branch(state, repo, "Select branch for worktree")
    with state.console.status("Creating worktree…"):
        created = state.service.create_from_existing_branch(repo, branch, refresh=False)
    render_created(state.console, created)


def create_new_branch_action(state: AppState) -> None:
    repo = select_repository(state, "Select repository for new branch")
    with state.console.status("Fetching latest branches…"):
        state.service.refresh_remote_refs(repo)
    base = select_branch(state, repo, "Select base branch")
    raw_name = interactive.require(interactive.text_input("Enter new branch name:"))
    if not raw_name.strip():
        raise ValidationError("Branch name cannot be empty")
    with state.console.status("Creating worktree with new branch…"):
        created = state.service.create_with_new_branch(repo, base, raw_name, refresh=False)
    render_created(state.console, created)


def delete_action(state: AppState) -> None:
    names = state.service.worktree_directories()
    if not names:
        raise NotFound("No worktrees found to delete")
    selected = interactive.require(interactive.choose("Select worktree to delete", names))
    report = state.service.delete_worktree(
        selected,
        confirm=lambda name: interactive.confirm(f"Delete '{name}'?"),
    )
    render_deletion(state.console, report)


def list_action(state: AppState) -> None:
    render_listing(state.console, state.service.list_worktrees())


def fetch_one_action(state: AppState) -> None:
    repo = select_repository(state, "Select repository to fetch")
    with state.console.status(f"Fetching all branches for {repo.name}…"):
        report = state.service.fetch_repository(repo)
    render_fetch(state.console, report)


def refresh_all(state: AppState) -> RefreshSummary:
    """Refresh every repository, printing each result as it arrives.

    Ctrl-C stops after the repository in progress; the tally of completed
    repositories is still printed.
    """

    console = state.console
    summary = RefreshSummary()
    console.print("[yellow]Refreshing all repositories...[/yellow]\n")
    try:
        with console.status("Refreshing…"):
            for result in state.refresher.iter_refresh():
                summary.add(result)
                render_refresh_result(console, result)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted, remaining repositories were not refreshed.[/yellow]")
    render_summary(console, summary)
    return summary


ACTIONS: dict[MenuAction, Callable[[AppState], object]] = {
    MenuAction.CREATE_FROM_EXISTING: create_from_existing_action,
    MenuAction.CREATE_NEW_BRANCH: create_new_branch_action,
    MenuAction.DELETE: delete_action,
    MenuAction.LIST: list_action,
    MenuAction.FETCH_ONE: fetch_one_action,
    MenuAction.REFRESH_ALL: refresh_all,
}


def select_repository(state: AppState, message: str) -> Repository:
    repos = state.service.repositories.list_repositories()
    if not repos:
        raise NotFound(f"No git repositories found in {state.settings.root}")
    lookup = {repo.name: repo for repo in repos}
    name = interactive.require(interactive.choose(message, list(lookup)))
    return lookup[name]


def select_branch(state: AppState, repo: Repository, message: str) -> str:
    branches = state.service.branches.list_branches(repo)
    if not branches:
        raise NotFound("No branches found")
    return interactive.require(interactive.choose(message, branches))


def print_header(console: Console) -> None:
    console.print("\n[cyan]========================================[/cyan]")
    console.print("[cyan]    Git Worktree Manager[/cyan]")
    console.print("[cyan]========================================[/cyan]\n")


def render_created(console: Console, created: CreatedWorktree) -> None:
    if created.was_sanitized:
        console.print(
            f"[yellow]Branch name sanitized: '{escape(created.requested)}' -> '{escape(created.branch)}'[/yellow]"
        )
        console.print(f"[green]Worktree created successfully with new branch '{escape(created.branch)}'![/green]")
    else:
        console.print("[green]Worktree created successfully![/green]")
    console.print(f"[green]Location: {escape(str(created.path))}[/green]")


def render_listing(console: Console, listing: WorktreeListing) -> None:
    if listing.is_empty:
        console.print("[blue]No worktrees found[/blue]")
        return
    for repo, lines in listing.registered:
        console.print(f"[cyan]{escape(repo.name)}:[/cyan]")
        for line in lines:
            console.print(f"  {escape(line)}")
        console.print("")
    console.print("[yellow]Worktree directories:[/yellow]")
    for name in listing.directories:
        console.print(f"  {escape(name)}")


def render_fetch(console: Console, report: FetchReport) -> None:
    console.print("[green]Done! Available branches:[/green]")
    for ref in report.refs:
        console.print(escape(ref))
    if report.remaining:
        console.print(f"[yellow]... and {report.remaining} more branches[/yellow]")


def render_deletion(console: Console, report: DeletionReport | None) -> None:
    if report is None:
        console.print("[blue]Cancelled[/blue]")
        return
    if report.git_error:
        console.print(f"[yellow]git could not deregister the worktree: {escape(report.git_error)}[/yellow]")
    console.print("[green]Worktree deleted successfully[/green]")


_TAGS = {
    RefreshOutcome.PULLED: "[green]\\[PULL][/green]",
    RefreshOutcome.FETCHED: "[blue]\\[FETCH][/blue]",
    RefreshOutcome.SKIPPED: "[yellow]\\[SKIP][/yellow]",
    RefreshOutcome.FAILED: "[red]\\[FAIL][/red]",
}


def render_refresh_result(console: Console, result: RefreshResult) -> None:
    reason = result.reason
    if result.outcome is RefreshOutcome.SKIPPED and result.default_branch:
        reason = f"{reason} on {result.default_branch}"
    console.print(f"{_TAGS[result.outcome]} {escape(result.repository.name)} - {escape(reason)}")


def render_summary(console: Console, summary: RefreshSummary) -> None:
    console.print("")
    console.print("[cyan]========================================[/cyan]")
    console.print(
        f"[green]Pulled: {summary.pulled}[/green] | [green]Fetched: {summary.fetched}[/green] | "
        f"[red]Failed: {summary.failed}[/red] | [yellow]Skipped: {summary.skipped}[/yellow]"
    )
    console.print("[cyan]========================================[/cyan]")


def _lookup_repository(state: AppState, name: str) -> Repository:
    repo = state.service.repositories.get(name)
    if repo is None:
        raise NotFound(f"Repository {name!r} not found in {state.settings.root}")
    return repo


def _run_command(state: AppState, action: Callable[[], object]) -> None:
    try:
        action()
    except NoSelection:
        raise typer.Exit(1)
    except WorktreeError as err:
        _fail(str(err))


def _require_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):  # pragma: no cover
        raise typer.Exit(1)
    return state


def _fail(message: str, code: int = 1) -> None:
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
