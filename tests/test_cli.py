"""Tests for the CLI commands and the menu action handling."""

from __future__ import annotations

import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from git_fixtures import GIT_AVAILABLE, GitSandbox
from rich.console import Console
from typer.testing import CliRunner

from git_worktree_manager import cli
from git_worktree_manager.config import Settings
from git_worktree_manager.exceptions import CollaboratorError, NoSelection, NotFound
from git_worktree_manager.models import MenuAction, RefreshOutcome, RefreshResult, Repository


class CliCommandTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.runner = CliRunner()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def invoke(self, *args: str):
        return self.runner.invoke(cli.app, ["--root", str(self.root), *args])

    def test_ls_with_nothing_to_show(self) -> None:
        result = self.invoke("ls")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("No worktrees found", result.output)

    def test_ls_missing_root_is_not_an_error(self) -> None:
        result = self.runner.invoke(cli.app, ["--root", str(self.root / "nope"), "ls"])
        self.assertEqual(result.exit_code, 0, result.output)

    def test_rm_removes_orphaned_worktree_directory(self) -> None:
        orphan = self.root / "gone-wr-main"
        orphan.mkdir()

        result = self.invoke("rm", "gone-wr-main", "--yes")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Worktree deleted successfully", result.output)
        self.assertFalse(orphan.exists())

    def test_rm_declined_keeps_directory(self) -> None:
        orphan = self.root / "gone-wr-main"
        orphan.mkdir()

        result = self.runner.invoke(cli.app, ["--root", str(self.root), "rm", "gone-wr-main"], input="n\n")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Cancelled", result.output)
        self.assertTrue(orphan.exists())

    def test_rm_refuses_paths_outside_the_root(self) -> None:
        office = self.root / "office"
        office.mkdir()
        victim = self.root / "victim-wr-data"
        victim.mkdir()

        for name in ("../victim-wr-data", str(victim)):
            with self.subTest(name=name):
                result = self.runner.invoke(cli.app, ["--root", str(office), "rm", name, "--yes"])
                self.assertEqual(result.exit_code, 1, result.output)
                self.assertTrue(victim.exists())

    def test_rm_unknown_worktree_fails(self) -> None:
        result = self.invoke("rm", "app-wr-missing", "--yes")
        self.assertEqual(result.exit_code, 1)

    def test_unknown_repository_fails(self) -> None:
        result = self.invoke("add", "missing", "main")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("not found", result.output)

    def test_invalid_suffix_is_rejected(self) -> None:
        result = self.invoke("--suffix", "a/b", "ls")
        self.assertEqual(result.exit_code, 1)

    def test_version(self) -> None:
        result = self.runner.invoke(cli.app, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("git-worktree-manager", result.output)


@unittest.skipUnless(GIT_AVAILABLE, "git is not installed")
class CliGitTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.sandbox = GitSandbox(Path(self._tmp.name))
        self.sandbox.add_repo("app", branches=("feature/login",))
        self.runner = CliRunner()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def invoke(self, *args: str):
        return self.runner.invoke(cli.app, ["--root", str(self.sandbox.root), *args])

    def test_refresh_prints_tally(self) -> None:
        self.sandbox.push_upstream_commit("app")

        result = self.invoke("refresh")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("[PULL]", result.output)
        self.assertIn("Pulled: 1", result.output)
        self.assertIn("Skipped: 0", result.output)

    def test_new_reports_sanitized_name(self) -> None:
        result = self.invoke("new", "app", "main", "fix: the  thing")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("fix-the-thing", result.output)
        self.assertTrue((self.sandbox.root / "app-wr-fix-the-thing").is_dir())

    def test_new_rejects_unusable_name(self) -> None:
        result = self.invoke("new", "app", "main", "...")

        self.assertEqual(result.exit_code, 1)
        self.assertEqual(
            sorted(path.name for path in self.sandbox.root.iterdir()),
            ["app"],
        )

    def test_add_then_ls(self) -> None:
        created = self.invoke("add", "app", "feature/login")
        self.assertEqual(created.exit_code, 0, created.output)

        listed = self.invoke("ls")

        self.assertIn("app-wr-feature-login", listed.output)

    def test_fetch(self) -> None:
        result = self.invoke("fetch", "app")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("origin/feature/login", result.output)


class MenuActionTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.output = io.StringIO()
        self.state = cli.build_state(Settings(root=self.root), Console(file=self.output, width=200))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run_with(self, action: MenuAction, handler) -> str:
        with mock.patch.dict(cli.ACTIONS, {action: handler}):
            cli.run_action(self.state, action)
        return self.output.getvalue()

    def test_every_action_but_exit_has_a_handler(self) -> None:
        self.assertEqual(set(cli.ACTIONS), set(MenuAction) - {MenuAction.EXIT})

    def test_menu_labels_are_numbered(self) -> None:
        self.assertEqual(
            [action.display for action in MenuAction][:2],
            ["1) Create worktree from existing branch", "2) Create worktree with new branch"],
        )

    def test_cancelled_selection_is_silent(self) -> None:
        def cancelled(state):
            raise NoSelection()

        self.assertEqual(self._run_with(MenuAction.LIST, cancelled), "")

    def test_not_found_is_a_notice(self) -> None:
        def nothing(state):
            raise NotFound("No worktrees found to delete")

        self.assertIn("No worktrees found to delete", self._run_with(MenuAction.DELETE, nothing))

    def test_failures_are_reported_and_do_not_escape(self) -> None:
        def broken(state):
            raise CollaboratorError("Remote branch origin/x does not exist in app.")

        self.assertIn("origin/x does not exist", self._run_with(MenuAction.CREATE_FROM_EXISTING, broken))

    def _menu_prompt(self, *answers) -> mock.Mock:
        prompt = mock.Mock()
        prompt.execute.side_effect = list(answers)
        for patcher in (
            mock.patch.object(cli.interactive, "_ensure_tty"),
            mock.patch.object(cli.interactive.inquirer, "select", return_value=prompt),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)
        return prompt

    def test_ctrl_c_at_menu_exits(self) -> None:
        prompt = self._menu_prompt(KeyboardInterrupt())

        cli.run_menu(self.state)

        prompt.execute.assert_called_once()
        self.assertIn("Goodbye!", self.output.getvalue())

    def test_skipped_menu_prompt_shows_menu_again(self) -> None:
        prompt = self._menu_prompt(None, MenuAction.EXIT)

        cli.run_menu(self.state)

        self.assertEqual(prompt.execute.call_count, 2)
        self.assertIn("Goodbye!", self.output.getvalue())

    def test_refresh_lines_are_tagged_by_outcome(self) -> None:
        repo = Repository(name="app", path=self.root / "app")
        for outcome, reason, tag in (
            (RefreshOutcome.PULLED, "updated main", "[PULL]"),
            (RefreshOutcome.FETCHED, "fetched main", "[FETCH]"),
            (RefreshOutcome.FAILED, "pull failed", "[FAIL]"),
        ):
            cli.render_refresh_result(self.state.console, RefreshResult(repo, outcome, reason, "main", "main"))
            with self.subTest(outcome=outcome):
                self.assertIn(f"{tag} app - {reason}", self.output.getvalue())

    def test_no_repositories_is_not_found(self) -> None:
        with self.assertRaises(NotFound):
            cli.select_repository(self.state, "Select repository")

    def test_cancelling_delete_changes_nothing(self) -> None:
        target = self.root / "app-wr-feature"
        target.mkdir()
        with mock.patch.object(cli.interactive, "choose", return_value=None) as choose:
            cli.run_action(self.state, MenuAction.DELETE)
        choose.assert_called_once()
        self.assertTrue(target.exists())

    def test_declining_delete_changes_nothing(self) -> None:
        target = self.root / "app-wr-feature"
        target.mkdir()
        with mock.patch.object(cli.interactive, "choose", return_value="app-wr-feature"), mock.patch.object(
            cli.interactive, "confirm", return_value=False
        ):
            cli.run_action(self.state, MenuAction.DELETE)
        self.assertTrue(target.exists())
        self.assertIn("Cancelled", self.output.getvalue())


if __name__ == "__main__":
    unittest.main()
