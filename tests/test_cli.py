import re
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from taskboard import __version__
from taskboard.interfaces.cli import app

runner = CliRunner()


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        home = Path(self._tmp.name)
        self.env = {
            "TASKBOARD_HOME": str(home),
            "TASKBOARD_DATA_DIR": str(home / "data"),
            "TASKBOARD_USER": None,
        }
        self.invoke("user", "add", "admin", "--name", "Ada", "--role", "ADMIN")
        self.invoke("user", "add", "bob", "--name", "Bob")

    def invoke(self, *args, expect=0):
        result = runner.invoke(app, list(args), env=self.env)
        self.assertEqual(result.exit_code, expect, result.output)
        return result.output

    def created_id(self, output: str) -> str:
        match = re.search(r"Created \w+: (\S+)", output)
        self.assertIsNotNone(match, output)
        return match.group(1)

    def new_project(self) -> str:
        output = self.invoke(
            "project", "create",
            "--name", "Portal",
            "--start", "2024-01-01",
            "--end", "2024-06-30",
            "--member", "bob",
            "--user", "admin",
        )
        return self.created_id(output)


class TestBasics(CliTestCase):
    def test_version(self):
        self.assertIn(__version__, self.invoke("--version"))

    def test_acting_user_is_required(self):
        output = self.invoke(
            "project", "create", "--name", "P", "--start", "2024-01-01", "--end", "2024-02-01",
            expect=1,
        )
        self.assertIn("No acting user", output)

    def test_user_list(self):
        output = self.invoke("user", "list")
        self.assertIn("[admin] Ada (ADMIN)", output)


class TestProjectCommands(CliTestCase):
    def test_create_list_show(self):
        pid = self.new_project()
        self.assertIn(pid, self.invoke("project", "list"))
        shown = self.invoke("project", "show", pid)
        self.assertIn("Portal", shown)
        self.assertIn("Team:     bob", shown)

    def test_hold_then_rename_is_ignored(self):
        pid = self.new_project()
        self.invoke("project", "status", pid, "ON_HOLD", "--user", "admin")
        self.invoke("project", "update", pid, "--name", "New", "--user", "admin")
        self.assertIn("Portal", self.invoke("project", "show", pid))
        self.assertIn("[read-only]", self.invoke("project", "list"))
        self.invoke("project", "update", pid, "--status", "ACTIVE", "--user", "admin")
        self.assertNotIn("read-only", self.invoke("project", "show", pid))

    def test_members_and_timeline(self):
        pid = self.new_project()
        self.invoke("project", "members", pid, "bob", "carol", "--user", "admin")
        self.invoke("project", "milestone", pid, "Kickoff", "--user", "admin")
        timeline = self.invoke("project", "timeline", pid)
        self.assertIn("Project created by Ada", timeline)
        self.assertIn("Member added by Ada", timeline)
        self.assertIn("Kickoff", timeline)
        exported = self.invoke("project", "timeline", pid, "--type", "team", "--export")
        self.assertTrue(exported.startswith("Project: Portal"))
        self.assertNotIn("Kickoff", exported)

    def test_unknown_timeline_filter(self):
        pid = self.new_project()
        output = self.invoke("project", "timeline", pid, "--type", "party", expect=1)
        self.assertIn("Unknown event type", output)

    def test_unknown_project(self):
        output = self.invoke("project", "show", "proj-missing", expect=1)
        self.assertIn("Project not found", output)

    def test_delete(self):
        pid = self.new_project()
        self.invoke("project", "delete", pid, "--yes")
        self.assertIn("No projects found", self.invoke("project", "list"))


class TestTaskCommands(CliTestCase):
    def test_task_flow(self):
        pid = self.new_project()
        tid = self.created_id(
            self.invoke("task", "create", pid, "Login page", "--assignee", "bob", "--user", "admin")
        )
        self.invoke("task", "move", tid, "IN_PROGRESS", "--user", "bob")
        self.assertIn("IN_PROGRESS", self.invoke("task", "list", "--project", pid))

        self.invoke("project", "status", pid, "COMPLETED", "--user", "admin")
        output = self.invoke("task", "move", tid, "COMPLETED", "--user", "bob", expect=1)
        self.assertIn("Project is read-only", output)

    def test_employee_cannot_delete_others_task(self):
        pid = self.new_project()
        tid = self.created_id(
            self.invoke("task", "create", pid, "Login page", "--assignee", "bob", "--user", "admin")
        )
        self.invoke("task", "delete", tid, "--user", "bob", expect=1)
        self.invoke("task", "delete", tid, "--user", "admin")


class TestNotifyCommands(CliTestCase):
    def test_deadline_check_and_inbox(self):
        pid = self.new_project()
        self.invoke(
            "task", "create", pid, "Report",
            "--assignee", "bob", "--deadline", "2024-03-01", "--user", "admin",
        )
        self.assertIn("Created 1 deadline", self.invoke("notify", "check", "--now", "2024-03-02T09:00:00Z"))
        self.assertIn("Created 0 deadline", self.invoke("notify", "check", "--now", "2024-03-02T17:00:00Z"))

        inbox = self.invoke("notify", "list", "--user", "bob")
        self.assertIn("overdue by 1 day", inbox)
        self.assertIn('You were assigned "Report"', inbox)
        self.assertIn("Marked 2", self.invoke("notify", "read-all", "--user", "bob"))
        self.assertIn("No notifications", self.invoke("notify", "list", "--unread", "--user", "bob"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
