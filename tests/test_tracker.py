import threading
import unittest
from datetime import UTC, datetime, timedelta

from taskboard.application import Tracker
from taskboard.domain.notification import NotificationType
from taskboard.domain.project import ActivityType, ProjectStatus
from taskboard.domain.shared import NotFoundError, Ok, ReadOnlyError
from taskboard.domain.task import TaskStatus
from taskboard.domain.user import Role, User
from taskboard.infrastructure.storage import MemoryStore

NOW = datetime(2024, 2, 1, 10, 0, tzinfo=UTC)


class TrackerTestCase(unittest.TestCase):
    def setUp(self):
        self.now = NOW
        self.tracker = Tracker(MemoryStore(), lambda: self.now)
        for user in (
            User(id="admin", name="Ada", role=Role.ADMIN),
            User(id="bob", name="Bob"),
            User(id="carol", name="Carol"),
        ):
            self.tracker.save_user(user)
        self.admin = self.tracker.session_for("admin")
        self.bob = self.tracker.session_for("bob")
        self.project = self.tracker.create_project(
            {"name": "Portal", "start_date": "2024-01-01", "end_date": "2024-06-30"},
            self.admin,
        ).value

    def new_task(self, session=None, **overrides):
        data = {"project_id": self.project.id, "title": "Login page"}
        data.update(overrides)
        return self.tracker.create_task(data, session or self.admin).value


class TestSessions(TrackerTestCase):
    def test_role_comes_from_stored_user(self):
        self.assertTrue(self.admin.is_admin)
        self.assertFalse(self.bob.is_admin)
        self.assertEqual(self.tracker.session_for("stranger").role, Role.EMPLOYEE)
        self.assertEqual(self.tracker.session_for("bob", "ADMIN").role, Role.ADMIN)

    def test_save_user_replaces(self):
        self.tracker.save_user(User(id="bob", name="Robert"))
        names = {u.id: u.name for u in self.tracker.list_users()}
        self.assertEqual(names["bob"], "Robert")
        self.assertEqual(len(names), 3)


class TestCompletionLogging(TrackerTestCase):
    def test_completing_a_task_logs_a_task_milestone(self):
        task = self.new_task(assignee_id="bob")
        self.now += timedelta(days=2)
        self.tracker.move_task_status(task.id, TaskStatus.COMPLETED, self.bob)

        log = self.tracker.projects.get(self.project.id).value.activity_log
        self.assertEqual(len(log), 1)
        self.assertEqual(log[0].type, ActivityType.TASK_MILESTONE)
        self.assertEqual(log[0].payload, {"task_id": task.id, "message": "Task completed"})
        self.assertEqual(log[0].user_id, "bob")

        entries = self.tracker.timeline(self.project.id, "task_milestone").value
        self.assertEqual(entries[0].event.payload["task_id"], task.id)

    def test_repeat_completion_is_not_logged_twice(self):
        task = self.new_task()
        self.tracker.move_task_status(task.id, TaskStatus.COMPLETED, self.admin)
        self.tracker.move_task_status(task.id, TaskStatus.COMPLETED, self.admin)
        self.tracker.update_task(task.id, {"status": "COMPLETED"}, self.admin)
        log = self.tracker.projects.get(self.project.id).value.activity_log
        self.assertEqual(len(log), 1)

    def test_completion_through_update(self):
        task = self.new_task()
        self.tracker.update_task(task.id, {"status": "COMPLETED"}, self.admin)
        log = self.tracker.projects.get(self.project.id).value.activity_log
        self.assertEqual([e.type for e in log], [ActivityType.TASK_MILESTONE])

    def test_other_moves_log_nothing(self):
        task = self.new_task()
        self.tracker.move_task_status(task.id, TaskStatus.IN_PROGRESS, self.admin)
        self.assertEqual(self.tracker.projects.get(self.project.id).value.activity_log, [])


class TestAssignmentNotices(TrackerTestCase):
    def test_assignee_is_notified(self):
        task = self.new_task(assignee_id="bob")
        inbox = self.tracker.inbox(self.bob)
        self.assertEqual(len(inbox), 1)
        self.assertEqual(inbox[0].type, NotificationType.ASSIGNED)
        self.assertEqual(inbox[0].task_id, task.id)

    def test_self_assignment_is_silent(self):
        self.new_task(session=self.bob)
        self.assertEqual(self.tracker.inbox(self.bob), [])

    def test_reassignment_notifies_new_assignee(self):
        task = self.new_task(assignee_id="bob")
        carol = self.tracker.session_for("carol")
        self.tracker.update_task(task.id, {"assignee_id": "carol"}, self.admin)
        self.assertEqual(len(self.tracker.inbox(carol)), 1)
        self.tracker.update_task(task.id, {"title": "Renamed"}, self.admin)
        self.assertEqual(len(self.tracker.inbox(carol)), 1)

    def test_mark_all_read(self):
        self.new_task(assignee_id="bob")
        self.new_task(assignee_id="bob")
        self.assertEqual(self.tracker.mark_all_read(self.bob).value, 2)
        self.assertEqual(self.tracker.inbox(self.bob, unread_only=True), [])


class TestReadOnlyLifecycle(TrackerTestCase):
    def test_hold_blocks_tasks_until_reactivated(self):
        task = self.new_task()
        self.tracker.set_project_status(self.project.id, ProjectStatus.ON_HOLD, self.admin)

        blocked = self.tracker.move_task_status(task.id, TaskStatus.COMPLETED, self.admin)
        self.assertIsInstance(blocked.error, ReadOnlyError)
        self.assertIsInstance(self.tracker.create_task({"project_id": self.project.id, "title": "x"}, self.admin).error, ReadOnlyError)

        self.tracker.update_project(self.project.id, {"status": "ACTIVE"}, self.admin)
        self.assertIsInstance(self.tracker.move_task_status(task.id, TaskStatus.COMPLETED, self.admin), Ok)

    def test_request_completion(self):
        sent = self.tracker.request_completion(self.project.id, self.bob).value
        self.assertEqual([n.user_id for n in sent], ["admin"])
        self.assertIn("Bob requested", sent[0].message)


class TestTimelineAndDelete(TrackerTestCase):
    def test_export(self):
        self.tracker.assign_members(self.project.id, ["bob"], self.admin)
        text = self.tracker.export_timeline(self.project.id, "team").value
        self.assertEqual(text, "Project: Portal\n\nFeb 1, 2024, 10:00 AM — Member added by Ada")

    def test_timeline_durations(self):
        self.now += timedelta(days=5)
        self.tracker.add_milestone(self.project.id, "Kickoff", self.admin)
        entries = self.tracker.timeline(self.project.id).value
        self.assertEqual([e.days_since_previous for e in entries], [None, 5])

    def test_unknown_project(self):
        self.assertIsInstance(self.tracker.timeline("proj-x").error, NotFoundError)
        self.assertIsInstance(self.tracker.export_timeline("proj-x").error, NotFoundError)

    def test_delete_project_cascades(self):
        task = self.new_task()
        self.tracker.delete_project(self.project.id)
        self.assertIsInstance(self.tracker.tasks.get(task.id).error, NotFoundError)


class TestConcurrency(TrackerTestCase):
    def test_parallel_milestones_are_all_kept(self):
        def worker(index):
            self.tracker.add_milestone(self.project.id, f"M{index}", self.admin)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        log = self.tracker.projects.get(self.project.id).value.activity_log
        self.assertEqual(len(log), 20)
        self.assertEqual({e.payload["title"] for e in log}, {f"M{i}" for i in range(20)})


if __name__ == "__main__":
    unittest.main(verbosity=2)
