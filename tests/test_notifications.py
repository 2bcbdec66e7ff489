import unittest
from datetime import UTC, datetime, timedelta

from taskboard.application import NotificationService, ProjectService, TaskService
from taskboard.domain.notification import (
    NotificationType,
    deadline_dedup_key,
    deadline_message,
    needs_deadline_notice,
)
from taskboard.domain.shared import AuthorizationError, NotFoundError, Ok, ValidationError
from taskboard.domain.task import TaskStatus
from taskboard.domain.user import Role, Session, User
from taskboard.infrastructure.storage import CollectionKey, MemoryStore

NOW = datetime(2024, 3, 10, 8, 0, tzinfo=UTC)
ADMIN = Session(user_id="admin", role=Role.ADMIN)


class NotificationTestCase(unittest.TestCase):
    def setUp(self):
        self.now = NOW
        self.store = MemoryStore()
        self.projects = ProjectService(self.store, self.clock)
        self.tasks = TaskService(self.store, self.clock)
        self.service = NotificationService(self.store, self.clock)
        self.project = self.projects.create(
            {"name": "Portal", "start_date": "2024-01-01", "end_date": "2024-12-31"},
            "admin",
        ).value

    def clock(self):
        return self.now

    def task(self, **overrides):
        data = {"project_id": self.project.id, "title": "Report", "assignee_id": "bob"}
        data.update(overrides)
        return self.tasks.create(data, ADMIN).value


class TestDeadlineRules(NotificationTestCase):
    def test_due_today_and_overdue(self):
        due_today = self.task(deadline="2024-03-10T23:00:00Z")
        overdue = self.task(deadline="2024-03-07")
        upcoming = self.task(deadline="2024-03-11T00:00:00Z")
        self.assertTrue(needs_deadline_notice(due_today, NOW))
        self.assertTrue(needs_deadline_notice(overdue, NOW))
        self.assertFalse(needs_deadline_notice(upcoming, NOW))
        self.assertEqual(deadline_message(due_today, NOW), 'Task "Report" is due today.')
        self.assertEqual(deadline_message(overdue, NOW), 'Task "Report" is overdue by 3 days.')

    def test_completed_or_undated_tasks_are_skipped(self):
        done = self.task(deadline="2024-03-01", status="COMPLETED")
        undated = self.task()
        self.assertFalse(needs_deadline_notice(done, NOW))
        self.assertFalse(needs_deadline_notice(undated, NOW))

    def test_dedup_key(self):
        self.assertEqual(deadline_dedup_key("task-1", NOW), "deadline:task-1:2024-03-10")


class TestDeadlineScan(NotificationTestCase):
    def test_notifies_once_per_day(self):
        overdue = self.task(deadline="2024-03-09", title="Invoice")
        self.task(deadline="2024-04-01")

        first = self.service.run_deadline_check()
        self.assertEqual(len(first.value), 1)
        notification = first.value[0]
        self.assertEqual(notification.user_id, "bob")
        self.assertEqual(notification.type, NotificationType.DEADLINE)
        self.assertEqual(notification.task_id, overdue.id)
        self.assertEqual(notification.message, 'Task "Invoice" is overdue by 1 day.')

        self.assertEqual(self.service.run_deadline_check().value, [])

        self.now = NOW + timedelta(days=1)
        again = self.service.run_deadline_check()
        self.assertEqual(len(again.value), 1)
        self.assertEqual(len(self.service.list_for_user("bob")), 2)

    def test_scan_does_not_touch_tasks(self):
        self.task(deadline="2024-03-01")
        before = self.store.load(CollectionKey.TASKS)
        self.service.run_deadline_check()
        self.assertEqual(self.store.load(CollectionKey.TASKS), before)

    def test_reference_time_as_string(self):
        self.task(deadline="2024-03-20")
        self.assertEqual(self.service.run_deadline_check("2024-03-19T12:00:00Z").value, [])
        self.assertEqual(len(self.service.run_deadline_check("2024-03-20T12:00:00Z").value), 1)

    def test_invalid_reference_time(self):
        result = self.service.run_deadline_check("yesterday")
        self.assertIsInstance(result.error, ValidationError)


class TestInbox(NotificationTestCase):
    def test_mark_read(self):
        created = self.service.create_for_user("bob", NotificationType.ASSIGNED, "hello").value
        self.assertEqual(self.service.unread_count("bob"), 1)

        self.assertIsInstance(self.service.mark_read(created.id, "carol").error, AuthorizationError)
        self.assertIsInstance(self.service.mark_read("notif-x", "bob").error, NotFoundError)

        read = self.service.mark_read(created.id, "bob").value
        self.assertTrue(read.read)
        self.assertEqual(self.service.unread_count("bob"), 0)
        self.assertIsInstance(self.service.mark_read(created.id, "bob"), Ok)

    def test_mark_all_read_counts_changes(self):
        for message in ("a", "b"):
            self.service.create_for_user("bob", "ASSIGNED", message)
        self.service.create_for_user("carol", "ASSIGNED", "c")
        self.assertEqual(self.service.mark_all_read("bob").value, 2)
        self.assertEqual(self.service.mark_all_read("bob").value, 0)
        self.assertEqual(self.service.unread_count("carol"), 1)

    def test_newest_first(self):
        self.service.create_for_user("bob", "ASSIGNED", "old")
        self.now = NOW + timedelta(minutes=5)
        self.service.create_for_user("bob", "ASSIGNED", "new")
        self.assertEqual([n.message for n in self.service.list_for_user("bob")], ["new", "old"])

    def test_completion_request_goes_to_active_admins(self):
        users = [
            User(id="admin", name="Ada", role=Role.ADMIN),
            User(id="retired", name="Rex", role=Role.ADMIN, is_active=False),
            User(id="bob", name="Bob"),
        ]
        self.store.save(CollectionKey.USERS, [u.model_dump(mode="json") for u in users])

        sent = self.service.notify_admins_completion_request(self.project.id, "bob").value
        self.assertEqual([n.user_id for n in sent], ["admin"])
        self.assertEqual(sent[0].type, NotificationType.PROJECT_COMPLETION_REQUEST)
        self.assertEqual(sent[0].message, 'Bob requested to mark project "Portal" as completed.')

    def test_completion_request_for_unknown_project(self):
        result = self.service.notify_admins_completion_request("proj-x", "bob")
        self.assertIsInstance(result.error, NotFoundError)


if __name__ == "__main__":
    unittest.main(verbosity=2)
