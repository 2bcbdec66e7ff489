import unittest
from datetime import UTC, datetime, timedelta

from taskboard.application import ProjectService, TaskService, can_delete, can_edit
from taskboard.domain.project import ProjectStatus
from taskboard.domain.shared import (
    AuthorizationError,
    Err,
    NotFoundError,
    Ok,
    ReadOnlyError,
    ValidationError,
)
from taskboard.domain.task import TaskPriority, TaskStatus
from taskboard.domain.user import Role, Session
from taskboard.infrastructure.storage import CollectionKey, MemoryStore

START = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)

ADMIN = Session(user_id="admin", role=Role.ADMIN)
ALICE = Session(user_id="alice")
BOB = Session(user_id="bob")
CAROL = Session(user_id="carol")


class StepClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class TaskServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.clock = StepClock(START)
        self.store = MemoryStore()
        self.projects = ProjectService(self.store, self.clock)
        self.service = TaskService(self.store, self.clock)
        self.project = self.projects.create(
            {"name": "Portal", "start_date": "2024-01-01", "end_date": "2024-06-30"},
            "admin",
        ).value

    def create_task(self, session=ALICE, **overrides):
        data = {"project_id": self.project.id, "title": "Write docs"}
        data.update(overrides)
        result = self.service.create(data, session)
        self.assertIsInstance(result, Ok, getattr(result, "error", None))
        return result.value

    def hold_project(self, status=ProjectStatus.ON_HOLD):
        self.projects.set_status(self.project.id, status, "admin")


class TestCreate(TaskServiceTestCase):
    def test_defaults(self):
        task = self.create_task(tags=["Learning", " Learning", "docs"])
        self.assertEqual(task.assignee_id, "alice")
        self.assertEqual(task.created_by_id, "alice")
        self.assertEqual(task.status, TaskStatus.TODO)
        self.assertEqual(task.priority, TaskPriority.MEDIUM)
        self.assertEqual(task.created_at, START)
        self.assertEqual(task.assigned_at, START)
        self.assertEqual(task.updated_at, START)
        self.assertEqual(task.tags, ["Learning", "docs"])
        self.assertTrue(task.is_learning)

    def test_explicit_assignee(self):
        task = self.create_task(session=ADMIN, assignee_id="bob", deadline="2024-01-10")
        self.assertEqual(task.assignee_id, "bob")
        self.assertEqual(task.deadline, datetime(2024, 1, 10, tzinfo=UTC))

    def test_unknown_project(self):
        result = self.service.create({"project_id": "proj-nope", "title": "x"}, ALICE)
        self.assertIsInstance(result.error, NotFoundError)

    def test_read_only_project(self):
        self.hold_project(ProjectStatus.COMPLETED)
        result = self.service.create({"project_id": self.project.id, "title": "x"}, ADMIN)
        self.assertEqual(result.error, ReadOnlyError("Project is read-only"))
        self.assertEqual(self.service.list_all(), [])

    def test_blank_title(self):
        result = self.service.create({"project_id": self.project.id, "title": "  "}, ALICE)
        self.assertIsInstance(result.error, ValidationError)


class TestUpdate(TaskServiceTestCase):
    def test_reassign_restamps_assigned_at(self):
        task = self.create_task()
        self.clock.advance(hours=5)
        updated = self.service.update(task.id, {"assignee_id": "bob", "priority": "HIGH"}, ALICE).value
        self.assertEqual(updated.assignee_id, "bob")
        self.assertEqual(updated.priority, TaskPriority.HIGH)
        self.assertEqual(updated.assigned_at, START + timedelta(hours=5))
        self.assertEqual(updated.updated_at, START + timedelta(hours=5))
        self.assertEqual(updated.created_at, START)

    def test_same_assignee_keeps_assigned_at(self):
        task = self.create_task()
        self.clock.advance(hours=1)
        updated = self.service.update(task.id, {"assignee_id": "alice", "title": "Docs"}, ALICE).value
        self.assertEqual(updated.assigned_at, START)
        self.assertEqual(updated.title, "Docs")

    def test_deadline_can_be_cleared(self):
        task = self.create_task(deadline="2024-02-01")
        updated = self.service.update(task.id, {"deadline": None}, ALICE).value
        self.assertIsNone(updated.deadline)

    def test_project_cannot_be_changed(self):
        task = self.create_task()
        result = self.service.update(task.id, {"project_id": "other"}, ALICE)
        self.assertIsInstance(result.error, ValidationError)

    def test_stranger_may_not_edit(self):
        task = self.create_task(assignee_id="bob")
        result = self.service.update(task.id, {"title": "Hijack"}, CAROL)
        self.assertIsInstance(result.error, AuthorizationError)

    def test_assignee_may_edit(self):
        task = self.create_task(assignee_id="bob")
        self.assertIsInstance(self.service.update(task.id, {"title": "Mine"}, BOB), Ok)

    def test_read_only_project_blocks_edits(self):
        task = self.create_task()
        self.hold_project()
        result = self.service.update(task.id, {"title": "Later"}, ADMIN)
        self.assertIsInstance(result.error, ReadOnlyError)


class TestMoveStatus(TaskServiceTestCase):
    def test_any_column_to_any_column(self):
        task = self.create_task()
        for status in (TaskStatus.COMPLETED, TaskStatus.TODO, TaskStatus.IN_PROGRESS):
            moved = self.service.move_status(task.id, status, ALICE).value
            self.assertEqual(moved.status, status)

    def test_blocked_while_project_on_hold_or_completed(self):
        task = self.create_task()
        for status in (ProjectStatus.ON_HOLD, ProjectStatus.COMPLETED):
            self.hold_project(status)
            result = self.service.move_status(task.id, TaskStatus.IN_PROGRESS, ADMIN)
            self.assertIsInstance(result.error, ReadOnlyError)
            self.assertEqual(self.service.get(task.id).value.status, TaskStatus.TODO)

    def test_allowed_again_after_reactivation(self):
        task = self.create_task()
        self.hold_project()
        self.projects.set_status(self.project.id, ProjectStatus.ACTIVE, "admin")
        self.assertIsInstance(self.service.move_status(task.id, "IN_PROGRESS", ALICE), Ok)

    def test_missing_project_is_read_only(self):
        task = self.create_task()
        self.store.save(CollectionKey.PROJECTS, [])
        self.assertTrue(self.service.is_read_only(task))
        self.assertIsInstance(self.service.move_status(task.id, "COMPLETED", ADMIN).error, ReadOnlyError)

    def test_unknown_status(self):
        task = self.create_task()
        self.assertIsInstance(self.service.move_status(task.id, "DONE", ALICE).error, ValidationError)

    def test_unknown_task(self):
        self.assertIsInstance(self.service.move_status("task-x", "DONE", ALICE), Err)
        self.assertIsInstance(self.service.move_status("task-x", "TODO", ALICE).error, NotFoundError)


class TestRemove(TaskServiceTestCase):
    def test_assignee_may_not_delete(self):
        task = self.create_task(session=ALICE, assignee_id="bob")
        self.assertIsInstance(self.service.remove(task.id, BOB).error, AuthorizationError)

    def test_creator_may_delete(self):
        task = self.create_task(session=ALICE, assignee_id="bob")
        self.assertIsInstance(self.service.remove(task.id, ALICE), Ok)
        self.assertIsInstance(self.service.get(task.id).error, NotFoundError)

    def test_admin_may_not_delete_on_read_only_project(self):
        task = self.create_task()
        self.hold_project(ProjectStatus.COMPLETED)
        self.assertIsInstance(self.service.remove(task.id, ADMIN).error, ReadOnlyError)

    def test_admin_may_delete_task_of_missing_project(self):
        task = self.create_task(session=ALICE)
        self.store.save(CollectionKey.PROJECTS, [])
        self.assertIsInstance(self.service.remove(task.id, ALICE).error, ReadOnlyError)
        self.assertIsInstance(self.service.remove(task.id, ADMIN), Ok)
        self.assertIsInstance(self.service.get(task.id).error, NotFoundError)


class TestPermissions(TaskServiceTestCase):
    def test_rules(self):
        task = self.create_task(session=ALICE, assignee_id="bob")
        self.assertTrue(can_edit(task, ADMIN))
        self.assertTrue(can_edit(task, ALICE))
        self.assertTrue(can_edit(task, BOB))
        self.assertFalse(can_edit(task, CAROL))
        self.assertTrue(can_delete(task, ADMIN))
        self.assertTrue(can_delete(task, ALICE))
        self.assertFalse(can_delete(task, BOB))

    def test_list_filters(self):
        self.create_task(assignee_id="bob")
        done = self.create_task(assignee_id="alice")
        self.service.move_status(done.id, TaskStatus.COMPLETED, ALICE)
        self.assertEqual(len(self.service.list_all(project_id=self.project.id)), 2)
        self.assertEqual([t.id for t in self.service.list_all(status=TaskStatus.COMPLETED)], [done.id])
        self.assertEqual(len(self.service.list_all(assignee_id="bob")), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
