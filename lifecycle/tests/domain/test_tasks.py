import pytest

from lifecycle.domain.shared.exceptions import InvalidTransitionError, ValidationError
from lifecycle.domain.shared.value_objects import Color, ProjectId, TagId, TaskId
from lifecycle.domain.tasks import Priority, Tag, Task, TaskStatus
from lifecycle.domain.tasks.events import (
    TagCreated,
    TagDeleted,
    TagRecolored,
    TagRenamed,
    TaskCompleted,
    TaskCreated,
    TaskStatusChanged,
    TaskTagAdded,
    TaskTagRemoved,
    TaskUpdated,
)
from lifecycle.tests.conftest import DAY_0, day


def make_task(**overrides) -> Task:
    fields = {
        "task_id": TaskId.of("task-1"),
        "project_id": ProjectId.of("proj-1"),
        "title": "Write release notes",
        "created_at": DAY_0,
    }
    fields.update(overrides)
    task = Task.create(**fields)
    task.pull_domain_events()
    return task


class TestTask:
    """Test Task aggregate."""

    def test_create(self):
        task = Task.create(
            TaskId.of("task-1"),
            ProjectId.of("proj-1"),
            "  Ship it  ",
            DAY_0,
            priority=Priority.HIGH,
            due_date=day(3),
        )
        assert task.title == "Ship it"
        assert task.status == TaskStatus.TODO
        events = task.pull_domain_events()
        assert [type(e) for e in events] == [TaskCreated]
        assert events[0].priority == "HIGH"

    @pytest.mark.parametrize("title", ["", "   ", "x" * 201])
    def test_invalid_title(self, title):
        with pytest.raises(ValidationError, match="title"):
            make_task(title=title)

    def test_due_date_cannot_be_in_the_past(self):
        with pytest.raises(ValidationError, match="past"):
            make_task(due_date=day(-1))

    def test_lifecycle(self):
        task = make_task()
        task.start(day(1))
        task.complete(day(2))
        assert task.status == TaskStatus.DONE
        assert task.completed_at == day(2)

        task.reopen(day(3))
        assert task.status == TaskStatus.TODO
        assert task.completed_at is None

        events = task.pull_domain_events()
        assert [type(e) for e in events] == [
            TaskStatusChanged,
            TaskStatusChanged,
            TaskCompleted,
            TaskStatusChanged,
        ]
        assert (events[0].previous_status, events[0].new_status) == ("TODO", "IN_PROGRESS")

    def test_complete_from_todo_fails_without_side_effects(self):
        task = make_task()
        before = task.model_dump()

        with pytest.raises(InvalidTransitionError, match="Cannot complete Task task-1 while it is TODO"):
            task.complete(day(1))

        assert task.model_dump() == before
        assert task.pull_domain_events() == []

    def test_same_status_is_not_a_transition(self):
        task = make_task()
        with pytest.raises(InvalidTransitionError):
            task.change_status(TaskStatus.TODO, day(1))

    def test_reopen_only_from_done(self):
        task = make_task()
        task.start(day(1))
        with pytest.raises(InvalidTransitionError, match="reopen"):
            task.reopen(day(2))
        assert task.status == TaskStatus.IN_PROGRESS

    def test_back_to_todo_from_in_progress(self):
        task = make_task()
        task.start(day(1))
        task.change_status(TaskStatus.TODO, day(2))
        assert task.status == TaskStatus.TODO

    def test_update_details(self):
        task = make_task()
        changed = task.update_details(
            day(1), title="New title", priority=Priority.LOW, description="body"
        )
        assert changed == ["title", "description", "priority"]
        events = task.pull_domain_events()
        assert isinstance(events[0], TaskUpdated)
        assert events[0].changed_fields == ("title", "description", "priority")

    def test_update_without_changes_emits_nothing(self):
        task = make_task()
        assert task.update_details(day(1), title=task.title) == []
        assert task.pull_domain_events() == []

    def test_invalid_update_changes_nothing(self):
        task = make_task()
        with pytest.raises(ValidationError):
            task.update_details(day(1), title="fine", due_date=day(0))
        assert task.title == "Write release notes"

    def test_tags_are_idempotent(self):
        task = make_task()
        assert task.add_tag(TagId.of("t-1"), day(1)) is True
        assert task.add_tag(TagId.of("t-1"), day(1)) is False
        assert task.remove_tag(TagId.of("t-1"), day(2)) is True
        assert task.remove_tag(TagId.of("t-1"), day(2)) is False
        events = task.pull_domain_events()
        assert [type(e) for e in events] == [TaskTagAdded, TaskTagRemoved]

    def test_is_overdue(self):
        task = make_task(due_date=day(2))
        assert not task.is_overdue(day(1))
        assert task.is_overdue(day(3))
        task.start(day(3))
        task.complete(day(3))
        assert not task.is_overdue(day(4))

    def test_priority_rank(self):
        assert [p.rank for p in (Priority.LOW, Priority.MEDIUM, Priority.HIGH)] == [1, 2, 3]


class TestTag:
    def test_create(self):
        tag = Tag.create(TagId.of("t-1"), "  urgent ", DAY_0, Color.of("#ff0000"))
        assert tag.name == "urgent"
        assert tag.color.value == "#FF0000"
        events = tag.pull_domain_events()
        assert [type(e) for e in events] == [TagCreated]

    def test_default_color(self):
        assert Tag.create(TagId.of("t-1"), "misc", DAY_0).color.value == "#808080"

    @pytest.mark.parametrize("name", ["", "  ", "x" * 51])
    def test_invalid_name(self, name):
        with pytest.raises(ValidationError, match="name"):
            Tag.create(TagId.of("t-1"), name, DAY_0)

    def test_rename_recolor_delete(self):
        tag = Tag.create(TagId.of("t-1"), "urgent", DAY_0)
        tag.pull_domain_events()

        assert tag.rename("Urgent!", day(1))
        assert not tag.rename("Urgent!", day(1))
        assert tag.recolor(Color.of("#00FF00"), day(1))
        tag.delete(day(2))

        events = tag.pull_domain_events()
        assert [type(e) for e in events] == [TagRenamed, TagRecolored, TagDeleted]
        assert events[0].previous_name == "urgent"

    def test_unique_name_ignores_case(self):
        assert Tag.create(TagId.of("t"), "Urgent", DAY_0).unique_name == "urgent"
