"""
Integration tests for task and tag use cases.
"""

import pytest

from lifecycle.application.commands import (
    ChangeTaskStatusCommand,
    CreateTagCommand,
    CreateTaskCommand,
    DeleteTagCommand,
    GetTaskQuery,
    ListProjectTasksQuery,
    RenameTagCommand,
    TagTaskCommand,
    UpdateTaskDetailsCommand,
)
from lifecycle.application.services.tasks import parse_priority, parse_status
from lifecycle.domain.shared.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from lifecycle.domain.tasks import Priority, TaskStatus
from lifecycle.tests.conftest import day


async def create_task(container, title: str = "Write docs", **fields) -> str:
    task = await container.create_task.execute(
        CreateTaskCommand(project_id=fields.pop("project_id", "proj-1"), title=title, **fields)
    )
    return task.id


class TestParsing:
    @pytest.mark.parametrize("raw,expected", [("high", Priority.HIGH), (" Low ", Priority.LOW)])
    def test_parse_priority(self, raw, expected):
        assert parse_priority(raw) == expected

    def test_parse_priority_rejects_unknown(self):
        with pytest.raises(ValidationError, match="priority"):
            parse_priority("urgent")

    def test_parse_status(self):
        assert parse_status("in_progress") == TaskStatus.IN_PROGRESS
        with pytest.raises(ValidationError):
            parse_status("BLOCKED")


class TestTaskLifecycle:
    @pytest.mark.asyncio
    async def test_create(self, container):
        task = await container.create_task.execute(
            CreateTaskCommand(project_id="proj-1", title="Plan", priority="high", due_date=day(2))
        )
        assert task.id == "task-1"
        assert task.status == "TODO"
        assert task.priority == "HIGH"
        assert task.is_overdue is False

    @pytest.mark.asyncio
    async def test_create_with_unknown_tag(self, container):
        with pytest.raises(NotFoundError):
            await create_task(container, tag_ids=["tag-404"])
        assert container.repositories.tasks.count() == 0

    @pytest.mark.asyncio
    async def test_status_changes(self, container, clock):
        task_id = await create_task(container)

        started = await container.change_task_status.execute(
            ChangeTaskStatusCommand(task_id=task_id, status="IN_PROGRESS")
        )
        assert started.status == "IN_PROGRESS"

        clock.advance(days=1)
        done = await container.change_task_status.execute(
            ChangeTaskStatusCommand(task_id=task_id, status="done")
        )
        assert done.completed_at == day(1)

        reopened = await container.change_task_status.execute(
            ChangeTaskStatusCommand(task_id=task_id, status="TODO")
        )
        assert reopened.status == "TODO"
        assert reopened.completed_at is None

    @pytest.mark.asyncio
    async def test_todo_to_done_is_rejected(self, container):
        task_id = await create_task(container)
        container.event_bus.clear_history()

        with pytest.raises(InvalidTransitionError):
            await container.change_task_status.execute(
                ChangeTaskStatusCommand(task_id=task_id, status="DONE")
            )

        task = await container.get_task.execute(GetTaskQuery(task_id=task_id))
        assert task.status == "TODO"
        assert container.event_bus.get_event_history() == []

    @pytest.mark.asyncio
    async def test_update_details(self, container):
        task_id = await create_task(container)
        updated = await container.update_task_details.execute(
            UpdateTaskDetailsCommand(task_id=task_id, title="Write better docs", priority="LOW")
        )
        assert updated.title == "Write better docs"
        assert updated.priority == "LOW"
        events = container.event_bus.get_event_history("task.updated")
        assert events[-1].changed_fields == ("title", "priority")

    @pytest.mark.asyncio
    async def test_unchanged_update_publishes_nothing(self, container):
        task_id = await create_task(container)
        container.event_bus.clear_history()
        await container.update_task_details.execute(
            UpdateTaskDetailsCommand(task_id=task_id, title="Write docs")
        )
        assert container.event_bus.get_event_history() == []

    @pytest.mark.asyncio
    async def test_list_project_tasks(self, container):
        await create_task(container, "low", priority="LOW")
        high = await create_task(container, "high", priority="HIGH")
        await create_task(container, "elsewhere", project_id="proj-2")
        await container.change_task_status.execute(
            ChangeTaskStatusCommand(task_id=high, status="IN_PROGRESS")
        )

        tasks = await container.list_project_tasks.execute(
            ListProjectTasksQuery(project_id="proj-1")
        )
        assert [t.title for t in tasks] == ["high", "low"]

        in_progress = await container.list_project_tasks.execute(
            ListProjectTasksQuery(project_id="proj-1", status="in_progress")
        )
        assert [t.id for t in in_progress] == [high]


class TestTags:
    @pytest.mark.asyncio
    async def test_duplicate_tag_name_conflicts(self, container):
        await container.create_tag.execute(CreateTagCommand(name="urgent"))
        container.event_bus.clear_history()

        with pytest.raises(ConflictError):
            await container.create_tag.execute(CreateTagCommand(name="Urgent"))

        tags = await container.list_tags.execute()
        assert [t.name for t in tags] == ["urgent"]
        assert container.event_bus.get_event_history() == []

    @pytest.mark.asyncio
    async def test_tag_and_untag_task(self, container):
        tag = await container.create_tag.execute(CreateTagCommand(name="docs", color="#00ff00"))
        task_id = await create_task(container)

        tagged = await container.add_tag_to_task.execute(
            TagTaskCommand(task_id=task_id, tag_id=tag.id)
        )
        again = await container.add_tag_to_task.execute(
            TagTaskCommand(task_id=task_id, tag_id=tag.id)
        )
        assert tagged.tag_ids == again.tag_ids == [tag.id]
        assert len(container.event_bus.get_event_history("task.tag_added")) == 1

        untagged = await container.remove_tag_from_task.execute(
            TagTaskCommand(task_id=task_id, tag_id=tag.id)
        )
        assert untagged.tag_ids == []

    @pytest.mark.asyncio
    async def test_tag_unknown_tag(self, container):
        task_id = await create_task(container)
        with pytest.raises(NotFoundError):
            await container.add_tag_to_task.execute(
                TagTaskCommand(task_id=task_id, tag_id="tag-404")
            )

    @pytest.mark.asyncio
    async def test_rename_and_recolor(self, container):
        tag = await container.create_tag.execute(CreateTagCommand(name="docs"))
        renamed = await container.rename_tag.execute(
            RenameTagCommand(tag_id=tag.id, name="Docs", color="#123abc")
        )
        assert renamed.name == "Docs"
        assert renamed.color == "#123ABC"

    @pytest.mark.asyncio
    async def test_rename_onto_existing_name_conflicts(self, container):
        await container.create_tag.execute(CreateTagCommand(name="urgent"))
        other = await container.create_tag.execute(CreateTagCommand(name="later"))
        with pytest.raises(ConflictError):
            await container.rename_tag.execute(RenameTagCommand(tag_id=other.id, name="URGENT"))

    @pytest.mark.asyncio
    async def test_delete_tag_strips_it_from_tasks(self, container):
        tag = await container.create_tag.execute(CreateTagCommand(name="legacy"))
        keep = await container.create_tag.execute(CreateTagCommand(name="keep"))
        first = await create_task(container, "one", tag_ids=[tag.id, keep.id])
        second = await create_task(container, "two", tag_ids=[tag.id])

        await container.delete_tag.execute(DeleteTagCommand(tag_id=tag.id))

        assert [t.id for t in await container.list_tags.execute()] == [keep.id]
        one = await container.get_task.execute(GetTaskQuery(task_id=first))
        two = await container.get_task.execute(GetTaskQuery(task_id=second))
        assert one.tag_ids == [keep.id]
        assert two.tag_ids == []

        names = [e.name for e in container.event_bus.get_event_history()]
        assert names[-3:] == ["tag.deleted", "task.tag_removed", "task.tag_removed"]

    @pytest.mark.asyncio
    async def test_delete_unknown_tag(self, container):
        with pytest.raises(NotFoundError):
            await container.delete_tag.execute(DeleteTagCommand(tag_id="tag-404"))
