"""Task and tag use cases."""

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
from lifecycle.application.dtos import TagResponse, TaskResponse
from lifecycle.application.services.base import UseCase, correlated
from lifecycle.core.observability import monitor_use_case
from lifecycle.domain.shared.exceptions import NotFoundError, ValidationError
from lifecycle.domain.shared.value_objects import Color, ProjectId, TagId, TaskId
from lifecycle.domain.tasks.entities.tag import Tag
from lifecycle.domain.tasks.entities.task import Task
from lifecycle.domain.tasks.events import TagDeleted
from lifecycle.domain.tasks.repositories import TagRepository, TaskRepository
from lifecycle.domain.tasks.value_objects import Priority, TaskStatus


def parse_priority(value: str) -> Priority:
    try:
        return Priority(value.strip().upper())
    except ValueError:
        raise ValidationError(
            "priority", value, "Priority must be one of LOW, MEDIUM, HIGH"
        ) from None


def parse_status(value: str) -> TaskStatus:
    try:
        return TaskStatus(value.strip().upper())
    except ValueError:
        raise ValidationError(
            "status", value, "Status must be one of TODO, IN_PROGRESS, DONE"
        ) from None


class CreateTask(UseCase):
    def __init__(self, tasks: TaskRepository, tags: TagRepository, **deps) -> None:
        super().__init__(**deps)
        self._tasks = tasks
        self._tags = tags

    @monitor_use_case("create_task")
    @correlated
    async def execute(self, command: CreateTaskCommand) -> TaskResponse:
        tag_ids = [TagId.of(t) for t in command.tag_ids]
        for tag_id in tag_ids:
            if not await self._tags.exists(tag_id):
                raise NotFoundError("Tag", tag_id)

        now = self.now()
        task = Task.create(
            task_id=self._ids.new(TaskId),
            project_id=ProjectId.of(command.project_id),
            title=command.title,
            created_at=now,
            description=command.description,
            priority=parse_priority(command.priority),
            due_date=command.due_date,
            tag_ids=tag_ids,
        )
        await self._commit(self._tasks, task)
        self._logger.info("task_created", task_id=str(task.id), project_id=str(task.project_id))
        return TaskResponse.from_entity(task, now)


class ChangeTaskStatus(UseCase):
    """Start, complete, stop or reopen a task by naming the target status."""

    def __init__(self, tasks: TaskRepository, **deps) -> None:
        super().__init__(**deps)
        self._tasks = tasks

    @monitor_use_case("change_task_status")
    @correlated
    async def execute(self, command: ChangeTaskStatusCommand) -> TaskResponse:
        target = parse_status(command.status)
        task_id = TaskId.of(command.task_id)

        async with self._locks.hold(self.lock_key("Task", task_id)):
            task = await self._load_or_fail(self._tasks, task_id, "Task")
            previous = task.status
            now = self.now()
            if target == TaskStatus.IN_PROGRESS:
                task.start(now)
            elif target == TaskStatus.DONE:
                task.complete(now)
            elif previous == TaskStatus.DONE:
                task.reopen(now)
            else:
                task.change_status(target, now)
            await self._commit(self._tasks, task)

        self._logger.info(
            "task_status_changed",
            task_id=str(task.id),
            previous=previous.value,
            current=task.status.value,
        )
        return TaskResponse.from_entity(task, now)


class UpdateTaskDetails(UseCase):
    def __init__(self, tasks: TaskRepository, **deps) -> None:
        super().__init__(**deps)
        self._tasks = tasks

    @monitor_use_case("update_task_details")
    @correlated
    async def execute(self, command: UpdateTaskDetailsCommand) -> TaskResponse:
        task_id = TaskId.of(command.task_id)
        priority = parse_priority(command.priority) if command.priority else None

        async with self._locks.hold(self.lock_key("Task", task_id)):
            task = await self._load_or_fail(self._tasks, task_id, "Task")
            now = self.now()
            changed = task.update_details(
                now,
                title=command.title,
                description=command.description,
                priority=priority,
                due_date=command.due_date,
            )
            if changed:
                await self._commit(self._tasks, task)

        return TaskResponse.from_entity(task, now)


class AddTagToTask(UseCase):
    def __init__(self, tasks: TaskRepository, tags: TagRepository, **deps) -> None:
        super().__init__(**deps)
        self._tasks = tasks
        self._tags = tags

    @monitor_use_case("add_tag_to_task")
    @correlated
    async def execute(self, command: TagTaskCommand) -> TaskResponse:
        task_id = TaskId.of(command.task_id)
        tag_id = TagId.of(command.tag_id)

        async with self._locks.hold(
            self.lock_key("Task", task_id), self.lock_key("Tag", tag_id)
        ):
            if not await self._tags.exists(tag_id):
                raise NotFoundError("Tag", tag_id)
            task = await self._load_or_fail(self._tasks, task_id, "Task")
            now = self.now()
            if task.add_tag(tag_id, now):
                await self._commit(self._tasks, task)

        return TaskResponse.from_entity(task, now)


class RemoveTagFromTask(UseCase):
    def __init__(self, tasks: TaskRepository, **deps) -> None:
        super().__init__(**deps)
        self._tasks = tasks

    @monitor_use_case("remove_tag_from_task")
    @correlated
    async def execute(self, command: TagTaskCommand) -> TaskResponse:
        task_id = TaskId.of(command.task_id)
        async with self._locks.hold(self.lock_key("Task", task_id)):
            task = await self._load_or_fail(self._tasks, task_id, "Task")
            now = self.now()
            if task.remove_tag(TagId.of(command.tag_id), now):
                await self._commit(self._tasks, task)
        return TaskResponse.from_entity(task, now)


class GetTask(UseCase):
    def __init__(self, tasks: TaskRepository, **deps) -> None:
        super().__init__(**deps)
        self._tasks = tasks

    async def execute(self, query: GetTaskQuery) -> TaskResponse:
        task = await self._load_or_fail(self._tasks, TaskId.of(query.task_id), "Task")
        return TaskResponse.from_entity(task, self.now())


class ListProjectTasks(UseCase):
    def __init__(self, tasks: TaskRepository, **deps) -> None:
        super().__init__(**deps)
        self._tasks = tasks

    async def execute(self, query: ListProjectTasksQuery) -> list[TaskResponse]:
        tasks = await self._tasks.find_by_project(ProjectId.of(query.project_id))
        if query.status:
            wanted = parse_status(query.status)
            tasks = [t for t in tasks if t.status == wanted]
        now = self.now()
        return [TaskResponse.from_entity(t, now) for t in tasks]


class CreateTag(UseCase):
    def __init__(self, tags: TagRepository, **deps) -> None:
        super().__init__(**deps)
        self._tags = tags

    @monitor_use_case("create_tag")
    @correlated
    async def execute(self, command: CreateTagCommand) -> TagResponse:
        tag = Tag.create(
            tag_id=self._ids.new(TagId),
            name=command.name,
            created_at=self.now(),
            color=Color.of(command.color) if command.color else None,
        )
        # uniqueness of the name is checked by the repository on save
        await self._commit(self._tags, tag)
        self._logger.info("tag_created", tag_id=str(tag.id), name=tag.name)
        return TagResponse.from_entity(tag)


class RenameTag(UseCase):
    """Rename and/or recolor a tag."""

    def __init__(self, tags: TagRepository, **deps) -> None:
        super().__init__(**deps)
        self._tags = tags

    @monitor_use_case("rename_tag")
    @correlated
    async def execute(self, command: RenameTagCommand) -> TagResponse:
        tag_id = TagId.of(command.tag_id)
        color = Color.of(command.color) if command.color else None

        async with self._locks.hold(self.lock_key("Tag", tag_id)):
            tag = await self._load_or_fail(self._tags, tag_id, "Tag")
            now = self.now()
            changed = False
            if command.name is not None:
                changed = tag.rename(command.name, now) or changed
            if color is not None:
                changed = tag.recolor(color, now) or changed
            if changed:
                await self._commit(self._tags, tag)

        return TagResponse.from_entity(tag)


class DeleteTag(UseCase):
    def __init__(self, tags: TagRepository, **deps) -> None:
        super().__init__(**deps)
        self._tags = tags

    @monitor_use_case("delete_tag")
    @correlated
    async def execute(self, command: DeleteTagCommand) -> None:
        tag_id = TagId.of(command.tag_id)
        async with self._locks.hold(self.lock_key("Tag", tag_id)):
            tag = await self._load_or_fail(self._tags, tag_id, "Tag")
            tag.delete(self.now())
            await self._tags.delete(tag_id)
            await self._publish(tag)
        self._logger.info("tag_deleted", tag_id=str(tag_id))


class ListTags(UseCase):
    def __init__(self, tags: TagRepository, **deps) -> None:
        super().__init__(**deps)
        self._tags = tags

    async def execute(self) -> list[TagResponse]:
        return [TagResponse.from_entity(tag) for tag in await self._tags.list_all()]


class RemoveDeletedTagFromTasks(UseCase):
    """tag.deleted -> strip the tag from every task carrying it."""

    def __init__(self, tasks: TaskRepository, **deps) -> None:
        super().__init__(**deps)
        self._tasks = tasks

    async def __call__(self, event: TagDeleted) -> None:
        tag_id = TagId.of(event.aggregate_id)
        for task in await self._tasks.find_by_tag(tag_id):
            async with self._locks.hold(self.lock_key("Task", task.id)):
                current = await self._load_or_fail(self._tasks, task.id, "Task")
                if current.remove_tag(tag_id, event.occurred_at):
                    await self._commit(self._tasks, current)
