"""Task aggregate."""

from datetime import datetime, timezone

from pydantic import Field, field_validator

from ...shared.base import AggregateRoot
from ...shared.exceptions import InvalidTransitionError, ValidationError
from ...shared.value_objects import ProjectId, TagId, TaskId
from ..events import (
    TaskCompleted,
    TaskCreated,
    TaskStatusChanged,
    TaskTagAdded,
    TaskTagRemoved,
    TaskUpdated,
)
from ..value_objects import TASK_TRANSITIONS, TITLE_MAX_LENGTH, Priority, TaskStatus

DESCRIPTION_MAX_LENGTH = 2000


def _clean_title(title: str) -> str:
    cleaned = title.strip() if isinstance(title, str) else ""
    if not cleaned:
        raise ValidationError("title", title, "Task title cannot be empty")
    if len(cleaned) > TITLE_MAX_LENGTH:
        raise ValidationError(
            "title", title, f"Task title cannot exceed {TITLE_MAX_LENGTH} characters"
        )
    return cleaned


def _check_due_date(due_date: datetime | None, now: datetime) -> datetime | None:
    if due_date is None:
        return None
    if due_date.tzinfo is None:
        due_date = due_date.replace(tzinfo=timezone.utc)
    if due_date < now:
        raise ValidationError(
            "due_date", due_date.isoformat(), "Due date cannot be in the past"
        )
    return due_date


class Task(AggregateRoot):
    id: TaskId
    project_id: ProjectId
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    tag_ids: list[TagId] = Field(default_factory=list)
    due_date: datetime | None = None
    completed_at: datetime | None = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def create(
        cls,
        task_id: TaskId,
        project_id: ProjectId,
        title: str,
        created_at: datetime,
        description: str = "",
        priority: Priority = Priority.MEDIUM,
        due_date: datetime | None = None,
        tag_ids: list[TagId] | None = None,
    ) -> "Task":
        task = cls(
            id=task_id,
            project_id=project_id,
            title=_clean_title(title),
            description=description,
            priority=priority,
            due_date=_check_due_date(due_date, created_at),
            tag_ids=list(dict.fromkeys(tag_ids or [])),
            created_at=created_at,
        )
        task._record(
            TaskCreated(
                aggregate_id=str(task.id),
                occurred_at=created_at,
                project_id=str(project_id),
                title=task.title,
                priority=task.priority.value,
                due_date=task.due_date,
            )
        )
        return task

    def change_status(
        self, target: TaskStatus, at: datetime, action: str | None = None
    ) -> None:
        previous = self._transition(
            TASK_TRANSITIONS,
            target,
            action=action or f"move to {target.value}",
            at=at,
        )
        self.completed_at = at if target == TaskStatus.DONE else None
        self._record(
            TaskStatusChanged(
                aggregate_id=str(self.id),
                occurred_at=at,
                previous_status=previous.value,
                new_status=target.value,
            )
        )
        if target == TaskStatus.DONE:
            self._record(
                TaskCompleted(aggregate_id=str(self.id), occurred_at=at, completed_at=at)
            )

    def start(self, at: datetime) -> None:
        self.change_status(TaskStatus.IN_PROGRESS, at, action="start")

    def complete(self, at: datetime) -> None:
        self.change_status(TaskStatus.DONE, at, action="complete")

    def reopen(self, at: datetime) -> None:
        # only finished tasks reopen; IN_PROGRESS -> TODO is a plain status change
        if self.status != TaskStatus.DONE:
            raise InvalidTransitionError("Task", self.id, self.status.value, "reopen")
        self.change_status(TaskStatus.TODO, at, action="reopen")

    def update_details(
        self,
        at: datetime,
        title: str | None = None,
        description: str | None = None,
        priority: Priority | None = None,
        due_date: datetime | None = None,
    ) -> list[str]:
        """Apply the given changes and return the names of fields that changed."""
        changes: dict[str, object] = {}
        if title is not None:
            cleaned = _clean_title(title)
            if cleaned != self.title:
                changes["title"] = cleaned
        if description is not None:
            if len(description) > DESCRIPTION_MAX_LENGTH:
                raise ValidationError(
                    "description",
                    f"{len(description)} characters",
                    f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
                )
            if description != self.description:
                changes["description"] = description
        if priority is not None and priority != self.priority:
            changes["priority"] = priority
        if due_date is not None:
            checked = _check_due_date(due_date, at)
            if checked != self.due_date:
                changes["due_date"] = checked

        if not changes:
            return []

        for field_name, value in changes.items():
            setattr(self, field_name, value)
        self.mark_updated(at)
        self._record(
            TaskUpdated(
                aggregate_id=str(self.id),
                occurred_at=at,
                changed_fields=tuple(changes),
            )
        )
        return list(changes)

    def add_tag(self, tag_id: TagId, at: datetime) -> bool:
        if tag_id in self.tag_ids:
            return False
        self.tag_ids = [*self.tag_ids, tag_id]
        self.mark_updated(at)
        self._record(TaskTagAdded(aggregate_id=str(self.id), occurred_at=at, tag_id=str(tag_id)))
        return True

    def remove_tag(self, tag_id: TagId, at: datetime) -> bool:
        if tag_id not in self.tag_ids:
            return False
        self.tag_ids = [t for t in self.tag_ids if t != tag_id]
        self.mark_updated(at)
        self._record(
            TaskTagRemoved(aggregate_id=str(self.id), occurred_at=at, tag_id=str(tag_id))
        )
        return True

    def is_overdue(self, as_of: datetime) -> bool:
        if self.due_date is None or self.status == TaskStatus.DONE:
            return False
        return as_of > self.due_date
