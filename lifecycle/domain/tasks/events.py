"""Task and tag domain events."""

from datetime import datetime

from ..shared.base import DomainEvent


class TaskCreated(DomainEvent):
    name = "task.created"

    project_id: str
    title: str
    priority: str
    due_date: datetime | None


class TaskStatusChanged(DomainEvent):
    name = "task.status_changed"

    previous_status: str
    new_status: str


class TaskCompleted(DomainEvent):
    name = "task.completed"

    completed_at: datetime


class TaskUpdated(DomainEvent):
    name = "task.updated"

    changed_fields: tuple[str, ...]


class TaskTagAdded(DomainEvent):
    name = "task.tag_added"

    tag_id: str


class TaskTagRemoved(DomainEvent):
    name = "task.tag_removed"

    tag_id: str


class TagCreated(DomainEvent):
    name = "tag.created"

    tag_name: str
    color: str


class TagRenamed(DomainEvent):
    name = "tag.renamed"

    previous_name: str
    new_name: str


class TagRecolored(DomainEvent):
    name = "tag.recolored"

    previous_color: str
    new_color: str


class TagDeleted(DomainEvent):
    name = "tag.deleted"

    tag_name: str


TaskEvent = (
    TaskCreated
    | TaskStatusChanged
    | TaskCompleted
    | TaskUpdated
    | TaskTagAdded
    | TaskTagRemoved
)
TagEvent = TagCreated | TagRenamed | TagRecolored | TagDeleted
