"""Tasks context: tasks moving across a board and the tags that label them."""

from .entities.tag import Tag
from .entities.task import Task
from .value_objects import TASK_TRANSITIONS, Priority, TaskStatus

__all__ = ["TASK_TRANSITIONS", "Priority", "Tag", "Task", "TaskStatus"]
