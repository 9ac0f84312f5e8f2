"""Task statuses, priorities and the task transition table."""

from enum import Enum

from ..shared.state_machine import TransitionTable


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    def can_transition_to(self, target_status: "TaskStatus") -> bool:
        return TASK_TRANSITIONS.can_transition(self, target_status)


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}[self]


# DONE -> TODO reopens a finished task.
TASK_TRANSITIONS: TransitionTable[TaskStatus] = TransitionTable(
    {
        TaskStatus.TODO: {TaskStatus.IN_PROGRESS},
        TaskStatus.IN_PROGRESS: {TaskStatus.TODO, TaskStatus.DONE},
        TaskStatus.DONE: {TaskStatus.TODO},
    }
)

TITLE_MAX_LENGTH = 200
TAG_NAME_MAX_LENGTH = 50
