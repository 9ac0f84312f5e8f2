"""Task and tag repository ports."""

from abc import abstractmethod

from ..shared.base import Repository
from ..shared.value_objects import ProjectId, TagId, TaskId
from .entities.tag import Tag
from .entities.task import Task
from .value_objects import TaskStatus


class TaskRepository(Repository[Task, TaskId]):
    @abstractmethod
    async def find_by_project(self, project_id: ProjectId) -> list[Task]:
        """Tasks of a project ordered by priority (highest first), then age."""

    @abstractmethod
    async def find_by_status(self, status: TaskStatus) -> list[Task]:
        """Tasks currently in ``status``."""

    @abstractmethod
    async def find_by_tag(self, tag_id: TagId) -> list[Task]:
        """Tasks carrying the tag."""


class TagRepository(Repository[Tag, TagId]):
    @abstractmethod
    async def find_by_name(self, name: str) -> Tag | None:
        """Find a tag by name, ignoring case and surrounding whitespace."""

    @abstractmethod
    async def list_all(self) -> list[Tag]:
        """Every tag ordered by name."""
