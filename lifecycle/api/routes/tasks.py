"""Tasks API routes: tasks and tags."""

from datetime import datetime

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel

from lifecycle.api.deps import ContainerDep
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

router = APIRouter(tags=["tasks"])


class ChangeStatusRequest(BaseModel):
    status: str


class UpdateTaskRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    priority: str | None = None
    due_date: datetime | None = None


class UpdateTagRequest(BaseModel):
    name: str | None = None
    color: str | None = None


@router.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(command: CreateTaskCommand, container: ContainerDep) -> TaskResponse:
    return await container.create_task.execute(command)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, container: ContainerDep) -> TaskResponse:
    return await container.get_task.execute(GetTaskQuery(task_id=task_id))


@router.get("/projects/{project_id}/tasks", response_model=list[TaskResponse])
async def list_project_tasks(
    project_id: str,
    container: ContainerDep,
    status_filter: str | None = Query(default=None, alias="status"),
) -> list[TaskResponse]:
    return await container.list_project_tasks.execute(
        ListProjectTasksQuery(project_id=project_id, status=status_filter)
    )


@router.post(
    "/tasks/{task_id}/status",
    response_model=TaskResponse,
    responses={409: {"description": "Transition not allowed from the current status"}},
)
async def change_task_status(
    task_id: str, request: ChangeStatusRequest, container: ContainerDep
) -> TaskResponse:
    return await container.change_task_status.execute(
        ChangeTaskStatusCommand(task_id=task_id, status=request.status)
    )


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str, request: UpdateTaskRequest, container: ContainerDep
) -> TaskResponse:
    return await container.update_task_details.execute(
        UpdateTaskDetailsCommand(task_id=task_id, **request.model_dump())
    )


@router.put("/tasks/{task_id}/tags/{tag_id}", response_model=TaskResponse)
async def add_tag_to_task(
    task_id: str, tag_id: str, container: ContainerDep
) -> TaskResponse:
    return await container.add_tag_to_task.execute(
        TagTaskCommand(task_id=task_id, tag_id=tag_id)
    )


@router.delete("/tasks/{task_id}/tags/{tag_id}", response_model=TaskResponse)
async def remove_tag_from_task(
    task_id: str, tag_id: str, container: ContainerDep
) -> TaskResponse:
    return await container.remove_tag_from_task.execute(
        TagTaskCommand(task_id=task_id, tag_id=tag_id)
    )


@router.post(
    "/tags",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Tag name already exists"}},
)
async def create_tag(command: CreateTagCommand, container: ContainerDep) -> TagResponse:
    return await container.create_tag.execute(command)


@router.get("/tags", response_model=list[TagResponse])
async def list_tags(container: ContainerDep) -> list[TagResponse]:
    return await container.list_tags.execute()


@router.patch("/tags/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: str, request: UpdateTagRequest, container: ContainerDep
) -> TagResponse:
    return await container.rename_tag.execute(
        RenameTagCommand(tag_id=tag_id, name=request.name, color=request.color)
    )


@router.delete("/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(tag_id: str, container: ContainerDep) -> Response:
    await container.delete_tag.execute(DeleteTagCommand(tag_id=tag_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
