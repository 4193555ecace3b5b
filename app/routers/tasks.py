"""Task router - API endpoints for tasks, status and assignments."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from app.database import get_database
from app.exceptions import NotFoundError
from app.models.task import Task, TaskAssignment, TaskCreate, TaskStatusUpdate, TaskUpdate
from app.models.user import CurrentUser
from app.routers.auth import get_current_user, require_admin
from app.services.task_service import TaskService


router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """
    Create a new task under a project (admin only).

    Raises:
        HTTPException: If the project doesn't exist (400)
    """
    service = TaskService(db)

    try:
        return await service.create_task(task)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[Task])
async def list_tasks(
    project_id: Optional[int] = Query(None, alias="projectId"),
    assignee_id: Optional[int] = Query(None, alias="assigneeId"),
    include_archived: bool = Query(False, alias="includeArchived"),
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """List tasks, optionally by project and/or assignee."""
    service = TaskService(db)
    return await service.list_tasks(
        project_id=project_id,
        assignee_id=assignee_id,
        include_archived=include_archived,
    )


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """Get a single task."""
    service = TaskService(db)
    task = await service.get_task(task_id)

    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    return task


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: int,
    task_update: TaskUpdate,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """Update a task (admin only)."""
    service = TaskService(db)

    try:
        return await service.update_task(task_id, task_update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{task_id}/status", response_model=Task)
async def set_task_status(
    task_id: int,
    status_update: TaskStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """Move a task between pending, in-progress and completed."""
    service = TaskService(db)

    try:
        return await service.update_task(task_id, TaskUpdate(status=status_update.status))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{task_id}/assignments", response_model=Task)
async def assign_user(
    task_id: int,
    assignment: TaskAssignment,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """Assign a user to a task (admin only)."""
    service = TaskService(db)

    try:
        return await service.assign_user(task_id, assignment.user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{task_id}/assignments/{user_id}", response_model=Task)
async def unassign_user(
    task_id: int,
    user_id: int,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """Remove a user from a task (admin only)."""
    service = TaskService(db)

    try:
        return await service.unassign_user(task_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
