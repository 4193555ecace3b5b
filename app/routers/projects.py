"""Project router - API endpoints for project management."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from app.database import get_database
from app.exceptions import NotFoundError
from app.models.project import Project, ProjectCreate, ProjectUpdate
from app.models.user import CurrentUser
from app.routers.auth import get_current_user, require_admin
from app.services.project_service import ProjectService


router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """
    Create a new project under a client (admin only).

    Raises:
        HTTPException: If the client doesn't exist (400)
    """
    service = ProjectService(db)

    try:
        return await service.create_project(project)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.get("", response_model=list[Project])
async def list_projects(
    client_id: Optional[int] = Query(None, alias="clientId", description="Filter by client"),
    include_archived: bool = Query(False, alias="includeArchived"),
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """List projects, optionally for a single client."""
    service = ProjectService(db)
    return await service.list_projects(
        client_id=client_id,
        include_archived=include_archived,
    )


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """
    Get a single project by ID.

    Raises:
        HTTPException: If project not found (404)
    """
    service = ProjectService(db)
    project = await service.get_project(project_id)

    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )

    return project


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: int,
    project_update: ProjectUpdate,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """
    Update a project (admin only).

    Raises:
        HTTPException: If project not found (404)
    """
    service = ProjectService(db)

    try:
        return await service.update_project(project_id, project_update)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
