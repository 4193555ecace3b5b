"""Time entry router - create, edit and list logged time."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from app.config import settings
from app.database import get_database
from app.exceptions import NotFoundError, PermissionDeniedError
from app.models.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
    TimeEntryWithDetails,
)
from app.models.user import CurrentUser
from app.routers.auth import get_current_user, require_admin
from app.services.time_entry_service import TimeEntryService


router = APIRouter(prefix="/time-entries", tags=["time-entries"])


def check_owner(current_user: CurrentUser, owner_id: Optional[int]) -> None:
    """
    Only the owning user or an admin may act on an entry.

    Raises:
        PermissionDeniedError: If the caller is neither
    """
    if current_user.is_admin or owner_id is None or owner_id == current_user.id:
        return
    raise PermissionDeniedError("Not allowed to access this time entry")


async def load_owned_entry(
    entry_id: int,
    current_user: CurrentUser,
    service: TimeEntryService,
) -> TimeEntry:
    """Fetch an entry the caller may act on, raising 404/403 otherwise."""
    entry = await service.get_time_entry(entry_id)
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Time entry not found")

    try:
        check_owner(current_user, entry.user_id)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    return entry


@router.post("", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def create_time_entry(
    entry_create: TimeEntryCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """
    Log time against a task.

    - Body is an ISO start/end pair, hour/minute components with taskDate
      and tzOffsetMinutes, or a duration string
    - Non-admins may only log time for themselves
    """
    service = TimeEntryService(db)

    try:
        check_owner(current_user, entry_create.user_id)
        return await service.create_time_entry(entry_create)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=list[TimeEntryWithDetails])
async def list_time_entries(
    user_id: Optional[int] = Query(None, alias="userId"),
    limit: int = Query(settings.default_entry_limit, ge=1, le=1000),
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """
    List a user's completed entries, newest first.

    - Defaults to the caller's own entries
    - Entries under archived clients, projects or tasks are hidden
    """
    if user_id is None:
        user_id = current_user.id

    try:
        check_owner(current_user, user_id)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    service = TimeEntryService(db)
    return await service.get_user_time_entries(user_id, limit=limit)


@router.get("/all", response_model=list[TimeEntryWithDetails])
async def list_all_time_entries(
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """List every user's completed entries (admin only)."""
    service = TimeEntryService(db)
    return await service.get_all_time_entries()


@router.get("/{entry_id}", response_model=TimeEntry)
async def get_time_entry(
    entry_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """Get a single time entry."""
    service = TimeEntryService(db)
    return await load_owned_entry(entry_id, current_user, service)


@router.put("/{entry_id}", response_model=TimeEntry)
async def update_time_entry(
    entry_id: int,
    entry_update: TimeEntryUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """
    Partially update a time entry.

    - Only supplied fields change
    - Start or end may be moved on its own
    """
    service = TimeEntryService(db)
    await load_owned_entry(entry_id, current_user, service)

    try:
        return await service.update_time_entry(entry_id, entry_update)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{entry_id}")
async def delete_time_entry(
    entry_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """Delete a time entry permanently."""
    service = TimeEntryService(db)
    await load_owned_entry(entry_id, current_user, service)

    try:
        return await service.delete_time_entry(entry_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
