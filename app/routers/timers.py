"""Timer endpoints - start, stop and inspect a running timer."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.database import get_database
from app.models.time_entry import RunningTimer, TimeEntry
from app.models.user import CurrentUser
from app.routers.auth import get_current_user, require_admin
from app.services.timer_service import TimerService


router = APIRouter(prefix="/timers", tags=["timers"])


class TimerStart(BaseModel):
    """Request model for starting a timer."""

    task_id: int
    notes: Optional[str] = None
    start_time: Optional[datetime] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class TimerStop(BaseModel):
    """Request model for stopping a timer."""

    end_time: Optional[datetime] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


@router.post("/start", response_model=TimeEntry)
async def start_timer(
    timer_start: TimerStart,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """
    Start a new timer.

    - Requires authentication
    - Only one timer can run at a time
    - Task must exist
    """
    service = TimerService(db)
    try:
        return await service.start_timer(
            user_id=current_user.id,
            task_id=timer_start.task_id,
            notes=timer_start.notes,
            start_time=timer_start.start_time,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/stop", response_model=TimeEntry)
async def stop_timer(
    timer_stop: Optional[TimerStop] = None,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """
    Stop the currently running timer.

    - Requires authentication
    - Must have a running timer
    """
    service = TimerService(db)
    try:
        return await service.stop_timer(
            user_id=current_user.id,
            end_time=timer_stop.end_time if timer_stop else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/current", response_model=TimeEntry)
async def get_current_timer(
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """
    Get the currently running timer, if any.

    - Requires authentication
    - Returns 404 if no timer is running
    """
    service = TimerService(db)
    entry = await service.get_current_timer(user_id=current_user.id)

    if not entry:
        raise HTTPException(status_code=404, detail="No timer running")

    return entry


@router.get("/all", response_model=list[RunningTimer])
async def list_running_timers(
    user_id: Optional[int] = Query(None, alias="userId"),
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """
    List every running timer with user, task, project and client names (admin only).

    - Longest running first
    - Timers on archived clients, projects or tasks are hidden
    """
    service = TimerService(db)
    return await service.get_running_timers(user_id=user_id)
