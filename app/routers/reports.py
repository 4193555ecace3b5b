"""Report endpoints - daily and weekly totals of logged time."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.database import get_database
from app.models.report import PeriodTotal, TaskWeekTotals, WeekTotals
from app.models.user import CurrentUser
from app.routers.auth import get_current_user
from app.services.report_service import ReportService


router = APIRouter(prefix="/reports", tags=["reports"])

# Real-world offsets span UTC-12 to UTC+14
TZ_OFFSET_QUERY = Query(0, alias="tzOffsetMinutes", ge=-720, le=840)
DATE_QUERY = Query(None, alias="date", description="Any local date in the week (YYYY-MM-DD)")


def report_user_id(current_user: CurrentUser, user_id: Optional[int]) -> int:
    """Resolve whose report to build; only admins may look at other users."""
    if user_id is None or user_id == current_user.id:
        return current_user.id
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view another user's reports",
        )
    return user_id


@router.get("/daily-totals", response_model=WeekTotals)
async def get_daily_totals(
    user_id: Optional[int] = Query(None, alias="userId"),
    tz_offset_minutes: int = TZ_OFFSET_QUERY,
    day: Optional[str] = DATE_QUERY,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """
    Completed time for each day of the week, Sunday first.

    - Defaults to the caller and the current week
    - Running timers are not counted
    """
    service = ReportService(db)
    try:
        return await service.get_daily_totals(
            report_user_id(current_user, user_id),
            tz_offset_minutes=tz_offset_minutes,
            date_string=day,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/task-daily-totals", response_model=TaskWeekTotals)
async def get_task_daily_totals(
    user_id: Optional[int] = Query(None, alias="userId"),
    tz_offset_minutes: int = TZ_OFFSET_QUERY,
    day: Optional[str] = DATE_QUERY,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """Completed time per task and day of the week."""
    service = ReportService(db)
    try:
        return await service.get_task_daily_totals(
            report_user_id(current_user, user_id),
            tz_offset_minutes=tz_offset_minutes,
            date_string=day,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/today", response_model=PeriodTotal)
async def get_today_total(
    user_id: Optional[int] = Query(None, alias="userId"),
    tz_offset_minutes: int = TZ_OFFSET_QUERY,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """Time logged today, including a running timer's elapsed time."""
    service = ReportService(db)
    return await service.get_today_total(
        report_user_id(current_user, user_id),
        tz_offset_minutes=tz_offset_minutes,
    )


@router.get("/week", response_model=PeriodTotal)
async def get_week_total(
    user_id: Optional[int] = Query(None, alias="userId"),
    tz_offset_minutes: int = TZ_OFFSET_QUERY,
    day: Optional[str] = DATE_QUERY,
    current_user: CurrentUser = Depends(get_current_user),
    db=Depends(get_database),
):
    """Time logged this week, including a running timer's elapsed time."""
    service = ReportService(db)
    try:
        return await service.get_week_total(
            report_user_id(current_user, user_id),
            tz_offset_minutes=tz_offset_minutes,
            date_string=day,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
