"""Report service - daily and weekly totals of logged time."""
import logging
import math
from datetime import date, datetime, timedelta
from typing import Optional

from app.models.report import DayTotal, PeriodTotal, TaskWeek, TaskWeekTotals, WeekTotals
from app.services.time_entry_service import COMPLETED_ENTRY_QUERY, TimeEntryService
from app.services.timezone_service import TimezoneService
from app.utils.instants import ensure_utc, utc_now

logger = logging.getLogger(__name__)

# Entries without a start are placed by when they were logged.
ENTRY_ANCHOR = {"$ifNull": ["$start_time", "$created_at"]}

# Manual duration when set, else end minus start ($subtract on dates yields ms).
ENTRY_SECONDS = {
    "$ifNull": [
        "$duration_manual",
        {"$divide": [{"$subtract": ["$end_time", "$start_time"]}, 1000]},
    ],
}


class ReportService:
    """
    Totals of completed time per day, per task and per period.

    Days are the user's local calendar days, derived from the timezone
    offset they pass in (local minus UTC, as for time entries). Weeks run
    Sunday to Saturday. Entries on archived clients, projects or tasks
    are never counted.
    """

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.entry_service = TimeEntryService(db)

    @staticmethod
    def week_window(date_string: str, tz_offset_minutes: int) -> tuple[date, datetime, datetime]:
        """
        Locate the Sunday-to-Saturday week holding a local date.

        Returns:
            (local Sunday, UTC start of Sunday, UTC start of the next Sunday)

        Example:
            >>> ReportService.week_window("2024-03-06", 0)[0]
            datetime.date(2024, 3, 3)
        """
        day = date.fromisoformat(date_string)
        sunday = day - timedelta(days=(day.weekday() + 1) % 7)
        start = TimezoneService.local_to_utc(sunday.isoformat(), 0, 0, tz_offset_minutes)
        return sunday, start, start + timedelta(days=7)

    @staticmethod
    def _completed_match(user_id: int, task_ids: list, start: datetime, end: datetime) -> dict:
        return {
            "user_id": user_id,
            "task_id": {"$in": task_ids},
            "$and": [
                COMPLETED_ENTRY_QUERY,
                {"$or": [
                    {"start_time": {"$gte": start, "$lt": end}},
                    {"start_time": None, "created_at": {"$gte": start, "$lt": end}},
                ]},
            ],
        }

    async def _seconds_by_day(
        self,
        user_id: int,
        task_ids: list,
        start: datetime,
        end: datetime,
        tz_offset_minutes: int,
    ) -> dict[tuple[int, int], int]:
        """
        Sum completed seconds per (task, local weekday) with one aggregation.

        Weekdays are 0 = Sunday to 6 = Saturday.
        """
        # Shift to the user's wall clock before taking the weekday
        local_anchor = {"$subtract": [ENTRY_ANCHOR, -tz_offset_minutes * 60 * 1000]}
        pipeline = [
            {"$match": self._completed_match(user_id, task_ids, start, end)},
            {"$group": {
                "_id": {"task_id": "$task_id", "day": {"$dayOfWeek": local_anchor}},
                "seconds": {"$sum": ENTRY_SECONDS},
            }},
        ]
        rows = await self.time_entries.aggregate(pipeline).to_list(length=None)
        return {
            (row["_id"]["task_id"], row["_id"]["day"] - 1): int(row["seconds"])
            for row in rows
        }

    @staticmethod
    def _days(sunday: date, seconds: dict[int, int]) -> list[DayTotal]:
        return [
            DayTotal(
                day_of_week=offset,
                date=(sunday + timedelta(days=offset)).isoformat(),
                total_seconds=seconds.get(offset, 0),
            )
            for offset in range(7)
        ]

    async def get_daily_totals(
        self,
        user_id: int,
        tz_offset_minutes: int = 0,
        date_string: Optional[str] = None,
    ) -> WeekTotals:
        """
        Completed seconds for each day of a user's week.

        Args:
            user_id: User whose time is totalled
            tz_offset_minutes: User's offset (local minus UTC)
            date_string: Any local date in the week (defaults to today)

        Raises:
            ValueError: If date_string is not YYYY-MM-DD
        """
        if date_string is None:
            date_string = TimezoneService.get_user_today(tz_offset_minutes)
        sunday, start, end = self.week_window(date_string, tz_offset_minutes)

        _, _, tasks = await self.entry_service.load_live_catalog()
        by_task_day = await self._seconds_by_day(user_id, list(tasks), start, end, tz_offset_minutes)

        by_day = {}
        for (_, day), seconds in by_task_day.items():
            by_day[day] = by_day.get(day, 0) + seconds

        return WeekTotals(
            user_id=user_id,
            start_date=sunday.isoformat(),
            end_date=(sunday + timedelta(days=6)).isoformat(),
            days=self._days(sunday, by_day),
        )

    async def get_task_daily_totals(
        self,
        user_id: int,
        tz_offset_minutes: int = 0,
        date_string: Optional[str] = None,
    ) -> TaskWeekTotals:
        """
        Completed seconds per task and day of a user's week.

        Covers every live task the user is assigned to, plus any other live
        task they logged time on that week.

        Raises:
            ValueError: If date_string is not YYYY-MM-DD
        """
        if date_string is None:
            date_string = TimezoneService.get_user_today(tz_offset_minutes)
        sunday, start, end = self.week_window(date_string, tz_offset_minutes)

        clients, projects, tasks = await self.entry_service.load_live_catalog()
        by_task_day = await self._seconds_by_day(user_id, list(tasks), start, end, tz_offset_minutes)

        task_ids = {
            task_id for task_id, task in tasks.items()
            if user_id in task.get("assignee_ids", [])
        }
        task_ids.update(task_id for task_id, _ in by_task_day)

        task_weeks = []
        for task_id in sorted(task_ids):
            task = tasks[task_id]
            project = projects[task["project_id"]]
            seconds = {
                day: total for (entry_task, day), total in by_task_day.items()
                if entry_task == task_id
            }
            task_weeks.append(TaskWeek(
                task_id=task_id,
                task_name=task["name"],
                project_name=project["name"],
                client_name=clients[project["client_id"]]["name"],
                days=self._days(sunday, seconds),
            ))

        return TaskWeekTotals(
            user_id=user_id,
            start_date=sunday.isoformat(),
            end_date=(sunday + timedelta(days=6)).isoformat(),
            tasks=task_weeks,
        )

    async def _period_total(
        self,
        user_id: int,
        period: str,
        start: datetime,
        end: datetime,
    ) -> PeriodTotal:
        _, _, tasks = await self.entry_service.load_live_catalog()
        task_ids = list(tasks)

        pipeline = [
            {"$match": self._completed_match(user_id, task_ids, start, end)},
            {"$group": {"_id": None, "seconds": {"$sum": ENTRY_SECONDS}}},
        ]
        rows = await self.time_entries.aggregate(pipeline).to_list(length=None)
        completed = int(rows[0]["seconds"]) if rows else 0

        # A running timer counts for the time it has been going so far
        running_docs = await self.time_entries.find({
            "user_id": user_id,
            "task_id": {"$in": task_ids},
            "end_time": None,
            "duration_manual": None,
            "start_time": {"$gte": start, "$lt": end},
        }).to_list(length=None)
        now = utc_now()
        running = sum(
            max(0, math.floor((now - ensure_utc(doc["start_time"])).total_seconds()))
            for doc in running_docs
        )

        logger.debug(
            "Report %s for user %s: %s completed, %s running",
            period,
            user_id,
            completed,
            running,
        )
        return PeriodTotal(
            user_id=user_id,
            period=period,
            start_time=start,
            end_time=end,
            completed_seconds=completed,
            running_seconds=running,
        )

    async def get_today_total(self, user_id: int, tz_offset_minutes: int = 0) -> PeriodTotal:
        """Time logged during the user's local today, running timer included."""
        today = TimezoneService.get_user_today(tz_offset_minutes)
        start = TimezoneService.local_to_utc(today, 0, 0, tz_offset_minutes)
        return await self._period_total(user_id, "today", start, start + timedelta(days=1))

    async def get_week_total(
        self,
        user_id: int,
        tz_offset_minutes: int = 0,
        date_string: Optional[str] = None,
    ) -> PeriodTotal:
        """
        Time logged during a user's week, running timer included.

        Raises:
            ValueError: If date_string is not YYYY-MM-DD
        """
        if date_string is None:
            date_string = TimezoneService.get_user_today(tz_offset_minutes)
        _, start, end = self.week_window(date_string, tz_offset_minutes)
        return await self._period_total(user_id, "week", start, end)
