"""Timer service - business logic for running timers."""
import logging
import math
from datetime import datetime
from typing import Optional

from app.models.time_entry import RunningTimer, TimeEntry
from app.services.task_service import TaskService
from app.services.time_entry_service import TimeEntryService
from app.services.timezone_service import TimezoneService
from app.utils.instants import ensure_utc, utc_now
from app.utils.sequence import next_id

logger = logging.getLogger(__name__)


class TimerService:
    """Service for handling time tracking operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.tasks = db["tasks"]
        self.users = db["users"]
        self.counters = db["counters"]
        self.task_service = TaskService(db)

    def _doc_to_entry(self, doc: dict) -> TimeEntry:
        """
        Convert database document to TimeEntry model.
        """
        return TimeEntry(
            _id=doc["_id"],
            user_id=doc["user_id"],
            task_id=doc["task_id"],
            start_time=doc["start_time"],
            end_time=doc.get("end_time"),
            duration_manual=doc.get("duration_manual"),
            notes=doc.get("notes"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    def _running_query(self, user_id: int) -> dict:
        return {
            "user_id": user_id,
            "end_time": None,
            "duration_manual": None,
        }

    async def start_timer(
        self,
        user_id: int,
        task_id: int,
        notes: Optional[str] = None,
        start_time: Optional[datetime] = None,
    ) -> TimeEntry:
        """
        Start a new timer.

        Args:
            user_id: User ID
            task_id: Task to track time against
            notes: Optional notes
            start_time: Optional start time (defaults to now)

        Returns:
            Created running time entry

        Raises:
            ValueError: If timer already running or task doesn't exist
        """
        running_timer = await self.time_entries.find_one(self._running_query(user_id))
        if running_timer:
            raise ValueError("Timer already running")

        task = await self.tasks.find_one({"_id": task_id, "archived": False})
        if not task:
            raise ValueError("Task not found")

        now = utc_now()
        if start_time is None:
            start_time = now

        entry_doc = {
            "_id": await next_id(self.counters, "time_entries"),
            "user_id": user_id,
            "task_id": task_id,
            "start_time": ensure_utc(start_time).replace(microsecond=0),
            "end_time": None,
            "duration_manual": None,
            "notes": notes,
            "created_at": now,
            "updated_at": now,
        }

        await self.time_entries.insert_one(entry_doc)
        logger.info("Started timer %s for user %s on task %s", entry_doc["_id"], user_id, task_id)

        await self.task_service.mark_in_progress(task_id)

        return self._doc_to_entry(entry_doc)

    async def stop_timer(
        self,
        user_id: int,
        end_time: Optional[datetime] = None,
    ) -> TimeEntry:
        """
        Stop the currently running timer.

        Args:
            user_id: User ID
            end_time: Optional end time (defaults to now)

        Returns:
            Completed time entry

        Raises:
            ValueError: If no timer is running or the end is not after the start
        """
        running_timer = await self.time_entries.find_one(self._running_query(user_id))
        if not running_timer:
            raise ValueError("No timer running")

        if end_time is None:
            end_time = utc_now()
        end_time = ensure_utc(end_time).replace(microsecond=0)

        duration = TimezoneService.calculate_duration(
            ensure_utc(running_timer["start_time"]),
            end_time,
        )

        updated_doc = await self.time_entries.find_one_and_update(
            {"_id": running_timer["_id"]},
            {"$set": {"end_time": end_time, "updated_at": utc_now()}},
            return_document=True,
        )

        logger.info(
            "Stopped timer %s for user %s after %s seconds",
            running_timer["_id"],
            user_id,
            duration,
        )
        return self._doc_to_entry(updated_doc)

    async def get_current_timer(
        self,
        user_id: int,
    ) -> Optional[TimeEntry]:
        """
        Get the currently running timer, if any.

        Args:
            user_id: User ID

        Returns:
            Current running time entry, or None
        """
        running_timer = await self.time_entries.find_one(self._running_query(user_id))

        if not running_timer:
            return None

        return self._doc_to_entry(running_timer)

    async def get_running_timers(self, user_id: Optional[int] = None) -> list[RunningTimer]:
        """
        List running timers, longest running first, with names attached.

        Timers on archived clients, projects or tasks are left out.

        Args:
            user_id: Only this user's timers (all users when omitted)

        Returns:
            Running timers with elapsed seconds as of now
        """
        clients, projects, tasks = await TimeEntryService(self.db).load_live_catalog()

        query = {
            "end_time": None,
            "duration_manual": None,
            "start_time": {"$ne": None},
            "task_id": {"$in": list(tasks)},
        }
        if user_id is not None:
            query["user_id"] = user_id

        cursor = self.time_entries.find(query).sort("start_time", 1)
        running_docs = await cursor.to_list(length=None)

        user_ids = list({doc["user_id"] for doc in running_docs})
        user_docs = await self.users.find({"_id": {"$in": user_ids}}).to_list(length=None)
        users = {doc["_id"]: doc for doc in user_docs}

        now = utc_now()
        timers = []
        for doc in running_docs:
            task = tasks[doc["task_id"]]
            project = projects[task["project_id"]]
            client = clients[project["client_id"]]
            start_time = ensure_utc(doc["start_time"])
            timers.append(RunningTimer(
                _id=doc["_id"],
                user_id=doc["user_id"],
                task_id=doc["task_id"],
                start_time=start_time,
                end_time=None,
                duration_manual=None,
                notes=doc.get("notes"),
                created_at=doc["created_at"],
                updated_at=doc["updated_at"],
                user_name=users.get(doc["user_id"], {}).get("name", ""),
                task_name=task["name"],
                project_name=project["name"],
                client_name=client["name"],
                # A start set in the future has not begun yet
                elapsed_seconds=max(0, math.floor((now - start_time).total_seconds())),
            ))
        return timers
