"""Time entry service - validation, timezone normalization and persistence."""
import logging
from datetime import datetime, timedelta
from typing import Optional

from app.exceptions import NotFoundError
from app.models.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
    TimeEntryWithDetails,
)
from app.models.time_spec import (
    InstantBound,
    InstantRange,
    LocalBound,
    LocalRange,
    ManualDuration,
    TimeSpec,
)
from app.services.task_service import TaskService
from app.services.timezone_service import TimezoneService
from app.services.validation_service import ValidationService
from app.utils.instants import utc_now
from app.utils.sequence import next_id

logger = logging.getLogger(__name__)

# Entries that are still running have neither an end nor a manual duration.
COMPLETED_ENTRY_QUERY = {
    "$or": [
        {"end_time": {"$ne": None}},
        {"duration_manual": {"$ne": None}},
    ],
}


class TimeEntryService:
    """Service for creating, updating and listing time entries."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.tasks = db["tasks"]
        self.projects = db["projects"]
        self.clients = db["clients"]
        self.users = db["users"]
        self.counters = db["counters"]
        self.task_service = TaskService(db)

    def _doc_to_entry(self, doc: dict) -> TimeEntry:
        """Convert database document to TimeEntry model."""
        return TimeEntry(
            _id=doc["_id"],
            user_id=doc["user_id"],
            task_id=doc["task_id"],
            start_time=doc.get("start_time"),
            end_time=doc.get("end_time"),
            duration_manual=doc.get("duration_manual"),
            notes=doc.get("notes"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    @staticmethod
    def _day_shift(instant: datetime, date_string: Optional[str]) -> timedelta:
        """Whole days that move an instant's UTC date onto ``date_string``."""
        if not date_string:
            return timedelta(0)
        anchor = TimezoneService.create_user_date(date_string)
        return anchor.date() - instant.date()

    def _resolve_time_spec(
        self,
        time_spec: TimeSpec,
        current: Optional[TimeEntry] = None,
    ) -> dict:
        """
        Turn a temporal variant into the fields to persist.

        Args:
            time_spec: Temporal variant from ValidationService
            current: Existing entry when updating

        Returns:
            Dict with some of start_time, end_time, duration_manual

        Raises:
            ValueError: If the resulting end is not after the start
        """
        if isinstance(time_spec, InstantRange):
            start = TimezoneService.from_user_iso_string(time_spec.start)
            end = TimezoneService.from_user_iso_string(time_spec.end)
            if current is not None:
                # One shift for both bounds so a range over UTC midnight stays intact
                shift = self._day_shift(start, time_spec.task_date)
                start += shift
                end += shift
            TimezoneService.calculate_duration(start, end)
            return {"start_time": start, "end_time": end, "duration_manual": None}

        if isinstance(time_spec, LocalRange):
            start = TimezoneService.local_to_utc(
                time_spec.task_date,
                time_spec.start_hours,
                time_spec.start_minutes,
                time_spec.tz_offset_minutes,
            )
            # An end wall time before the start wall time finishes the next day
            start_of_day = time_spec.start_hours * 60 + time_spec.start_minutes
            end_of_day = time_spec.end_hours * 60 + time_spec.end_minutes
            end_date = (
                TimezoneService.get_next_day(time_spec.task_date)
                if end_of_day < start_of_day
                else time_spec.task_date
            )
            end = TimezoneService.local_to_utc(
                end_date,
                time_spec.end_hours,
                time_spec.end_minutes,
                time_spec.tz_offset_minutes,
            )
            TimezoneService.calculate_duration(start, end)
            return {"start_time": start, "end_time": end, "duration_manual": None}

        if isinstance(time_spec, ManualDuration):
            if time_spec.task_date:
                start = TimezoneService.create_user_date(time_spec.task_date)
            elif current is not None and current.start_time is not None:
                start = current.start_time
            else:
                start = TimezoneService.create_user_date(TimezoneService.get_today_string())
            return {"start_time": start, "end_time": None, "duration_manual": time_spec.seconds}

        if isinstance(time_spec, (InstantBound, LocalBound)):
            if isinstance(time_spec, InstantBound):
                instant = TimezoneService.from_user_iso_string(time_spec.at)
                instant += self._day_shift(instant, time_spec.task_date)
            else:
                instant = TimezoneService.local_to_utc(
                    time_spec.task_date,
                    time_spec.hours,
                    time_spec.minutes,
                    time_spec.tz_offset_minutes,
                )

            start = current.start_time if current else None
            end = current.end_time if current else None
            if time_spec.bound == "start":
                start = instant
                fields = {"start_time": instant}
            else:
                end = instant
                fields = {"end_time": instant}

            if start is not None and end is not None:
                TimezoneService.calculate_duration(start, end)
                fields["duration_manual"] = None
            return fields

        raise ValueError(f"Unsupported time variant: {time_spec!r}")

    async def _has_running_timer(self, user_id: int) -> bool:
        running = await self.time_entries.find_one({
            "user_id": user_id,
            "end_time": None,
            "duration_manual": None,
        })
        return running is not None

    async def _require_task(self, task_id: int) -> None:
        task = await self.tasks.find_one({"_id": task_id, "archived": False})
        if not task:
            raise ValueError("Task not found")

    async def create_time_entry(self, request: TimeEntryCreate) -> TimeEntry:
        """
        Create a time entry from any of the three request shapes.

        Args:
            request: Create request (ISO pair, hour/minute components, or duration)

        Returns:
            Created time entry

        Raises:
            ValueError: If validation fails, the task doesn't exist, or a
                manual duration is logged while a timer is running
        """
        validation = ValidationService.validate_create_request(request)
        if not validation.is_valid:
            logger.warning("Rejected time entry for user %s: %s", request.user_id, validation.error)
            raise ValueError(validation.error)

        time_spec = ValidationService.time_spec_for_create(request)
        fields = self._resolve_time_spec(time_spec)

        await self._require_task(request.task_id)

        if isinstance(time_spec, ManualDuration) and await self._has_running_timer(request.user_id):
            raise ValueError(
                "Cannot create manual duration entry while timer is running. "
                "Please stop the timer first."
            )

        now = utc_now()
        entry_doc = {
            "_id": await next_id(self.counters, "time_entries"),
            "user_id": request.user_id,
            "task_id": request.task_id,
            "notes": request.notes,
            "created_at": now,
            "updated_at": now,
            **fields,
        }

        await self.time_entries.insert_one(entry_doc)
        logger.info(
            "Created time entry %s for user %s on task %s (%s)",
            entry_doc["_id"],
            request.user_id,
            request.task_id,
            time_spec.kind,
        )

        await self.task_service.mark_in_progress(request.task_id)

        return self._doc_to_entry(entry_doc)

    async def update_time_entry(self, entry_id: int, request: TimeEntryUpdate) -> TimeEntry:
        """
        Apply a partial update to a time entry.

        Fields not present in the request keep their persisted values.

        Raises:
            ValueError: If validation fails or the new task doesn't exist
            NotFoundError: If the entry doesn't exist
        """
        validation = ValidationService.validate_update_request(request)
        if not validation.is_valid:
            logger.warning("Rejected update of time entry %s: %s", entry_id, validation.error)
            raise ValueError(validation.error)

        existing = await self.time_entries.find_one({"_id": entry_id})
        if not existing:
            raise NotFoundError("Time entry not found")
        current = self._doc_to_entry(existing)

        update_doc = {"updated_at": utc_now()}

        time_spec = ValidationService.time_spec_for_update(request)
        if time_spec is not None:
            update_doc.update(self._resolve_time_spec(time_spec, current))

        if request.created_at:
            update_doc["created_at"] = TimezoneService.from_user_iso_string(request.created_at)
        if request.task_id:
            await self._require_task(request.task_id)
            update_doc["task_id"] = request.task_id
        if "notes" in request.model_fields_set:
            update_doc["notes"] = request.notes

        updated_doc = await self.time_entries.find_one_and_update(
            {"_id": entry_id},
            {"$set": update_doc},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("Time entry not found")

        logger.info("Updated time entry %s (%s)", entry_id, ", ".join(sorted(update_doc)))
        return self._doc_to_entry(updated_doc)

    async def delete_time_entry(self, entry_id: int) -> dict:
        """
        Delete a time entry.

        Returns:
            Dictionary with deleted_count

        Raises:
            NotFoundError: If no entry was deleted
        """
        result = await self.time_entries.delete_one({"_id": entry_id})
        if result.deleted_count == 0:
            raise NotFoundError("Time entry not found")

        logger.info("Deleted time entry %s", entry_id)
        return {"deleted_count": result.deleted_count}

    async def get_time_entry(self, entry_id: int) -> Optional[TimeEntry]:
        """Get a time entry by ID, or None."""
        doc = await self.time_entries.find_one({"_id": entry_id})
        return self._doc_to_entry(doc) if doc else None

    async def get_user_time_entries(
        self,
        user_id: int,
        limit: int = 10,
    ) -> list[TimeEntryWithDetails]:
        """
        List a user's completed entries, newest first, with names attached.

        Entries under an archived client, project or task are left out.
        """
        return await self._list_with_details({"user_id": user_id}, limit=limit)

    async def get_all_time_entries(self) -> list[TimeEntryWithDetails]:
        """List every completed entry, newest first, with names attached."""
        return await self._list_with_details({})

    async def load_live_catalog(self) -> tuple[dict, dict, dict]:
        """
        Load the clients, projects and tasks that time can be reported on.

        Anything archived, or sitting under something archived, is left out.

        Returns:
            (clients, projects, tasks) documents keyed by id
        """
        client_docs = await self.clients.find({"archived": False}).to_list(length=None)
        clients = {doc["_id"]: doc for doc in client_docs}

        project_docs = await self.projects.find({
            "archived": False,
            "client_id": {"$in": list(clients)},
        }).to_list(length=None)
        projects = {doc["_id"]: doc for doc in project_docs}

        task_docs = await self.tasks.find({
            "archived": False,
            "project_id": {"$in": list(projects)},
        }).to_list(length=None)
        tasks = {doc["_id"]: doc for doc in task_docs}

        return clients, projects, tasks

    async def _list_with_details(
        self,
        query: dict,
        limit: Optional[int] = None,
    ) -> list[TimeEntryWithDetails]:
        clients, projects, tasks = await self.load_live_catalog()

        cursor = self.time_entries.find({
            **query,
            **COMPLETED_ENTRY_QUERY,
            "task_id": {"$in": list(tasks)},
        }).sort("start_time", -1)
        if limit is not None:
            cursor = cursor.limit(limit)
        entry_docs = await cursor.to_list(length=None)

        user_ids = list({doc["user_id"] for doc in entry_docs})
        user_docs = await self.users.find({"_id": {"$in": user_ids}}).to_list(length=None)
        users = {doc["_id"]: doc for doc in user_docs}

        entries = []
        for doc in entry_docs:
            task = tasks[doc["task_id"]]
            project = projects[task["project_id"]]
            client = clients[project["client_id"]]
            user = users.get(doc["user_id"], {})
            entries.append(TimeEntryWithDetails(
                _id=doc["_id"],
                user_id=doc["user_id"],
                task_id=doc["task_id"],
                start_time=doc.get("start_time"),
                end_time=doc.get("end_time"),
                duration_manual=doc.get("duration_manual"),
                notes=doc.get("notes"),
                created_at=doc["created_at"],
                updated_at=doc["updated_at"],
                user_name=user.get("name", ""),
                task_name=task["name"],
                project_name=project["name"],
                client_name=client["name"],
            ))
        return entries
