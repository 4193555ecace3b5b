"""Tests for TimerService."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock


UTC = timezone.utc


def make_db(running_timer=None, task_exists=True):
    mock_db = MagicMock()
    mock_entries = AsyncMock()
    mock_tasks = AsyncMock()
    mock_counters = AsyncMock()

    mock_entries.find_one.return_value = running_timer
    mock_tasks.find_one.return_value = (
        {"_id": 5, "name": "Landing page", "status": "pending", "archived": False}
        if task_exists else None
    )
    mock_tasks.update_one.return_value = MagicMock(modified_count=1)
    mock_counters.find_one_and_update.return_value = {"_id": "time_entries", "seq": 21}

    collections = {
        "time_entries": mock_entries,
        "tasks": mock_tasks,
        "projects": AsyncMock(),
        "users": AsyncMock(),
        "counters": mock_counters,
    }
    mock_db.__getitem__.side_effect = lambda key: collections[key]
    return mock_db, collections


def running_doc(start_time):
    return {
        "_id": 21,
        "user_id": 1,
        "task_id": 5,
        "start_time": start_time,
        "end_time": None,
        "duration_manual": None,
        "notes": "Reading chapter 3",
        "created_at": start_time,
        "updated_at": start_time,
    }


@pytest.mark.asyncio
class TestTimerServiceStart:
    """Tests for starting timers."""

    async def test_start_timer_success(self):
        """Starting a timer stores a start time and nothing else."""
        from app.services.timer_service import TimerService

        mock_db, collections = make_db()
        service = TimerService(mock_db)
        start_time = datetime(2024, 3, 1, 9, 0, 30, 500000, tzinfo=UTC)

        entry = await service.start_timer(
            user_id=1,
            task_id=5,
            notes="Reading chapter 3",
            start_time=start_time,
        )

        assert entry.id == 21
        assert entry.task_id == 5
        assert entry.notes == "Reading chapter 3"
        assert entry.start_time == datetime(2024, 3, 1, 9, 0, 30, tzinfo=UTC)
        assert entry.end_time is None
        assert entry.duration_manual is None
        assert entry.is_running is True
        assert entry.duration == 0

    async def test_start_timer_flips_task(self):
        """Starting a timer advances a pending task."""
        from app.services.timer_service import TimerService

        mock_db, collections = make_db()
        service = TimerService(mock_db)

        await service.start_timer(user_id=1, task_id=5)

        query = collections["tasks"].update_one.call_args[0][0]
        assert query == {"_id": 5, "status": "pending"}

    async def test_start_timer_with_running_timer(self):
        """Starting a timer when one is already running fails."""
        from app.services.timer_service import TimerService

        mock_db, collections = make_db(running_timer=running_doc(datetime.now(UTC)))
        service = TimerService(mock_db)

        with pytest.raises(ValueError, match="Timer already running"):
            await service.start_timer(user_id=1, task_id=5)
        collections["time_entries"].insert_one.assert_not_called()

    async def test_start_timer_with_nonexistent_task(self):
        """Starting a timer on an unknown task fails."""
        from app.services.timer_service import TimerService

        mock_db, _ = make_db(task_exists=False)
        service = TimerService(mock_db)

        with pytest.raises(ValueError, match="Task not found"):
            await service.start_timer(user_id=1, task_id=404)


@pytest.mark.asyncio
class TestTimerServiceStop:
    """Tests for stopping timers."""

    async def test_stop_timer_success(self):
        """Stopping sets the end time and leaves a range entry."""
        from app.services.timer_service import TimerService

        start_time = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
        end_time = start_time + timedelta(hours=2)
        mock_db, collections = make_db(running_timer=running_doc(start_time))

        async def apply_update(query, update, return_document):
            return {**running_doc(start_time), **update["$set"]}

        collections["time_entries"].find_one_and_update.side_effect = apply_update
        service = TimerService(mock_db)

        entry = await service.stop_timer(user_id=1, end_time=end_time)

        assert entry.end_time == end_time
        assert entry.duration == 7200
        assert entry.is_running is False
        query = collections["time_entries"].find_one_and_update.call_args[0][0]
        assert query == {"_id": 21}

    async def test_stop_timer_naive_start_from_store(self):
        """Naive datetimes read back from the store are treated as UTC."""
        from app.services.timer_service import TimerService

        naive_start = datetime(2024, 3, 1, 9, 0)
        mock_db, collections = make_db(running_timer=running_doc(naive_start))
        collections["time_entries"].find_one_and_update.return_value = {
            **running_doc(naive_start),
            "end_time": datetime(2024, 3, 1, 10, 0),
        }
        service = TimerService(mock_db)

        entry = await service.stop_timer(
            user_id=1,
            end_time=datetime(2024, 3, 1, 10, 0, tzinfo=UTC),
        )

        assert entry.duration == 3600
        assert entry.start_time.tzinfo is not None

    async def test_stop_timer_before_start(self):
        """An end before the start is rejected."""
        from app.services.timer_service import TimerService

        start_time = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
        mock_db, collections = make_db(running_timer=running_doc(start_time))
        service = TimerService(mock_db)

        with pytest.raises(ValueError, match="End time must be after start time"):
            await service.stop_timer(user_id=1, end_time=start_time - timedelta(minutes=5))
        collections["time_entries"].find_one_and_update.assert_not_called()

    async def test_stop_timer_no_running_timer(self):
        """Stopping when no timer is running fails."""
        from app.services.timer_service import TimerService

        mock_db, _ = make_db()
        service = TimerService(mock_db)

        with pytest.raises(ValueError, match="No timer running"):
            await service.stop_timer(user_id=1)


@pytest.mark.asyncio
class TestTimerServiceCurrent:
    """Tests for getting the current timer."""

    async def test_get_current_timer_running(self):
        """The running entry is returned."""
        from app.services.timer_service import TimerService

        mock_db, collections = make_db(running_timer=running_doc(datetime.now(UTC)))
        service = TimerService(mock_db)

        entry = await service.get_current_timer(user_id=1)

        assert entry is not None
        assert entry.id == 21
        query = collections["time_entries"].find_one.call_args[0][0]
        assert query == {"user_id": 1, "end_time": None, "duration_manual": None}

    async def test_get_current_timer_none(self):
        """None when nothing runs."""
        from app.services.timer_service import TimerService

        mock_db, _ = make_db()
        service = TimerService(mock_db)

        assert await service.get_current_timer(user_id=1) is None


def cursor(docs):
    mock_cursor = MagicMock()
    mock_cursor.sort.return_value = mock_cursor
    mock_cursor.to_list = AsyncMock(return_value=docs)
    return mock_cursor


@pytest.mark.asyncio
class TestTimerServiceRunning:
    """Tests for listing everyone's running timers."""

    def make_running_db(self, running):
        mock_db = MagicMock()
        collections = {
            "time_entries": MagicMock(),
            "tasks": MagicMock(),
            "projects": MagicMock(),
            "clients": MagicMock(),
            "users": MagicMock(),
            "counters": MagicMock(),
        }
        collections["clients"].find.return_value = cursor([
            {"_id": 1, "name": "Acme", "archived": False},
        ])
        collections["projects"].find.return_value = cursor([
            {"_id": 2, "client_id": 1, "name": "Website", "archived": False},
        ])
        collections["tasks"].find.return_value = cursor([
            {"_id": 5, "project_id": 2, "name": "Landing page", "archived": False},
        ])
        collections["time_entries"].find.return_value = cursor(running)
        collections["users"].find.return_value = cursor([
            {"_id": 1, "name": "Wally"},
        ])
        mock_db.__getitem__.side_effect = lambda key: collections[key]
        return mock_db, collections

    async def test_running_timers_enriched(self):
        """Each timer carries names and seconds elapsed so far."""
        from unittest.mock import patch
        from app.services.timer_service import TimerService

        now = datetime(2024, 3, 1, 10, 30, tzinfo=UTC)
        mock_db, _ = self.make_running_db([running_doc(datetime(2024, 3, 1, 9, 0, tzinfo=UTC))])
        service = TimerService(mock_db)

        with patch("app.services.timer_service.utc_now", return_value=now):
            timers = await service.get_running_timers()

        assert len(timers) == 1
        timer = timers[0]
        assert timer.id == 21
        assert timer.elapsed_seconds == 5400
        assert timer.user_name == "Wally"
        assert timer.task_name == "Landing page"
        assert timer.project_name == "Website"
        assert timer.client_name == "Acme"
        assert timer.end_time is None

    async def test_running_timers_query(self):
        """Only running entries on live tasks, longest running first."""
        from app.services.timer_service import TimerService

        mock_db, collections = self.make_running_db([])
        service = TimerService(mock_db)

        assert await service.get_running_timers() == []

        query = collections["time_entries"].find.call_args[0][0]
        assert query["end_time"] is None
        assert query["duration_manual"] is None
        assert query["task_id"] == {"$in": [5]}
        assert "user_id" not in query
        collections["time_entries"].find.return_value.sort.assert_called_once_with("start_time", 1)

    async def test_running_timers_for_one_user(self):
        from app.services.timer_service import TimerService

        mock_db, collections = self.make_running_db([])
        service = TimerService(mock_db)

        await service.get_running_timers(user_id=7)

        assert collections["time_entries"].find.call_args[0][0]["user_id"] == 7

    async def test_future_start_counts_as_zero(self):
        from unittest.mock import patch
        from app.services.timer_service import TimerService

        now = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)
        mock_db, _ = self.make_running_db([running_doc(datetime(2024, 3, 1, 9, 0, tzinfo=UTC))])
        service = TimerService(mock_db)

        with patch("app.services.timer_service.utc_now", return_value=now):
            timers = await service.get_running_timers()

        assert timers[0].elapsed_seconds == 0
