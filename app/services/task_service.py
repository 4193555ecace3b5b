"""Task service - business logic for tasks, assignments and status."""
import logging
from typing import Optional

from app.exceptions import NotFoundError
from app.models.task import Task, TaskCreate, TaskStatus, TaskUpdate
from app.utils.instants import utc_now
from app.utils.sequence import next_id

logger = logging.getLogger(__name__)


class TaskService:
    """Service for handling task operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.tasks = db["tasks"]
        self.projects = db["projects"]
        self.users = db["users"]
        self.counters = db["counters"]

    def _doc_to_task(self, doc: dict) -> Task:
        """Convert database document to Task model."""
        return Task(
            _id=doc["_id"],
            project_id=doc["project_id"],
            name=doc["name"],
            description=doc.get("description"),
            status=doc["status"],
            archived=doc.get("archived", False),
            assignee_ids=doc.get("assignee_ids", []),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def create_task(self, task_create: TaskCreate) -> Task:
        """
        Create a new task under a project.

        Raises:
            ValueError: If the project doesn't exist or is archived
        """
        project = await self.projects.find_one({
            "_id": task_create.project_id,
            "archived": False,
        })
        if not project:
            raise ValueError("Project not found")

        now = utc_now()
        task_doc = {
            "_id": await next_id(self.counters, "tasks"),
            "project_id": task_create.project_id,
            "name": task_create.name,
            "description": task_create.description,
            "status": task_create.status.value,
            "archived": False,
            "assignee_ids": [],
            "created_at": now,
            "updated_at": now,
        }

        await self.tasks.insert_one(task_doc)
        return self._doc_to_task(task_doc)

    async def list_tasks(
        self,
        project_id: Optional[int] = None,
        assignee_id: Optional[int] = None,
        include_archived: bool = False,
    ) -> list[Task]:
        """
        List tasks with optional filtering.

        Args:
            project_id: Optional project filter
            assignee_id: Optional filter on assigned user
            include_archived: Include archived tasks

        Returns:
            List of tasks ordered by id
        """
        query = {}
        if not include_archived:
            query["archived"] = False
        if project_id is not None:
            query["project_id"] = project_id
        if assignee_id is not None:
            query["assignee_ids"] = assignee_id

        cursor = self.tasks.find(query).sort("_id", 1)
        task_docs = await cursor.to_list(length=None)
        return [self._doc_to_task(doc) for doc in task_docs]

    async def get_task(self, task_id: int) -> Optional[Task]:
        """Get a task by ID, or None."""
        doc = await self.tasks.find_one({"_id": task_id})
        return self._doc_to_task(doc) if doc else None

    async def update_task(self, task_id: int, task_update: TaskUpdate) -> Task:
        """
        Update a task. Only supplied fields change.

        Raises:
            NotFoundError: If the task doesn't exist
        """
        update_doc = {"updated_at": utc_now()}
        for field, value in task_update.model_dump(exclude_unset=True).items():
            update_doc[field] = value.value if isinstance(value, TaskStatus) else value

        updated_doc = await self.tasks.find_one_and_update(
            {"_id": task_id},
            {"$set": update_doc},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("Task not found")

        return self._doc_to_task(updated_doc)

    async def assign_user(self, task_id: int, user_id: int) -> Task:
        """
        Assign a user to a task. Assigning twice is a no-op.

        Raises:
            ValueError: If the user doesn't exist
            NotFoundError: If the task doesn't exist
        """
        user = await self.users.find_one({"_id": user_id})
        if not user:
            raise ValueError("User not found")

        updated_doc = await self.tasks.find_one_and_update(
            {"_id": task_id},
            {"$addToSet": {"assignee_ids": user_id}, "$set": {"updated_at": utc_now()}},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("Task not found")

        return self._doc_to_task(updated_doc)

    async def unassign_user(self, task_id: int, user_id: int) -> Task:
        """
        Remove a user from a task.

        Raises:
            NotFoundError: If the task doesn't exist
        """
        updated_doc = await self.tasks.find_one_and_update(
            {"_id": task_id},
            {"$pull": {"assignee_ids": user_id}, "$set": {"updated_at": utc_now()}},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("Task not found")

        return self._doc_to_task(updated_doc)

    async def mark_in_progress(self, task_id: int) -> bool:
        """
        Advance a pending task to in-progress.

        The status check and write are one conditional update, so concurrent
        first entries on the same task flip it exactly once.

        Returns:
            True if this call changed the status
        """
        result = await self.tasks.update_one(
            {"_id": task_id, "status": TaskStatus.PENDING.value},
            {"$set": {"status": TaskStatus.IN_PROGRESS.value, "updated_at": utc_now()}},
        )
        if result.modified_count:
            logger.info("Task %s moved from pending to in-progress", task_id)
            return True
        return False
