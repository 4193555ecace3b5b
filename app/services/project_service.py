"""Project service - business logic for project management."""
import logging
from typing import Optional

from app.exceptions import NotFoundError
from app.models.project import Project, ProjectCreate, ProjectUpdate
from app.utils.instants import utc_now
from app.utils.sequence import next_id

logger = logging.getLogger(__name__)


class ProjectService:
    """Service for handling project operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.projects = db["projects"]
        self.clients = db["clients"]
        self.counters = db["counters"]

    def _doc_to_project(self, doc: dict) -> Project:
        """Convert database document to Project model."""
        return Project(
            _id=doc["_id"],
            client_id=doc["client_id"],
            name=doc["name"],
            archived=doc.get("archived", False),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def create_project(self, project_create: ProjectCreate) -> Project:
        """
        Create a new project under a client.

        Args:
            project_create: Project creation data

        Returns:
            Created project object

        Raises:
            ValueError: If the client doesn't exist or is archived
        """
        client = await self.clients.find_one({
            "_id": project_create.client_id,
            "archived": False,
        })
        if not client:
            raise ValueError("Client not found")

        now = utc_now()
        project_doc = {
            "_id": await next_id(self.counters, "projects"),
            "client_id": project_create.client_id,
            "name": project_create.name,
            "archived": False,
            "created_at": now,
            "updated_at": now,
        }

        await self.projects.insert_one(project_doc)
        logger.info("Created project %s under client %s", project_doc["_id"], project_create.client_id)
        return self._doc_to_project(project_doc)

    async def list_projects(
        self,
        client_id: Optional[int] = None,
        include_archived: bool = False,
    ) -> list[Project]:
        """
        List projects with optional filtering.

        Args:
            client_id: Optional client filter
            include_archived: Include archived projects

        Returns:
            List of projects ordered by name
        """
        query = {}
        if not include_archived:
            query["archived"] = False
        if client_id is not None:
            query["client_id"] = client_id

        cursor = self.projects.find(query).sort("name", 1)
        project_docs = await cursor.to_list(length=None)
        return [self._doc_to_project(doc) for doc in project_docs]

    async def get_project(self, project_id: int) -> Optional[Project]:
        """
        Get a single project by ID.

        Args:
            project_id: Project ID

        Returns:
            Project object or None if not found
        """
        doc = await self.projects.find_one({"_id": project_id})
        return self._doc_to_project(doc) if doc else None

    async def update_project(self, project_id: int, project_update: ProjectUpdate) -> Project:
        """
        Update a project.

        Args:
            project_id: Project ID
            project_update: Fields to update

        Returns:
            Updated project object

        Raises:
            NotFoundError: If project not found
        """
        update_doc = {"updated_at": utc_now()}
        update_doc.update(project_update.model_dump(exclude_unset=True))

        updated_doc = await self.projects.find_one_and_update(
            {"_id": project_id},
            {"$set": update_doc},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("Project not found")

        return self._doc_to_project(updated_doc)
