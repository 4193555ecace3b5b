"""Client service - business logic for client management."""
import logging
from typing import Optional

from app.exceptions import NotFoundError
from app.models.client import Client, ClientCreate, ClientUpdate
from app.utils.instants import utc_now
from app.utils.sequence import next_id

logger = logging.getLogger(__name__)


class ClientService:
    """Service for handling client operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.clients = db["clients"]
        self.counters = db["counters"]

    def _doc_to_client(self, doc: dict) -> Client:
        """Convert database document to Client model."""
        return Client(
            _id=doc["_id"],
            name=doc["name"],
            created_by=doc["created_by"],
            archived=doc.get("archived", False),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def create_client(self, user_id: int, client_create: ClientCreate) -> Client:
        """
        Create a new client.

        Args:
            user_id: ID of the admin creating the client
            client_create: Client creation data

        Returns:
            Created client
        """
        now = utc_now()
        client_doc = {
            "_id": await next_id(self.counters, "clients"),
            "name": client_create.name,
            "created_by": user_id,
            "archived": False,
            "created_at": now,
            "updated_at": now,
        }

        await self.clients.insert_one(client_doc)
        logger.info("Created client %s (%s)", client_doc["_id"], client_create.name)
        return self._doc_to_client(client_doc)

    async def list_clients(self, include_archived: bool = False) -> list[Client]:
        """List clients ordered by name."""
        query = {} if include_archived else {"archived": False}
        cursor = self.clients.find(query).sort("name", 1)
        client_docs = await cursor.to_list(length=None)
        return [self._doc_to_client(doc) for doc in client_docs]

    async def get_client(self, client_id: int) -> Optional[Client]:
        """Get a client by ID, or None."""
        doc = await self.clients.find_one({"_id": client_id})
        return self._doc_to_client(doc) if doc else None

    async def update_client(self, client_id: int, client_update: ClientUpdate) -> Client:
        """
        Update a client. Only supplied fields change.

        Raises:
            NotFoundError: If the client doesn't exist
        """
        update_doc = {"updated_at": utc_now()}
        update_doc.update(client_update.model_dump(exclude_unset=True))

        updated_doc = await self.clients.find_one_and_update(
            {"_id": client_id},
            {"$set": update_doc},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("Client not found")

        return self._doc_to_client(updated_doc)
