"""User service - account administration."""
import logging

from app.exceptions import NotFoundError
from app.models.user import User, UserRole, UserStatus
from app.utils.instants import utc_now

logger = logging.getLogger(__name__)


def doc_to_user(doc: dict) -> User:
    """Convert database document to User model (password hash dropped)."""
    return User(
        _id=doc["_id"],
        email=doc["email"],
        name=doc["name"],
        role=doc.get("role", UserRole.USER.value),
        status=doc.get("status", UserStatus.ACTIVE.value),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class UserService:
    """Service for listing users and changing their role or status."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]

    async def list_users(self) -> list[User]:
        """List all users ordered by name."""
        cursor = self.users.find({}).sort("name", 1)
        user_docs = await cursor.to_list(length=None)
        return [doc_to_user(doc) for doc in user_docs]

    async def _set(self, user_id: int, field: str, value: str) -> User:
        updated_doc = await self.users.find_one_and_update(
            {"_id": user_id},
            {"$set": {field: value, "updated_at": utc_now()}},
            return_document=True,
        )
        if not updated_doc:
            raise NotFoundError("User not found")

        logger.info("User %s %s set to %s", user_id, field, value)
        return doc_to_user(updated_doc)

    async def set_role(self, user_id: int, role: UserRole) -> User:
        """
        Change a user's role.

        Raises:
            NotFoundError: If the user doesn't exist
        """
        return await self._set(user_id, "role", role.value)

    async def set_status(self, user_id: int, status: UserStatus) -> User:
        """
        Activate or deactivate a user.

        Raises:
            NotFoundError: If the user doesn't exist
        """
        return await self._set(user_id, "status", status.value)
