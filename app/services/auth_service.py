"""Authentication service - business logic for user auth."""
import logging

from app.exceptions import NotFoundError, PermissionDeniedError
from app.models.user import CurrentUser, User, UserRole, UserStatus
from app.services.user_service import doc_to_user
from app.utils.auth import create_access_token, hash_password, verify_password
from app.utils.instants import utc_now
from app.utils.sequence import next_id

logger = logging.getLogger(__name__)


class AuthService:
    """Service for handling user authentication."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]
        self.counters = db["counters"]

    async def register_user(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """
        Register a new user.

        Args:
            email: User email address
            password: Plain text password
            name: User's name
            role: Initial role (operators create admins through scripts)

        Returns:
            User object (without password)

        Raises:
            ValueError: If email is already registered
        """
        existing = await self.users.find_one({"email": email})
        if existing:
            raise ValueError("Email already registered")

        now = utc_now()
        user_doc = {
            "_id": await next_id(self.counters, "users"),
            "email": email,
            "hashed_password": hash_password(password),
            "name": name,
            "role": role.value,
            "status": UserStatus.ACTIVE.value,
            "created_at": now,
            "updated_at": now,
        }

        await self.users.insert_one(user_doc)
        logger.info("Registered user %s with role %s", user_doc["_id"], role.value)

        return doc_to_user(user_doc)

    async def login(self, email: str, password: str) -> str:
        """
        Login user and return JWT token.

        Args:
            email: User email
            password: Plain text password

        Returns:
            JWT access token

        Raises:
            ValueError: If credentials are invalid or the account is inactive
        """
        user_doc = await self.users.find_one({"email": email})
        if not user_doc:
            raise ValueError("Invalid email or password")

        if not verify_password(password, user_doc["hashed_password"]):
            logger.warning("Failed login for user %s", user_doc["_id"])
            raise ValueError("Invalid email or password")

        if user_doc.get("status", UserStatus.ACTIVE.value) != UserStatus.ACTIVE.value:
            raise ValueError("Account is inactive")

        return create_access_token(user_id=user_doc["_id"])

    async def get_user_by_id(self, user_id: int) -> User:
        """
        Get user by ID.

        Raises:
            NotFoundError: If user not found
        """
        user_doc = await self.users.find_one({"_id": user_id})
        if not user_doc:
            raise NotFoundError("User not found")

        return doc_to_user(user_doc)

    async def get_current_user(self, user_id: int) -> CurrentUser:
        """
        Resolve a token subject to the caller's identity.

        Raises:
            NotFoundError: If the user no longer exists
            PermissionDeniedError: If the account is inactive
        """
        user = await self.get_user_by_id(user_id)
        if user.status != UserStatus.ACTIVE:
            raise PermissionDeniedError("Account is inactive")

        return CurrentUser(id=user.id, role=user.role, status=user.status)
