"""Create an admin account, or promote an existing user to admin.

Usage:
    python scripts/create_admin.py \\
        --email admin@example.com \\
        --name "Site Admin" \\
        --password <password> \\
        --mongodb-url mongodb://localhost:27017
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient
from app.models.user import User, UserRole, UserStatus
from app.services.auth_service import AuthService
from app.services.user_service import UserService


async def create_admin(db, email: str, name: str, password: str) -> User:
    """
    Make sure an active admin with this email exists.

    An existing account keeps its password and is promoted and reactivated.
    """
    existing = await db["users"].find_one({"email": email})
    if existing:
        users = UserService(db)
        await users.set_status(existing["_id"], UserStatus.ACTIVE)
        user = await users.set_role(existing["_id"], UserRole.ADMIN)
        print(f"Promoted existing user {user.id} ({email}) to admin")
        return user

    user = await AuthService(db).register_user(
        email=email,
        password=password,
        name=name,
        role=UserRole.ADMIN,
    )
    print(f"Created admin user {user.id} ({email})")
    return user


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Create or promote an admin user")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--name", default="Admin", help="Display name for a new account")
    parser.add_argument("--password", required=True, help="Password for a new account")
    parser.add_argument(
        "--mongodb-url",
        default="mongodb://localhost:27017",
        help="MongoDB connection URL",
    )
    parser.add_argument(
        "--db-name",
        default="timekeeper",
        help="MongoDB database name",
    )

    args = parser.parse_args()

    client = AsyncIOMotorClient(args.mongodb_url, tz_aware=True)
    try:
        await create_admin(client[args.db_name], args.email, args.name, args.password)
    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(main())
