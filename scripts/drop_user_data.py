"""Drop all time tracking data for a specific user."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient


async def drop_user_data(db, user_id: int) -> dict:
    """Delete a user's time entries (running timers included) and task assignments."""
    entries = await db["time_entries"].delete_many({"user_id": user_id})
    print(f"Deleted {entries.deleted_count} documents from time_entries")

    tasks = await db["tasks"].update_many(
        {"assignee_ids": user_id},
        {"$pull": {"assignee_ids": user_id}},
    )
    print(f"Removed assignments from {tasks.modified_count} tasks")

    return {
        "time_entries": entries.deleted_count,
        "assignments": tasks.modified_count,
    }


async def main(mongodb_url: str, db_name: str, user_id: int):
    client = AsyncIOMotorClient(mongodb_url, tz_aware=True)
    try:
        await drop_user_data(client[db_name], user_id)
    finally:
        client.close()
    print("Done!")


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("Usage: python drop_user_data.py <mongodb_url> <db_name> <user_id>")
        sys.exit(1)

    asyncio.run(main(sys.argv[1], sys.argv[2], int(sys.argv[3])))
