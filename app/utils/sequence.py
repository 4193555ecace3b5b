"""Integer id allocation backed by a counters collection."""
from pymongo import ReturnDocument


async def next_id(counters, name: str) -> int:
    """
    Allocate the next integer id for a collection.

    Args:
        counters: The ``counters`` collection
        name: Collection name the id is allocated for

    Returns:
        Next id, starting at 1

    Example:
        >>> entry_id = await next_id(db["counters"], "time_entries")
    """
    doc = await counters.find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return int(doc["seq"])
