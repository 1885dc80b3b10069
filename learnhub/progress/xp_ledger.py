"""
XP / Stats Ledger
The only module allowed to write users.stats.

record_lesson_completion() upserts the progress record with a single atomic
find_one_and_update that hands back the document *before* the write. That
pre-image is the award gate: XP is credited only when the stored record went
from not-completed (or absent) to completed. Two racing requests cannot both
observe the not-completed pre-image, so at most one award happens.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from learnhub import config
from learnhub.core.database import generate_id, utcnow
from learnhub.core.errors import NotFound
from learnhub.progress.progress_models import UserStats

logger = logging.getLogger(__name__)


async def _upsert_progress(
    db: AsyncIOMotorDatabase,
    user_id: str,
    lesson_id: str,
    target_completed: bool,
) -> Optional[dict]:
    """Write the new state and return the stored state from before the write"""
    now = utcnow()
    query = {"user_id": user_id, "lesson_id": lesson_id}
    update = {
        "$set": {
            "is_completed": target_completed,
            "completed_at": now if target_completed else None,
            "updated_at": now,
        },
        "$setOnInsert": {"progress_id": generate_id("PRG")},
    }

    try:
        return await db.lesson_progress.find_one_and_update(
            query, update, upsert=True, return_document=ReturnDocument.BEFORE
        )
    except DuplicateKeyError:
        # Lost an insert race on (user_id, lesson_id): the row exists now,
        # so a second attempt is a plain atomic update with a real pre-image.
        return await db.lesson_progress.find_one_and_update(
            query, update, upsert=True, return_document=ReturnDocument.BEFORE
        )


async def _award(db: AsyncIOMotorDatabase, user_id: str, lesson_id: str, progress_id: str) -> bool:
    xp = config.LESSON_COMPLETION_XP

    result = await db.users.update_one(
        {"user_id": user_id},
        {"$inc": {"stats.total_xp": xp, "stats.lessons_completed": 1}},
    )
    if result.matched_count == 0:
        logger.warning("No user %s to credit for lesson %s; award skipped", user_id, lesson_id)
        return False

    await db.xp_ledger.insert_one({
        "entry_id": generate_id("XP"),
        "user_id": user_id,
        "lesson_id": lesson_id,
        "progress_id": progress_id,
        "xp": xp,
        "awarded_at": utcnow(),
    })
    logger.info("Awarded %s XP to %s for lesson %s", xp, user_id, lesson_id)
    return True


async def record_lesson_completion(
    db: AsyncIOMotorDatabase,
    user_id: str,
    lesson_id: str,
    target_completed: bool,
) -> str:
    """
    Set a lesson's completion state for a user and award XP on the
    not-completed -> completed transition only.

    Marking complete twice, or marking incomplete, never touches stats;
    un-completing does not take XP back. Returns the progress_id.
    """
    before = await _upsert_progress(db, user_id, lesson_id, target_completed)
    was_completed = bool(before and before.get("is_completed"))

    if before is not None:
        progress_id = before["progress_id"]
    else:
        created = await db.lesson_progress.find_one(
            {"user_id": user_id, "lesson_id": lesson_id}, {"progress_id": 1}
        )
        progress_id = created["progress_id"]

    if target_completed and not was_completed:
        await _award(db, user_id, lesson_id, progress_id)

    return progress_id


async def get_stats(db: AsyncIOMotorDatabase, user_id: str) -> UserStats:
    """Fresh read of a user's stats"""
    user = await db.users.find_one({"user_id": user_id}, {"stats": 1})
    if not user:
        raise NotFound("User not found")
    return UserStats.from_user(user)


async def list_awards(db: AsyncIOMotorDatabase, user_id: str, limit: int = 50) -> list:
    cursor = db.xp_ledger.find({"user_id": user_id}, {"_id": 0}).sort("awarded_at", -1).limit(limit)
    return await cursor.to_list(length=limit)
