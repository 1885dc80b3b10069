import hashlib
import logging
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.database import strip_mongo_id
from learnhub.progress.progress_models import UserStats

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def serialize_user(doc: dict) -> dict:
    """Public user view; never exposes the credential hash"""
    return {
        "id": doc["user_id"],
        "email": doc.get("email"),
        "role": doc.get("role"),
        "profileData": doc.get("profile_data"),
        "stats": UserStats.from_user(doc).to_public(),
        "createdAt": doc.get("created_at"),
    }


async def get_user(db: AsyncIOMotorDatabase, user_id: str) -> Optional[dict]:
    doc = await db.users.find_one({"user_id": user_id}, {"password_hash": 0})
    return strip_mongo_id(doc)


async def delete_user_cascade(db: AsyncIOMotorDatabase, user_id: str) -> bool:
    """
    Delete a user and everything keyed on them:
    enrollments, progress records, ledger entries and submissions
    """
    result = await db.users.delete_one({"user_id": user_id})
    if result.deleted_count == 0:
        return False

    await db.enrollments.delete_many({"user_id": user_id})
    await db.lesson_progress.delete_many({"user_id": user_id})
    await db.xp_ledger.delete_many({"user_id": user_id})
    await db.submissions.delete_many({"user_id": user_id})

    logger.info("Deleted user %s and related records", user_id)
    return True


async def list_users(db: AsyncIOMotorDatabase, page: int, limit: int) -> Tuple[List[dict], int]:
    """One page of users, newest first, plus the total user count"""
    cursor = (
        db.users.find({}, {"password_hash": 0})
        .sort([("created_at", -1), ("user_id", 1)])
        .skip((page - 1) * limit)
        .limit(limit)
    )
    users = [strip_mongo_id(doc) for doc in await cursor.to_list(length=limit)]
    total = await db.users.count_documents({})
    return users, total
