from typing import List, Optional, Sequence

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.database import strip_mongo_id
from learnhub.progress.progress_models import LessonProgress

# ==================== LESSON PROGRESS ====================

async def get_progress(db: AsyncIOMotorDatabase, user_id: str, lesson_id: str) -> Optional[LessonProgress]:
    doc = await db.lesson_progress.find_one({"user_id": user_id, "lesson_id": lesson_id})
    return LessonProgress(**strip_mongo_id(doc)) if doc else None

async def list_progress_for_lessons(
    db: AsyncIOMotorDatabase, user_id: str, lesson_ids: Sequence[str]
) -> List[LessonProgress]:
    if not lesson_ids:
        return []
    cursor = db.lesson_progress.find({"user_id": user_id, "lesson_id": {"$in": list(lesson_ids)}})
    return [LessonProgress(**strip_mongo_id(doc)) for doc in await cursor.to_list(length=None)]

async def count_completed(db: AsyncIOMotorDatabase, user_id: str, lesson_ids: Sequence[str]) -> int:
    if not lesson_ids:
        return 0
    return await db.lesson_progress.count_documents({
        "user_id": user_id,
        "lesson_id": {"$in": list(lesson_ids)},
        "is_completed": True,
    })

async def lesson_ids_for_course(db: AsyncIOMotorDatabase, course_id: str) -> List[str]:
    cursor = db.lessons.find({"course_id": course_id}, {"lesson_id": 1})
    return [doc["lesson_id"] for doc in await cursor.to_list(length=None)]

# ==================== ENROLLMENTS ====================

async def get_enrollment(db: AsyncIOMotorDatabase, user_id: str, course_id: str) -> Optional[dict]:
    return strip_mongo_id(await db.enrollments.find_one({"user_id": user_id, "course_id": course_id}))

async def most_recent_enrollment(db: AsyncIOMotorDatabase, user_id: str) -> Optional[dict]:
    """Latest accessed enrollment; ties go to the lowest enrollment_id"""
    doc = await db.enrollments.find_one(
        {"user_id": user_id},
        sort=[("last_accessed_at", -1), ("enrollment_id", 1)],
    )
    return strip_mongo_id(doc)
