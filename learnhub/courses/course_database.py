from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.database import strip_mongo_id
from learnhub.courses.course_models import Challenge, Course, Lesson

# ==================== COURSES ====================

async def get_course(db: AsyncIOMotorDatabase, course_id: str) -> Optional[Course]:
    doc = await db.courses.find_one({"course_id": course_id})
    return Course(**strip_mongo_id(doc)) if doc else None

async def list_published_courses(
    db: AsyncIOMotorDatabase,
    difficulty: Optional[str] = None,
    topic: Optional[str] = None,
) -> List[Course]:
    """List catalog courses with optional filters"""
    query = {"is_published": True}
    if difficulty:
        query["difficulty"] = difficulty
    if topic:
        query["tags"] = {"$in": [topic]}

    cursor = db.courses.find(query).sort("created_at", 1)
    return [Course(**strip_mongo_id(doc)) for doc in await cursor.to_list(length=None)]

# ==================== LESSONS ====================

async def get_lesson(db: AsyncIOMotorDatabase, lesson_id: str) -> Optional[Lesson]:
    doc = await db.lessons.find_one({"lesson_id": lesson_id})
    return Lesson(**strip_mongo_id(doc)) if doc else None

async def list_course_lessons(db: AsyncIOMotorDatabase, course_id: str) -> List[Lesson]:
    """Lessons of a course ordered by order_index; ties keep insertion order"""
    cursor = db.lessons.find({"course_id": course_id}).sort([("order_index", 1), ("_id", 1)])
    return [Lesson(**strip_mongo_id(doc)) for doc in await cursor.to_list(length=None)]

async def count_course_lessons(db: AsyncIOMotorDatabase, course_id: str) -> int:
    return await db.lessons.count_documents({"course_id": course_id})

async def get_adjacent_lessons(db: AsyncIOMotorDatabase, lesson: Lesson) -> dict:
    """Previous and next lesson ids around a lesson, by order_index"""
    next_doc = await db.lessons.find_one(
        {"course_id": lesson.course_id, "order_index": {"$gt": lesson.order_index}},
        sort=[("order_index", 1)],
    )
    prev_doc = await db.lessons.find_one(
        {"course_id": lesson.course_id, "order_index": {"$lt": lesson.order_index}},
        sort=[("order_index", -1)],
    )
    return {
        "next": next_doc["lesson_id"] if next_doc else None,
        "prev": prev_doc["lesson_id"] if prev_doc else None,
    }

# ==================== CHALLENGES ====================

async def get_challenge(db: AsyncIOMotorDatabase, challenge_id: str) -> Optional[Challenge]:
    doc = await db.challenges.find_one({"challenge_id": challenge_id})
    return Challenge(**strip_mongo_id(doc)) if doc else None

async def list_lesson_challenges(db: AsyncIOMotorDatabase, lesson_id: str) -> List[Challenge]:
    cursor = db.challenges.find({"lesson_id": lesson_id}).sort("_id", 1)
    return [Challenge(**strip_mongo_id(doc)) for doc in await cursor.to_list(length=None)]
