"""
Enrollment Manager
One enrollment per (user, course), enforced by the unique index on
enrollments(user_id, course_id). Also tracks last access for quick resume.
"""

import logging
from datetime import datetime
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from learnhub.core.database import generate_id, strip_mongo_id, utcnow
from learnhub.core.errors import Conflict, Forbidden, NotFound, ValidationError
from learnhub.courses.course_database import get_course
from learnhub.progress.progress_database import count_completed, get_enrollment, lesson_ids_for_course

logger = logging.getLogger(__name__)

ENROLLMENT_ORDERS = {
    # insertion order
    "enrolled": [("enrolled_at", 1), ("_id", 1)],
    "recent": [("last_accessed_at", -1), ("enrollment_id", 1)],
}


async def enroll(db: AsyncIOMotorDatabase, user_id: str, course_id: str) -> str:
    """
    Create the enrollment or raise Conflict.
    No existence pre-check: the insert itself is the race arbiter.
    """
    course = await get_course(db, course_id)
    if not course:
        raise NotFound("Course not found")

    now = utcnow()
    enrollment_id = generate_id("ENR")

    try:
        await db.enrollments.insert_one({
            "enrollment_id": enrollment_id,
            "user_id": user_id,
            "course_id": course_id,
            "enrolled_at": now,
            "last_accessed_at": now,
        })
    except DuplicateKeyError:
        logger.info("Duplicate enrollment rejected user=%s course=%s", user_id, course_id)
        raise Conflict("Already enrolled in this course")

    logger.info("User %s enrolled in %s (%s)", user_id, course_id, enrollment_id)
    return enrollment_id


async def touch_access(
    db: AsyncIOMotorDatabase,
    user_id: str,
    course_id: str,
    timestamp: Optional[datetime] = None,
) -> bool:
    """
    Best-effort bump of last_accessed_at.
    Returns False (never raises) when the user is not enrolled.
    """
    result = await db.enrollments.update_one(
        {"user_id": user_id, "course_id": course_id},
        {"$set": {"last_accessed_at": timestamp or utcnow()}},
    )
    return result.matched_count > 0


async def require_enrollment(db: AsyncIOMotorDatabase, user_id: str, course_id: str) -> dict:
    enrollment = await get_enrollment(db, user_id, course_id)
    if not enrollment:
        raise Forbidden("Not enrolled in this course. Please enroll first.")
    return enrollment


async def list_enrollments(db: AsyncIOMotorDatabase, user_id: str, order: str = "enrolled") -> List[dict]:
    """
    Enrollments joined with course title, lesson count and completed count.
    Enrollments whose course no longer exists are skipped.
    """
    if order not in ENROLLMENT_ORDERS:
        raise ValidationError(
            "Invalid order",
            details=[{"field": "order", "message": f"Must be one of {sorted(ENROLLMENT_ORDERS)}"}],
        )

    cursor = db.enrollments.find({"user_id": user_id}).sort(ENROLLMENT_ORDERS[order])
    enrollments = [strip_mongo_id(doc) for doc in await cursor.to_list(length=None)]

    result = []
    for enrollment in enrollments:
        course = await get_course(db, enrollment["course_id"])
        if not course:
            continue

        lesson_ids = await lesson_ids_for_course(db, course.course_id)
        result.append({
            "enrollmentId": enrollment["enrollment_id"],
            "courseId": course.course_id,
            "title": course.title,
            "totalLessons": len(lesson_ids),
            "completedLessons": await count_completed(db, user_id, lesson_ids),
            "enrolledAt": enrollment["enrolled_at"],
            "lastAccessedAt": enrollment.get("last_accessed_at") or enrollment["enrolled_at"],
        })

    return result
