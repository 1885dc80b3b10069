"""
Dashboard Composer
Read-only "continue where you left off" view
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.errors import NotFound
from learnhub.courses.course_database import get_course, list_course_lessons
from learnhub.progress.progress_database import list_progress_for_lessons, most_recent_enrollment
from learnhub.progress.progress_engine import first_incomplete_lesson, index_progress
from learnhub.progress.progress_models import UserStats


async def quick_resume(db: AsyncIOMotorDatabase, user_id: str) -> Optional[dict]:
    """First unfinished lesson of the most recently accessed course, or None"""
    enrollment = await most_recent_enrollment(db, user_id)
    if not enrollment:
        return None

    course = await get_course(db, enrollment["course_id"])
    if not course:
        return None

    lessons = await list_course_lessons(db, course.course_id)
    records = await list_progress_for_lessons(db, user_id, [lesson.lesson_id for lesson in lessons])
    lesson = first_incomplete_lesson(lessons, index_progress(records))
    if lesson is None:
        return None

    return {
        "courseId": course.course_id,
        "courseTitle": course.title,
        "lessonId": lesson.lesson_id,
        "lessonTitle": lesson.title,
    }


async def compose_dashboard(db: AsyncIOMotorDatabase, user_id: str) -> dict:
    user = await db.users.find_one({"user_id": user_id})
    if not user:
        raise NotFound("User not found")

    profile = user.get("profile_data") or {}

    return {
        "user": {
            "name": profile.get("name") or user.get("email"),
            "avatar": profile.get("avatar"),
        },
        # stats exactly as the XP ledger last wrote them
        "stats": UserStats.from_user(user).to_public(),
        "quickResume": await quick_resume(db, user_id),
    }
