from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.errors import NotFound
from learnhub.courses.course_database import get_course, list_course_lessons
from learnhub.progress.progress_database import list_progress_for_lessons
from learnhub.progress.progress_engine import (
    completion_percent, compute_syllabus, index_progress, order_lessons
)


async def get_course_syllabus(db: AsyncIOMotorDatabase, course_id: str, user_id: Optional[str]) -> dict:
    """
    Course header, the caller's completion percentage and per-lesson status.
    Without a user the view degrades to first-lesson-only and userProgress is None.
    """
    course = await get_course(db, course_id)
    if not course:
        raise NotFound("Course not found")

    lessons = order_lessons(await list_course_lessons(db, course_id))
    anonymous = user_id is None

    progress = {}
    user_progress = None
    if not anonymous:
        records = await list_progress_for_lessons(db, user_id, [lesson.lesson_id for lesson in lessons])
        progress = index_progress(records)
        user_progress = {"percent": completion_percent(lessons, progress)}

    statuses = compute_syllabus(lessons, progress, anonymous=anonymous)

    return {
        "course": {
            "id": course.course_id,
            "title": course.title,
            "description": course.description,
        },
        "userProgress": user_progress,
        "lessons": [
            {
                "id": lesson.lesson_id,
                "orderIndex": lesson.order_index,
                "title": lesson.title,
                "type": lesson.type.value,
                "status": entry.status.value,
            }
            for lesson, entry in zip(lessons, statuses)
        ],
    }
