import math
from typing import Optional

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.auth_utils import AuthUser, get_optional_user
from learnhub.core.database import get_db
from learnhub.core.errors import NotFound
from learnhub.core.jsend import success
from learnhub.courses.course_database import (
    count_course_lessons, get_adjacent_lessons, get_challenge, get_course, get_lesson, list_course_lessons,
    list_lesson_challenges, list_published_courses
)
from learnhub.courses.course_models import Course
from learnhub.progress.enrollment_manager import touch_access
from learnhub.progress.syllabus_service import get_course_syllabus

router = APIRouter(tags=["Course Catalog"])


async def course_summary(db: AsyncIOMotorDatabase, course: Course) -> dict:
    lesson_count = await count_course_lessons(db, course.course_id)
    return {
        "id": course.course_id,
        "title": course.title,
        "description": course.description,
        "difficulty": course.difficulty.value,
        "tags": course.tags,
        "isPublished": course.is_published,
        "meta": {
            "lessonCount": lesson_count,
            # rough estimate: half an hour per lesson
            "durationHours": math.ceil(lesson_count * 0.5),
        },
    }

# ==================== COURSES ====================

@router.get("/courses")
async def get_courses(
    difficulty: Optional[str] = None,
    topic: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Published catalog, optionally filtered by difficulty and tag"""
    courses = await list_published_courses(db, difficulty=difficulty, topic=topic)
    return success([await course_summary(db, course) for course in courses])

@router.get("/courses/{course_id}")
async def get_course_by_id(course_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    course = await get_course(db, course_id)
    if not course:
        raise NotFound("Course not found")
    return success(await course_summary(db, course))

@router.get("/courses/{course_id}/syllabus")
async def get_syllabus(
    course_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: Optional[AuthUser] = Depends(get_optional_user),
):
    """
    Lessons with lock status for the caller.
    Works without a token: first lesson unlocked, the rest locked.
    """
    user_id = user.user_id if user else None
    return success(await get_course_syllabus(db, course_id, user_id))

# ==================== LESSONS ====================

@router.get("/lessons/course/{course_id}")
async def get_lessons_by_course(course_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Lesson outline of a course in syllabus order"""
    lessons = await list_course_lessons(db, course_id)
    return success([
        {
            "id": lesson.lesson_id,
            "title": lesson.title,
            "orderIndex": lesson.order_index,
            "type": lesson.type.value,
        }
        for lesson in lessons
    ])

@router.get("/lessons/{lesson_id}")
async def get_lesson_by_id(
    lesson_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: Optional[AuthUser] = Depends(get_optional_user),
):
    """Lesson content with its challenges and neighbours; viewing counts as course access"""
    lesson = await get_lesson(db, lesson_id)
    if not lesson:
        raise NotFound("Lesson not found")

    challenges = await list_lesson_challenges(db, lesson_id)
    adjacent = await get_adjacent_lessons(db, lesson)

    if user:
        await touch_access(db, user.user_id, lesson.course_id)

    return success({
        "id": lesson.lesson_id,
        "courseId": lesson.course_id,
        "title": lesson.title,
        "type": lesson.type.value,
        "contentMarkdown": lesson.content_markdown,
        "challenges": [challenge.to_public() for challenge in challenges],
        "nextLessonId": adjacent["next"],
        "prevLessonId": adjacent["prev"],
    })

# ==================== CHALLENGES ====================

@router.get("/challenges/lesson/{lesson_id}")
async def get_challenges_by_lesson(lesson_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    challenges = await list_lesson_challenges(db, lesson_id)
    return success([
        {
            "id": challenge.challenge_id,
            "title": challenge.title,
            "availableLanguages": challenge.available_languages(),
        }
        for challenge in challenges
    ])

@router.get("/challenges/{challenge_id}")
async def get_challenge_by_id(challenge_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    challenge = await get_challenge(db, challenge_id)
    if not challenge:
        raise NotFound("Challenge not found")
    return success(challenge.to_public())
