"""
Development seed data
Wipes the learnhub collections and loads demo users, courses, lessons,
a challenge, enrollments and progress.

    python -m scripts.seed
"""

import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub import config
from learnhub.core.database import create_indexes, generate_id, manager, utcnow
from learnhub.progress.enrollment_manager import enroll
from learnhub.progress.xp_ledger import record_lesson_completion
from learnhub.users.user_database import hash_password

logger = logging.getLogger(__name__)

SEED_COLLECTIONS = (
    "users", "courses", "lessons", "challenges",
    "enrollments", "lesson_progress", "xp_ledger", "submissions",
)

DEMO_PASSWORD = "password123"
STUDENT_COUNT = 10


async def _create_user(db: AsyncIOMotorDatabase, email: str, role: str, name: str) -> str:
    user_id = generate_id("USR")
    await db.users.insert_one({
        "user_id": user_id,
        "email": email,
        "password_hash": hash_password(DEMO_PASSWORD),
        "role": role,
        "profile_data": {"name": name},
        "stats": {"streak_days": 0, "total_xp": 0, "lessons_completed": 0},
        "created_at": utcnow(),
    })
    return user_id


async def _create_course(db: AsyncIOMotorDatabase, title: str, description: str, difficulty: str, tags, published: bool) -> str:
    course_id = generate_id("COURSE")
    await db.courses.insert_one({
        "course_id": course_id,
        "title": title,
        "description": description,
        "difficulty": difficulty,
        "tags": tags,
        "is_published": published,
        "created_at": utcnow(),
    })
    return course_id


async def _create_lesson(db: AsyncIOMotorDatabase, course_id: str, title: str, order_index: int, content: str, lesson_type: str) -> str:
    lesson_id = generate_id("LES")
    await db.lessons.insert_one({
        "lesson_id": lesson_id,
        "course_id": course_id,
        "title": title,
        "order_index": order_index,
        "content_markdown": content,
        "type": lesson_type,
        "challenge_ids": [],
    })
    return lesson_id


async def seed_database(db: AsyncIOMotorDatabase) -> dict:
    """Replace all learnhub data with the demo set and return the created ids"""
    for name in SEED_COLLECTIONS:
        await db[name].delete_many({})
    logger.info("Cleared existing data")

    # ==================== USERS ====================
    admin_id = await _create_user(db, "admin@learnhub.dev", "ADMIN", "Admin User")
    instructor_id = await _create_user(db, "instructor@learnhub.dev", "INSTRUCTOR", "Instructor User")
    student_ids = [
        await _create_user(db, f"student{i}@learnhub.dev", "STUDENT", f"Student {i}")
        for i in range(1, STUDENT_COUNT + 1)
    ]

    # ==================== COURSES ====================
    python_course = await _create_course(
        db, "Python Fundamentals",
        "Learn the basics of Python programming, from variables to loops.",
        "BEGINNER", ["Python", "Programming"], True,
    )
    js_course = await _create_course(
        db, "Advanced JavaScript Patterns",
        "Master closures, prototypes, and async programming.",
        "ADVANCED", ["JavaScript", "Web"], True,
    )
    draft_course = await _create_course(
        db, "Draft Course - WIP",
        "This course is currently being developed.",
        "INTERMEDIATE", ["WIP"], False,
    )

    # ==================== LESSONS ====================
    variables = await _create_lesson(
        db, python_course, "Variables & Data Types", 1,
        "# Variables\nIn Python, variables are...", "LESSON",
    )
    basic_math = await _create_lesson(
        db, python_course, "Basic Math", 2,
        "# Math\nPython supports basic math operations...", "CHALLENGE",
    )
    closures = await _create_lesson(
        db, js_course, "Closures", 1,
        "# Closures\nA closure is...", "LESSON",
    )

    # ==================== CHALLENGES ====================
    challenge_id = generate_id("CHL")
    await db.challenges.insert_one({
        "challenge_id": challenge_id,
        "lesson_id": basic_math,
        "title": "Calculate Area",
        "starter_codes": {
            "python": "def calculate_area(length, width):\n    # Your code here\n    pass\n",
        },
        "solution_codes": {
            "python": "def calculate_area(length, width):\n    return length * width\n",
        },
        "test_cases": [
            {"input": "5 2", "expected_output": "10", "is_hidden": False},
            {"input": "10 10", "expected_output": "100", "is_hidden": True},
        ],
    })
    await db.lessons.update_one({"lesson_id": basic_math}, {"$push": {"challenge_ids": challenge_id}})

    # ==================== ENROLLMENTS & PROGRESS ====================
    # student 1 finished the first Python lesson, student 2 has not started
    await enroll(db, student_ids[0], python_course)
    await record_lesson_completion(db, student_ids[0], variables, True)
    await enroll(db, student_ids[1], python_course)

    logger.info(
        "Seeded %d users, 3 courses, 3 lessons, 1 challenge and 2 enrollments",
        2 + len(student_ids),
    )
    return {
        "admin": admin_id,
        "instructor": instructor_id,
        "students": student_ids,
        "courses": {"python": python_course, "javascript": js_course, "draft": draft_course},
        "lessons": {"variables": variables, "basic_math": basic_math, "closures": closures},
        "challenge": challenge_id,
    }


async def main():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    await manager.connect()
    try:
        await create_indexes(manager.db)
        await seed_database(manager.db)
    finally:
        await manager.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
