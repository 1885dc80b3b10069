from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import httpx
import pytest
from jose import jwt
from mongomock_motor import AsyncMongoMockClient

from learnhub import config
from learnhub.core.database import create_indexes, generate_id, get_db, utcnow
from learnhub.main import app
from learnhub.submissions.judge_client import JudgeClient, get_judge_client

JUDGE_URL = "http://judge.test"


def accepted(stdout: str = "ok") -> dict:
    return {
        "status": {"id": 3, "description": "Accepted"},
        "stdout": stdout,
        "stderr": None,
        "time": "0.012",
        "memory": 3100,
    }


def wrong_answer(stdout: str = "nope") -> dict:
    return {
        "status": {"id": 4, "description": "Wrong Answer"},
        "stdout": stdout,
        "stderr": None,
        "time": "0.020",
        "memory": 2900,
    }


def make_judge(responder: Callable[[httpx.Request], httpx.Response]) -> JudgeClient:
    return JudgeClient(base_url=JUDGE_URL, api_key="", timeout=1.0, transport=httpx.MockTransport(responder))


def auth_header(user_id: str, role: str = "STUDENT") -> dict:
    token = jwt.encode({"sub": user_id, "role": role}, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def db():
    database = AsyncMongoMockClient()["learnhub_test"]
    await create_indexes(database)
    return database


@pytest.fixture
def judge_responder() -> dict:
    """Mutable holder so a test can swap the judge's behaviour"""
    return {"handler": lambda request: httpx.Response(200, json=accepted())}


@pytest.fixture
async def client(db, judge_responder) -> AsyncIterator[httpx.AsyncClient]:
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_judge_client] = lambda: make_judge(
        lambda request: judge_responder["handler"](request)
    )
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


# ==================== FACTORIES ====================

@pytest.fixture
def make_user(db):
    async def _make(email: str = None, role: str = "STUDENT", name: str = None) -> str:
        user_id = generate_id("USR")
        await db.users.insert_one({
            "user_id": user_id,
            "email": email or f"{user_id.lower()}@example.com",
            "password_hash": "x",
            "role": role,
            "profile_data": {"name": name} if name else None,
            "stats": {"streak_days": 0, "total_xp": 0, "lessons_completed": 0},
            "created_at": utcnow(),
        })
        return user_id
    return _make


@pytest.fixture
def make_course(db):
    async def _make(title: str = "Python 101", published: bool = True, tags=None, difficulty="BEGINNER") -> str:
        course_id = generate_id("COURSE")
        await db.courses.insert_one({
            "course_id": course_id,
            "title": title,
            "description": f"About {title}",
            "difficulty": difficulty,
            "tags": tags or [],
            "is_published": published,
            "created_at": utcnow(),
        })
        return course_id
    return _make


@pytest.fixture
def make_lesson(db):
    async def _make(course_id: str, order_index: int, title: str = None) -> str:
        lesson_id = generate_id("LES")
        await db.lessons.insert_one({
            "lesson_id": lesson_id,
            "course_id": course_id,
            "title": title or f"Lesson {order_index}",
            "order_index": order_index,
            "content_markdown": "# content",
            "type": "LESSON",
            "challenge_ids": [],
        })
        return lesson_id
    return _make


@pytest.fixture
def make_challenge(db):
    async def _make(lesson_id: str, test_cases=None, starter_codes=None) -> str:
        challenge_id = generate_id("CHL")
        await db.challenges.insert_one({
            "challenge_id": challenge_id,
            "lesson_id": lesson_id,
            "title": "Two sum",
            "starter_codes": starter_codes or {"python": "def solve():\n    pass\n"},
            "solution_codes": {"python": "def solve():\n    return 42\n"},
            "test_cases": test_cases if test_cases is not None else [
                {"input": "1 2", "expected_output": "3", "is_hidden": False},
                {"input": "5 5", "expected_output": "10", "is_hidden": True},
            ],
        })
        return challenge_id
    return _make


@pytest.fixture
async def three_lesson_course(make_course, make_lesson):
    """Course C with lessons L1, L2, L3 at order_index 1, 2, 3"""
    course_id = await make_course("Course C")
    lessons = [await make_lesson(course_id, i, f"L{i}") for i in (1, 2, 3)]
    return course_id, lessons
