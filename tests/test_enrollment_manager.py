import asyncio
from datetime import timedelta

import pytest

from learnhub.core.database import utcnow
from learnhub.core.errors import Conflict, Forbidden, NotFound, ValidationError
from learnhub.progress.enrollment_manager import (
    enroll, list_enrollments, require_enrollment, touch_access
)
from learnhub.progress.progress_database import get_enrollment
from learnhub.progress.xp_ledger import record_lesson_completion


async def test_enroll_creates_record(db, make_user, make_course) -> None:
    user_id = await make_user()
    course_id = await make_course()

    enrollment_id = await enroll(db, user_id, course_id)

    enrollment = await get_enrollment(db, user_id, course_id)
    assert enrollment["enrollment_id"] == enrollment_id
    assert enrollment["enrolled_at"] == enrollment["last_accessed_at"]


async def test_second_enroll_conflicts(db, make_user, make_course) -> None:
    user_id = await make_user()
    course_id = await make_course()

    await enroll(db, user_id, course_id)
    with pytest.raises(Conflict):
        await enroll(db, user_id, course_id)

    assert await db.enrollments.count_documents({"user_id": user_id, "course_id": course_id}) == 1


async def test_concurrent_enrolls_have_one_winner(db, make_user, make_course) -> None:
    user_id = await make_user()
    course_id = await make_course()

    results = await asyncio.gather(
        *(enroll(db, user_id, course_id) for _ in range(3)), return_exceptions=True
    )

    winners = [r for r in results if isinstance(r, str)]
    conflicts = [r for r in results if isinstance(r, Conflict)]
    assert len(winners) == 1
    assert len(conflicts) == 2
    assert await db.enrollments.count_documents({"user_id": user_id}) == 1


async def test_enroll_unknown_course(db, make_user) -> None:
    user_id = await make_user()
    with pytest.raises(NotFound):
        await enroll(db, user_id, "COURSE_MISSING")


async def test_touch_access_without_enrollment_is_noop(db, make_user, make_course) -> None:
    user_id = await make_user()
    course_id = await make_course()

    assert await touch_access(db, user_id, course_id) is False
    assert await db.enrollments.count_documents({}) == 0


async def test_touch_access_updates_only_last_accessed(db, make_user, make_course) -> None:
    user_id = await make_user()
    course_id = await make_course()
    await enroll(db, user_id, course_id)
    before = await get_enrollment(db, user_id, course_id)

    later = before["enrolled_at"] + timedelta(hours=1)
    assert await touch_access(db, user_id, course_id, later) is True

    after = await get_enrollment(db, user_id, course_id)
    assert after["enrolled_at"] == before["enrolled_at"]
    assert after["last_accessed_at"] > before["last_accessed_at"]


async def test_require_enrollment(db, make_user, make_course) -> None:
    user_id = await make_user()
    course_id = await make_course()

    with pytest.raises(Forbidden):
        await require_enrollment(db, user_id, course_id)

    await enroll(db, user_id, course_id)
    assert (await require_enrollment(db, user_id, course_id))["course_id"] == course_id


async def test_list_enrollments_counts_lessons(db, make_user, three_lesson_course) -> None:
    user_id = await make_user()
    course_id, (l1, l2, _) = three_lesson_course
    await enroll(db, user_id, course_id)
    await record_lesson_completion(db, user_id, l1, True)
    await record_lesson_completion(db, user_id, l2, False)

    [entry] = await list_enrollments(db, user_id)
    assert entry["courseId"] == course_id
    assert entry["title"] == "Course C"
    assert entry["totalLessons"] == 3
    assert entry["completedLessons"] == 1


async def test_list_enrollments_ordering(db, make_user, make_course) -> None:
    user_id = await make_user()
    first = await make_course("First")
    second = await make_course("Second")
    await enroll(db, user_id, first)
    await enroll(db, user_id, second)

    await touch_access(db, user_id, first, utcnow() + timedelta(minutes=5))

    assert [e["courseId"] for e in await list_enrollments(db, user_id)] == [first, second]
    assert [e["courseId"] for e in await list_enrollments(db, user_id, "recent")] == [first, second]
    await touch_access(db, user_id, second, utcnow() + timedelta(minutes=10))
    assert [e["courseId"] for e in await list_enrollments(db, user_id, "recent")] == [second, first]


async def test_list_enrollments_skips_deleted_course(db, make_user, make_course) -> None:
    user_id = await make_user()
    kept = await make_course("Kept")
    gone = await make_course("Gone")
    await enroll(db, user_id, kept)
    await enroll(db, user_id, gone)
    await db.courses.delete_one({"course_id": gone})

    assert [e["courseId"] for e in await list_enrollments(db, user_id)] == [kept]


async def test_list_enrollments_rejects_unknown_order(db, make_user) -> None:
    user_id = await make_user()
    with pytest.raises(ValidationError):
        await list_enrollments(db, user_id, "alphabetical")
