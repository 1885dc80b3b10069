from datetime import timedelta

import pytest

from learnhub.core.database import utcnow
from learnhub.core.errors import NotFound
from learnhub.progress.dashboard import compose_dashboard, quick_resume
from learnhub.progress.enrollment_manager import enroll, touch_access
from learnhub.progress.xp_ledger import record_lesson_completion


async def test_no_enrollments_means_no_quick_resume(db, make_user) -> None:
    user_id = await make_user(email="new@example.com")

    dashboard = await compose_dashboard(db, user_id)

    assert dashboard["quickResume"] is None
    assert dashboard["user"] == {"name": "new@example.com", "avatar": None}
    assert dashboard["stats"] == {"streakDays": 0, "totalXp": 0, "lessonsCompleted": 0}


async def test_quick_resume_points_at_first_unfinished_lesson(db, make_user, three_lesson_course) -> None:
    user_id = await make_user(name="Ada")
    course_id, (l1, l2, _) = three_lesson_course
    await enroll(db, user_id, course_id)
    await record_lesson_completion(db, user_id, l1, True)

    dashboard = await compose_dashboard(db, user_id)

    assert dashboard["user"]["name"] == "Ada"
    assert dashboard["quickResume"] == {
        "courseId": course_id,
        "courseTitle": "Course C",
        "lessonId": l2,
        "lessonTitle": "L2",
    }


async def test_started_lesson_counts_as_unfinished(db, make_user, three_lesson_course) -> None:
    user_id = await make_user()
    course_id, (l1, _, _) = three_lesson_course
    await enroll(db, user_id, course_id)
    await record_lesson_completion(db, user_id, l1, False)

    assert (await quick_resume(db, user_id))["lessonId"] == l1


async def test_quick_resume_uses_most_recently_accessed_course(db, make_user, make_course, make_lesson) -> None:
    user_id = await make_user()
    older = await make_course("Older")
    newer = await make_course("Newer")
    await make_lesson(older, 1, "Older intro")
    newer_intro = await make_lesson(newer, 1, "Newer intro")
    await enroll(db, user_id, older)
    await enroll(db, user_id, newer)

    now = utcnow()
    await touch_access(db, user_id, older, now + timedelta(minutes=1))
    await touch_access(db, user_id, newer, now + timedelta(minutes=2))

    resume = await quick_resume(db, user_id)
    assert resume["courseId"] == newer
    assert resume["lessonId"] == newer_intro


async def test_fully_completed_course_has_nothing_to_resume(db, make_user, three_lesson_course) -> None:
    user_id = await make_user()
    course_id, lessons = three_lesson_course
    await enroll(db, user_id, course_id)
    for lesson_id in lessons:
        await record_lesson_completion(db, user_id, lesson_id, True)

    dashboard = await compose_dashboard(db, user_id)
    assert dashboard["quickResume"] is None
    assert dashboard["stats"] == {"streakDays": 0, "totalXp": 150, "lessonsCompleted": 3}


async def test_stats_are_shown_verbatim(db, make_user) -> None:
    user_id = await make_user()
    await db.users.update_one(
        {"user_id": user_id},
        {"$set": {"stats": {"streak_days": 4, "total_xp": 1250, "lessons_completed": 12}}},
    )

    dashboard = await compose_dashboard(db, user_id)
    assert dashboard["stats"] == {"streakDays": 4, "totalXp": 1250, "lessonsCompleted": 12}


async def test_dashboard_for_missing_user(db) -> None:
    with pytest.raises(NotFound):
        await compose_dashboard(db, "USR_MISSING")
