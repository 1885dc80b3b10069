"""
Syllabus lock/unlock computation.

Pure functions only: no database access, no clock, no mutation of the
inputs. The same lessons and progress always give the same syllabus.
"""

from typing import Dict, List, Mapping, Sequence

from learnhub.courses.course_models import Lesson
from learnhub.progress.progress_models import LessonProgress, LessonStatus, SyllabusEntry


def order_lessons(lessons: Sequence[Lesson]) -> List[Lesson]:
    # sorted() is stable, so duplicate order_index values keep their input order
    return sorted(lessons, key=lambda lesson: lesson.order_index)


def _is_completed(progress: Mapping[str, LessonProgress], lesson_id: str) -> bool:
    record = progress.get(lesson_id)
    return bool(record and record.is_completed)


def compute_syllabus(
    lessons: Sequence[Lesson],
    progress: Mapping[str, LessonProgress],
    anonymous: bool = False,
) -> List[SyllabusEntry]:
    """
    Per-lesson status for one user.

    Anonymous callers see only the first lesson unlocked. Otherwise a lesson
    is COMPLETED when its record says so, reachable (IN_PROGRESS if a record
    exists, else UNLOCKED) when it is first or the lesson right before it is
    completed, and LOCKED in every other case.
    """
    ordered = order_lessons(lessons)

    if anonymous:
        return [
            SyllabusEntry(
                lesson_id=lesson.lesson_id,
                status=LessonStatus.UNLOCKED if index == 0 else LessonStatus.LOCKED,
            )
            for index, lesson in enumerate(ordered)
        ]

    entries = []
    for index, lesson in enumerate(ordered):
        record = progress.get(lesson.lesson_id)

        if record is not None and record.is_completed:
            status = LessonStatus.COMPLETED
        elif index == 0 or _is_completed(progress, ordered[index - 1].lesson_id):
            status = LessonStatus.IN_PROGRESS if record is not None else LessonStatus.UNLOCKED
        else:
            status = LessonStatus.LOCKED

        entries.append(SyllabusEntry(lesson_id=lesson.lesson_id, status=status))

    return entries


def completion_percent(lessons: Sequence[Lesson], progress: Mapping[str, LessonProgress]) -> int:
    """Whole-number percentage of completed lessons, rounded half up"""
    total = len(lessons)
    if total == 0:
        return 0
    completed = sum(1 for lesson in lessons if _is_completed(progress, lesson.lesson_id))
    return (200 * completed + total) // (2 * total)


def first_incomplete_lesson(
    lessons: Sequence[Lesson],
    progress: Mapping[str, LessonProgress],
):
    """First lesson in syllabus order with no record or an unfinished one"""
    for lesson in order_lessons(lessons):
        if not _is_completed(progress, lesson.lesson_id):
            return lesson
    return None


def index_progress(records: Sequence[LessonProgress]) -> Dict[str, LessonProgress]:
    return {record.lesson_id: record for record in records}
