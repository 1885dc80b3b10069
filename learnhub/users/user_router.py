import math

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.auth_utils import AuthUser, Role, get_current_user, require_roles
from learnhub.core.database import get_db
from learnhub.core.errors import NotFound, ValidationError
from learnhub.core.jsend import success
from learnhub.courses.course_database import get_lesson
from learnhub.progress import enrollment_manager, xp_ledger
from learnhub.progress.dashboard import compose_dashboard
from learnhub.progress.progress_models import EnrollmentCreate, ProgressUpdate
from learnhub.users.user_database import delete_user_cascade, get_user, list_users, serialize_user

router = APIRouter(prefix="/users", tags=["Users"])

# ==================== DASHBOARD ====================

@router.get("/dashboard")
async def get_dashboard(
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    """Profile, stats and quick resume for the current user"""
    return success(await compose_dashboard(db, user.user_id))

# ==================== ENROLLMENTS ====================

@router.get("/enrollments")
async def get_enrollments(
    order: str = "enrolled",
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    """Enrolled courses with lesson counts; order=enrolled|recent"""
    return success(await enrollment_manager.list_enrollments(db, user.user_id, order))

@router.post("/enrollments", status_code=201)
async def enroll_in_course(
    body: EnrollmentCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    """
    Enroll in a course
    409 if the user is already enrolled
    """
    enrollment_id = await enrollment_manager.enroll(db, user.user_id, body.course_id)
    return success({"enrollmentId": enrollment_id})

# ==================== PROGRESS ====================

@router.put("/progress/{lesson_id}")
async def update_lesson_progress(
    lesson_id: str,
    body: ProgressUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    """
    Mark a lesson completed or not.
    XP is awarded once per not-completed -> completed transition.
    """
    lesson = await get_lesson(db, lesson_id)
    if not lesson:
        raise NotFound("Lesson not found")

    await enrollment_manager.require_enrollment(db, user.user_id, lesson.course_id)

    progress_id = await xp_ledger.record_lesson_completion(
        db, user.user_id, lesson_id, body.is_completed
    )
    await enrollment_manager.touch_access(db, user.user_id, lesson.course_id)

    return success({"progress": progress_id})

@router.get("/xp-history")
async def get_xp_history(
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    """Recent XP awards, newest first"""
    awards = await xp_ledger.list_awards(db, user.user_id)
    return success([
        {
            "lessonId": award["lesson_id"],
            "xp": award["xp"],
            "awardedAt": award["awarded_at"],
        }
        for award in awards
    ])

# ==================== ADMIN ====================

@router.get("")
async def get_all_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: AuthUser = Depends(require_roles(Role.ADMIN)),
):
    users, total = await list_users(db, page, limit)
    return success({
        "users": [serialize_user(user) for user in users],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    })

@router.get("/{user_id}")
async def get_user_by_id(
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: AuthUser = Depends(require_roles(Role.ADMIN)),
):
    user = await get_user(db, user_id)
    if not user:
        raise NotFound("User not found")
    return success({"user": serialize_user(user)})

@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: AuthUser = Depends(require_roles(Role.ADMIN)),
):
    if user_id == admin.user_id:
        raise ValidationError("Cannot delete yourself")

    if not await delete_user_cascade(db, user_id):
        raise NotFound("User not found")
    return success({"message": "User deleted successfully"})
