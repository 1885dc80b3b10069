from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ==================== ENUMS ====================

class LessonStatus(str, Enum):
    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

# ==================== DATABASE MODELS ====================

class LessonProgress(BaseModel):
    """
    One record per (user_id, lesson_id).
    No record = not started, is_completed False = in progress.
    """
    progress_id: str
    user_id: str
    lesson_id: str
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class UserStats(BaseModel):
    """
    Read-only projection of users.stats.
    Only the XP ledger writes the underlying document fields.
    """
    model_config = ConfigDict(frozen=True)

    streak_days: int = 0
    total_xp: int = 0
    lessons_completed: int = 0

    @classmethod
    def from_user(cls, user_doc: Optional[dict]) -> "UserStats":
        stats = (user_doc or {}).get("stats") or {}
        return cls(
            streak_days=stats.get("streak_days", 0),
            total_xp=stats.get("total_xp", 0),
            lessons_completed=stats.get("lessons_completed", 0),
        )

    def to_public(self) -> dict:
        return {
            "streakDays": self.streak_days,
            "totalXp": self.total_xp,
            "lessonsCompleted": self.lessons_completed,
        }

class SyllabusEntry(BaseModel):
    lesson_id: str
    status: LessonStatus

# ==================== REQUEST SCHEMAS ====================

class ProgressUpdate(BaseModel):
    is_completed: bool = Field(..., alias="isCompleted", strict=True)

class EnrollmentCreate(BaseModel):
    course_id: str = Field(..., alias="courseId", min_length=1)
