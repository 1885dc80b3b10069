from enum import Enum

from pydantic import BaseModel, Field

from learnhub.courses.course_models import Language

# ==================== ENUMS ====================

class SubmissionStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    PASSED = "PASSED"
    FAILED = "FAILED"

TERMINAL_STATUSES = {SubmissionStatus.PASSED, SubmissionStatus.FAILED}

# ==================== REQUEST SCHEMAS ====================

class CodeRunRequest(BaseModel):
    challenge_id: str = Field(..., alias="challengeId", min_length=1)
    code: str = Field(..., min_length=1, max_length=50000)
    language: Language
