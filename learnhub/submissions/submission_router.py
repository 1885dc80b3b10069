import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.auth_utils import AuthUser, get_current_user
from learnhub.core.database import get_db
from learnhub.core.errors import NotFound, ValidationError
from learnhub.core.jsend import success
from learnhub.courses.course_database import get_challenge
from learnhub.submissions.judge_client import JudgeClient, get_judge_client
from learnhub.submissions.submission_database import list_submissions, record_submission
from learnhub.submissions.submission_models import CodeRunRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/execution", tags=["Execution"])

# ==================== RUN (NOT PERSISTED) ====================

@router.post("/run")
async def run_code(
    body: CodeRunRequest,
    db: AsyncIOMotorDatabase = Depends(get_db),
    judge: JudgeClient = Depends(get_judge_client),
):
    """Try code against the visible test cases only. Nothing is stored."""
    challenge = await get_challenge(db, body.challenge_id)
    if not challenge:
        raise NotFound("Challenge not found")

    test_cases = challenge.public_test_cases()
    if not test_cases:
        raise ValidationError("Challenge has no public test cases")

    return success(await judge.run(body.code, body.language, test_cases))

# ==================== SUBMIT (PERSISTED) ====================

@router.post("/submit")
async def submit_challenge(
    body: CodeRunRequest,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
    judge: JudgeClient = Depends(get_judge_client),
):
    """
    Official submission against every test case, hidden ones included.
    The record is written once, after judging, with PASSED or FAILED.
    A judge failure stores nothing.
    """
    challenge = await get_challenge(db, body.challenge_id)
    if not challenge:
        raise NotFound("Challenge not found")

    if not challenge.supports(body.language):
        raise ValidationError(f"This challenge does not support {body.language.value}")

    if not challenge.test_cases:
        raise ValidationError("Challenge has no test cases")

    judged = await judge.run(body.code, body.language, challenge.test_cases)

    submission_id = await record_submission(
        db, user.user_id, challenge.challenge_id, body.code, body.language, judged
    )
    logger.info("Submission %s by %s: %s", submission_id, user.user_id, judged["status"])

    return success({
        "submissionId": submission_id,
        "status": judged["status"],
        "stdout": judged["stdout"],
        "stderr": judged["stderr"],
        "metrics": judged["metrics"],
    })

# ==================== HISTORY ====================

@router.get("/submissions")
async def get_submissions(
    challenge_id: Optional[str] = Query(None, alias="challengeId"),
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: AuthUser = Depends(get_current_user),
):
    """Latest submissions for the current user, newest first"""
    submissions = await list_submissions(db, user.user_id, challenge_id)
    return success([
        {
            "id": s["submission_id"],
            "challengeId": s["challenge_id"],
            "language": s["language"],
            "status": s["status"],
            "createdAt": s["created_at"],
            "metrics": s.get("metrics", {}),
        }
        for s in submissions
    ])
