from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub import config
from learnhub.core.database import generate_id, utcnow
from learnhub.core.errors import InternalError
from learnhub.courses.course_models import Language
from learnhub.submissions.submission_models import SubmissionStatus, TERMINAL_STATUSES


async def record_submission(
    db: AsyncIOMotorDatabase,
    user_id: str,
    challenge_id: str,
    code: str,
    language: Language,
    judged: dict,
) -> str:
    """
    Persist a finished run as one immutable record.
    Called only after the judge answered, so the status is always terminal.
    """
    status = SubmissionStatus(judged["status"])
    if status not in TERMINAL_STATUSES:
        raise InternalError(f"Refusing to persist non-terminal submission status {status.value}")

    submission_id = generate_id("SUB")
    await db.submissions.insert_one({
        "submission_id": submission_id,
        "user_id": user_id,
        "challenge_id": challenge_id,
        "user_code": code,
        "language": language.value,
        "output_log": "\n\n".join(part for part in (judged["stdout"], judged["stderr"]) if part),
        "status": status.value,
        "metrics": judged["metrics"],
        "created_at": utcnow(),
    })
    return submission_id


async def list_submissions(
    db: AsyncIOMotorDatabase, user_id: str, challenge_id: Optional[str] = None
) -> List[dict]:
    query = {"user_id": user_id}
    if challenge_id:
        query["challenge_id"] = challenge_id

    limit = config.SUBMISSION_HISTORY_LIMIT
    cursor = db.submissions.find(query).sort("created_at", -1).limit(limit)
    return await cursor.to_list(length=limit)
