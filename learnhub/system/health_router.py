import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.core.database import get_db, utcnow
from learnhub.core.jsend import success
from learnhub.submissions.judge_client import JudgeClient, get_judge_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


async def check_database(db: AsyncIOMotorDatabase) -> dict:
    if db is None:
        return {"status": "DOWN"}
    try:
        start = datetime.now()
        await db.command("ping")
        return {"status": "UP", "latency_ms": (datetime.now() - start).total_seconds() * 1000}
    except Exception as e:
        logger.warning("Database ping failed: %s", e)
        return {"status": "DOWN"}


@router.get("/health")
async def health_check(
    db: AsyncIOMotorDatabase = Depends(get_db),
    judge: JudgeClient = Depends(get_judge_client),
):
    """Liveness plus a quick look at the database and the judge service"""
    return success({
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "dependencies": {
            "database": await check_database(db),
            "judge": {"status": "UP" if await judge.ping() else "DOWN"},
        },
    })
