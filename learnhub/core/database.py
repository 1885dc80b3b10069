import logging
import uuid
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from learnhub import config

logger = logging.getLogger(__name__)


class MongoManager:
    def __init__(self):
        self.client = None
        self.db = None

    async def connect(self):
        self.client = AsyncIOMotorClient(config.MONGO_URL)
        self.db = self.client[config.MONGO_DB_NAME]
        logger.info("Connected to MongoDB database %s", config.MONGO_DB_NAME)

    async def disconnect(self):
        if self.client:
            self.client.close()
            self.client = None
            self.db = None


manager = MongoManager()


async def get_db() -> AsyncIOMotorDatabase:
    """Database dependency"""
    return manager.db


# ==================== HELPERS ====================

def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12].upper()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def strip_mongo_id(doc: dict) -> dict:
    """Drop the internal ObjectId; every collection carries its own string id"""
    if doc is not None:
        doc.pop("_id", None)
    return doc


# ==================== INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase):
    """
    Create MongoDB indexes.
    The compound unique indexes on enrollments and lesson_progress are what
    turn concurrent duplicate writes into a single winner plus a DuplicateKeyError.
    """
    # Users
    await db.users.create_index("user_id", unique=True)
    await db.users.create_index("email", unique=True)

    # Catalog
    await db.courses.create_index("course_id", unique=True)
    await db.courses.create_index("is_published")
    await db.lessons.create_index("lesson_id", unique=True)
    await db.lessons.create_index([("course_id", 1), ("order_index", 1)])
    await db.challenges.create_index("challenge_id", unique=True)
    await db.challenges.create_index("lesson_id")

    # Enrollments
    await db.enrollments.create_index("enrollment_id", unique=True)
    await db.enrollments.create_index([("user_id", 1), ("course_id", 1)], unique=True)
    await db.enrollments.create_index([("user_id", 1), ("last_accessed_at", -1)])

    # Lesson progress
    await db.lesson_progress.create_index("progress_id", unique=True)
    await db.lesson_progress.create_index([("user_id", 1), ("lesson_id", 1)], unique=True)

    # XP ledger
    await db.xp_ledger.create_index("entry_id", unique=True)
    await db.xp_ledger.create_index([("user_id", 1), ("awarded_at", -1)])

    # Submissions
    await db.submissions.create_index("submission_id", unique=True)
    await db.submissions.create_index([("user_id", 1), ("created_at", -1)])
    await db.submissions.create_index([("user_id", 1), ("challenge_id", 1)])

    logger.info("MongoDB indexes created")
