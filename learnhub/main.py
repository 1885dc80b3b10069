"""
Learnhub API
Course catalog, lesson progress, XP and code submissions
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnhub import config
from learnhub.core.database import create_indexes, manager
from learnhub.core.errors import register_exception_handlers
from learnhub.courses.course_router import router as course_router
from learnhub.submissions.submission_router import router as submission_router
from learnhub.system.health_router import router as health_router
from learnhub.users.user_router import router as user_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Learnhub API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.on_event("startup")
async def startup_event():
    await manager.connect()
    await create_indexes(manager.db)
    logger.info("Learnhub API started")


@app.on_event("shutdown")
async def shutdown_event():
    await manager.disconnect()


# ==================== ROUTER REGISTRATION ====================
app.include_router(health_router)
app.include_router(user_router)
app.include_router(course_router)
app.include_router(submission_router)
# ============================================================


def serve():
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    serve()
