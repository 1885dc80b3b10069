"""
Learnhub Configuration
Database, auth, judge service and gamification settings
"""

import os

# MongoDB
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "learnhub_db")

# Bearer tokens are issued by the auth service; we only verify them
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Judge service (Judge0 compatible)
JUDGE_API_URL = os.getenv("JUDGE_API_URL", "http://localhost:2358")
JUDGE_API_KEY = os.getenv("JUDGE_API_KEY", "")
JUDGE_TIMEOUT_SECONDS = float(os.getenv("JUDGE_TIMEOUT_SECONDS", "20"))

# Gamification
LESSON_COMPLETION_XP = 50

# Submission history page size
SUBMISSION_HISTORY_LIMIT = 50

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# HTTP server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "4000"))
