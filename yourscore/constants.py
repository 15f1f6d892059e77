"""
Application constants.
Environment-driven configuration defaults and domain constants.
"""
import os

# Storage
DEFAULT_DATABASE_URL = "sqlite:///./yourscore.db"
DATABASE_URL = os.getenv("YOURSCORE_DATABASE_URL", DEFAULT_DATABASE_URL)

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/yourscore"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_LOG_FILE = "yourscore.log"

# Security
DEFAULT_API_KEY = "your-secret-key-change-me"

# CORS
CORS_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

# Decay
DEFAULT_DECAY_AMOUNT = 10
DEFAULT_MAIN_SCORE = 0

# Streaks
MAX_STREAK_LOOKBACK_DAYS = 365
PERFECT_WEEK_TARGET = 7

# Categories
UNCATEGORIZED_ID = "uncategorized"
UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_ORDER = 999

# Activities
MAX_ACTIVITY_POINTS = 2 ** 63 - 1  # SQLite INTEGER upper bound

# Achievement types
ACHIEVEMENT_SCORE_MILESTONE = "score_milestone"
ACHIEVEMENT_STREAK = "streak"
ACHIEVEMENT_PERFECT_WEEK = "perfect_week"
ACHIEVEMENT_RECOVERY = "recovery"
ACHIEVEMENT_FIRST_COMPLETION = "first_completion"
ACHIEVEMENT_ACTIVITY_COUNT = "activity_count"
