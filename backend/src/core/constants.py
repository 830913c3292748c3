"""Application constants and configuration values."""

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255
MAX_BIO_LENGTH = 500

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",      # React dev server (Vite)
    "http://localhost:8081",      # Expo dev server (child app)
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Credentials
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72  # bcrypt ignores input past 72 bytes

# One-time codes (email verification, password reset)
ONE_TIME_CODE_DIGITS = 6

# Display id prefixes and their counter names
PARENT_ID_PREFIX = "PT"
SPECIALIST_ID_PREFIX = "SP"
ADMIN_ID_PREFIX = "AD"
CHILD_ID_PREFIX = "CH"
DISPLAY_ID_PAD_WIDTH = 4

# Children
MIN_CHILD_AGE = 4
MAX_CHILD_AGE = 5
DEFAULT_AVATAR_MALE = "avatar_01"
DEFAULT_AVATAR_FEMALE = "avatar_02"

# Admin dashboards
RECENT_SPECIALISTS_LIMIT = 5
PARENT_SEARCH_LIMIT = 20
