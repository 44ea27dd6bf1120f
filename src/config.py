"""Configuration module for the School Management API.

This module provides centralized configuration management, including directory
paths, API server settings, authentication, mail and persistence settings.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "4000"))
API_PREFIX: str = os.getenv("API_PREFIX", "/api/v1")

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Database Configuration ---

# Any SQLAlchemy URL. Defaults to a SQLite file inside DATA_DIR.
DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/school_management.db"
)

# --- Authentication Configuration ---

# Access and refresh tokens are signed with different secrets
JWT_ACCESS_SECRET: str = os.getenv("JWT_ACCESS_SECRET", "change-me-access-secret")
JWT_REFRESH_SECRET: str = os.getenv("JWT_REFRESH_SECRET", "change-me-refresh-secret")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

# Lifetime of a password reset token
RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "60"))

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

# --- Rate Limiting Configuration ---

# Per client IP, in "<count> per <period>" notation. Auth routes share the
# stricter RATE_LIMIT_AUTH; every other route gets RATE_LIMIT_DEFAULT.
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes")
RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100 per 15 minutes")
RATE_LIMIT_AUTH: str = os.getenv("RATE_LIMIT_AUTH", "5 per 15 minutes")
RATE_LIMIT_STORAGE_URI: str = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")

# --- Mail Configuration ---

# Base URL of the frontend, used to build password reset links
FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

# When SMTP_HOST is empty, outgoing mail is written to the log instead
SMTP_HOST: Optional[str] = os.getenv("SMTP_HOST") or None
SMTP_PORT: int = int(os.getenv("SMTP_PORT") or "587")
SMTP_USER: Optional[str] = os.getenv("SMTP_USER") or None
SMTP_PASS: Optional[str] = os.getenv("SMTP_PASS") or None
SMTP_FROM: str = os.getenv("SMTP_FROM", "SchoolMS <no-reply@schoolms.local>")

# --- Domain Defaults ---

DEFAULT_CLASS_CAPACITY: int = int(os.getenv("DEFAULT_CLASS_CAPACITY", "30"))

DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
