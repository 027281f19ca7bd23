"""
Configuration for the fan CMS API.
Values come from environment variables, optionally loaded from a .env file.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

# Base directory that document paths (data/posts.json, cms-data/news.json) are resolved against
DATA_ROOT = os.getenv("DATA_ROOT", ".")

# Debug flag enables the interactive API docs
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# Telemetry rate limiting (sliding window per client IP)
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))
RATE_LIMIT_WINDOW_MS = int(os.getenv("RATE_LIMIT_WINDOW_MS", "60000"))

# Telemetry document keeps only the newest events
TELEMETRY_MAX_EVENTS = int(os.getenv("TELEMETRY_MAX_EVENTS", "10000"))

# Uploaded media files are written here and served from /uploads
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "public/uploads")

# Pagination defaults
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
NEWS_PAGE_SIZE = int(os.getenv("NEWS_PAGE_SIZE", "9"))

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000"
)

# Version string
VERSION = "1.0.0"


def get_data_root() -> Path:
    """Data root, re-read from the environment so tests can point it elsewhere."""
    return Path(os.getenv("DATA_ROOT", DATA_ROOT))


def get_upload_dir(root: Path) -> Path:
    """Upload directory, resolved against ``root`` when relative."""
    upload_dir = Path(os.getenv("UPLOAD_DIR", UPLOAD_DIR))
    if upload_dir.is_absolute():
        return upload_dir
    return Path(root) / upload_dir


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "true").lower() == "true"


def get_cors_origins() -> List[str]:
    """Allowed CORS origins as a list."""
    return [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if RATE_LIMIT_MAX_REQUESTS < 1:
        issues.append("RATE_LIMIT_MAX_REQUESTS must be >= 1")

    if RATE_LIMIT_WINDOW_MS < 1:
        issues.append("RATE_LIMIT_WINDOW_MS must be >= 1")

    if TELEMETRY_MAX_EVENTS < 1:
        issues.append("TELEMETRY_MAX_EVENTS must be >= 1")

    if DEFAULT_PAGE_SIZE < 1 or NEWS_PAGE_SIZE < 1:
        issues.append("Page sizes must be >= 1")

    return issues
