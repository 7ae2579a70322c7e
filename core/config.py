"""
Core configuration module for environment variables and settings management.

Design choices:
- Uses python-dotenv to load environment variables from a .env file when present.
- Avoids pydantic BaseSettings to keep dependencies minimal and compatible with pydantic v1/v2.
- Provides a single get_settings() accessor with LRU caching to avoid repeated parsing.
- Document paths default to files inside `data_dir` but each one can be overridden on its own.
"""
from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    environment: str = "dev"

    # JSON documents backing the three collections
    data_dir: str = "database"
    courses_json: str = "database/cours.json"
    modules_json: str = "database/modules.json"
    lessons_json: str = "database/lessons.json"

    # API versioning (useful for mounting routers and future deprecations)
    api_v1_prefix: str = "/api/v1"

    # Logging / transport
    log_level: str = "INFO"
    gzip_minimum_size: int = 1000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load environment variables (from .env if present) and build a Settings object.

    This function is cached so app startup and repeated imports are efficient.
    """
    load_dotenv()  # no-op if .env not present
    data_dir = os.getenv("DATA_DIR", "database")
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        data_dir=data_dir,
        courses_json=os.getenv("COURSES_JSON", os.path.join(data_dir, "cours.json")),
        modules_json=os.getenv("MODULES_JSON", os.path.join(data_dir, "modules.json")),
        lessons_json=os.getenv("LESSONS_JSON", os.path.join(data_dir, "lessons.json")),
        api_v1_prefix=os.getenv("API_V1_PREFIX", "/api/v1"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        gzip_minimum_size=int(os.getenv("GZIP_MINIMUM_SIZE", "1000")),
    )
