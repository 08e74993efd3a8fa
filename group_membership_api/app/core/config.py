"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields.  In a
production deployment you should override these via environment
variables or a dedicated configuration service.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Group Membership API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Optional path of a log file in addition to the console handler.
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Path of the SQLite database file.  Relative paths are resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "groups.db")


# Environment variables must be set before importing this module.
settings = Settings()
