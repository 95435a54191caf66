"""Application configuration loaded from environment variables."""

import os
from pathlib import Path
from pydantic_settings import BaseSettings

# Check if .env file exists and is readable
_env_file = None
try:
    env_path = Path(".env")
    if env_path.exists() and os.access(env_path, os.R_OK):
        _env_file = ".env"
except (OSError, PermissionError):
    # If we can't access .env, continue without it
    pass


class Settings(BaseSettings):
    """All configuration for the QA matrix application.

    Values are loaded from environment variables or a .env file.
    """

    # Application
    app_name: str = "qa-matrix"
    debug: bool = False

    # Logging
    json_logs: bool = False
    log_level: str = "INFO"

    # Persistence (key-value table inside this database)
    database_url: str = "sqlite:///./data/qa_matrix.db"
    ledger_storage_key: str = "qa-matrix-data"

    # Repeat-issue matching
    match_threshold: float = 0.15  # inclusive lower bound for a fuzzy match

    # Area assigned to concerns created from unmatched defects when the
    # report row carries no POF code.
    default_area: str = "Trim"

    model_config = {
        "env_file": _env_file,
        "env_file_encoding": "utf-8",
        "env_file_ignore_empty": True,
    }
