"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables, with defaults for every field.  Variables from
a ``.env`` file in the working directory are loaded first so local
deployments can keep the store location and port out of the shell
environment.  Variables already set in the environment win over the
file.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv(override=False)


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Exercise Tracker API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by ``core.db``; ``:memory:`` keeps the
    # store in process memory (used by the test suite).
    database_url: str = os.getenv("DATABASE_URL", "exercise_tracker.db")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))

    # Comma-separated list of allowed CORS origins.  ``*`` allows all.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    # Directory with the static front page.  Skipped when it does not exist.
    static_dir: str = os.getenv("STATIC_DIR", "public")

    def cors_origin_list(self) -> List[str]:
        """Return ``cors_origins`` split into a list of origins."""
        origins = [origin.strip() for origin in self.cors_origins.split(",")]
        return [origin for origin in origins if origin] or ["*"]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must be set before this module is imported.
settings = Settings()
