"""
Runtime configuration helpers for the FastAPI application.

Loads DATABASE_URL, the ML server coordinates and the manual storage root from
the environment, falling back to the .env file located in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)

# Hangul compatibility jamo (consonants + vowels) and Hangul syllables.
DEFAULT_FORBIDDEN_SCRIPT_RANGES = "3131-3163,AC00-D7A3"


class Settings(BaseSettings):
    # Required field, must come from the environment or .env
    database_url: str = Field(..., alias="DATABASE_URL")

    # Optional fields
    app_name: str = Field(default="Manual Hub Backend", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")

    # External ML server
    ml_server_url: str = Field(default="http://localhost:8000/api", alias="ML_SERVER_URL")
    ml_server_api_key: str | None = Field(default=None, alias="ML_SERVER_API_KEY")
    ml_server_connect_timeout: float = Field(default=30.0, alias="ML_SERVER_CONNECT_TIMEOUT")
    ml_server_read_timeout: float = Field(default=300.0, alias="ML_SERVER_READ_TIMEOUT")

    # Manual storage and naming policy
    manual_storage_dir: str = Field(default="uploads/manuals", alias="MANUAL_STORAGE_DIR")
    forbidden_script_ranges: str = Field(default=DEFAULT_FORBIDDEN_SCRIPT_RANGES, alias="FORBIDDEN_SCRIPT_RANGES")

    # One-time administrator provisioning
    default_admin_email: str | None = Field(default=None, alias="DEFAULT_ADMIN_EMAIL")
    default_admin_password: str | None = Field(default=None, alias="DEFAULT_ADMIN_PASSWORD")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["DEFAULT_FORBIDDEN_SCRIPT_RANGES", "Settings", "get_settings"]
