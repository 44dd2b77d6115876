"""
Gitlet Configuration

Environment-based configuration for the Gitlet CLI.  Every setting can be
overridden with a ``GITLET_``-prefixed environment variable or a ``.env``
file in the working directory.
"""
import logging
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """CLI settings loaded from environment variables."""

    # Repository layout
    repo_dir_name: str = ".gitlet"
    default_branch: str = "master"
    initial_commit_message: str = "initial commit"

    # Database Configuration
    # Defaults to sqlite+aiosqlite:///<repo>/.gitlet/gitlet.db when unset.
    database_url: Optional[str] = None
    database_filename: str = "gitlet.db"

    # Diagnostics
    log_level: str = "WARNING"
    debug: bool = False  # echo SQL statements

    model_config = SettingsConfigDict(
        env_prefix="GITLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience access
settings = get_settings()
