"""Application configuration using pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from context_engine.schemas.base import DuplicatePolicy


class Settings(BaseSettings):
    """Engine settings loaded from environment variables (CONTEXT_*)."""

    model_config = SettingsConfigDict(
        env_prefix="CONTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Clinical ConText Engine"
    debug: bool = False
    log_level: str = "INFO"

    # Rules
    rules_path: Path | None = None
    rules_delimiter: str | None = None  # None: infer from file extension

    # Matching
    case_insensitive: bool = False
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST_WINS
    max_walk_steps: int | None = None

    # API
    api_v1_prefix: str = "/api/v1"


settings = Settings()
