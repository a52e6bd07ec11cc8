""" Builder settings loaded from the environment (ARAZZO_BUILDER_*) or a .env file. """

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BuilderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ARAZZO_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    # Blank document
    arazzo_version: str = Field(default="1.0.1", description="Arazzo version of new documents")
    default_title: str = Field(default="New Workflow")
    default_workflow_id: str = Field(default="workflow-1")

    step_id_prefix: str = Field(default="step", description="Prefix for generated stepIds")
    history_limit: int = Field(default=100, description="Revisions kept by an editing session")

    @field_validator("history_limit")
    @classmethod
    def validate_history_limit(cls, v: int) -> int:
        if v < 0:
            raise ValueError("history_limit must not be negative")
        return v


_settings: Optional[BuilderSettings] = None


def get_settings() -> BuilderSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = BuilderSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
