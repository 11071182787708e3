"""Configuration management for the TaskRep workflow service."""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TASKREP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server configuration
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Runtime environment (development, staging, production)",
    )
    server_host: str = Field(default="localhost", description="Server bind host")
    server_port: int = Field(default=5000, description="Server bind port")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )

    # Workflow configuration
    case_sensitive_match: bool = Field(
        default=True,
        description="Compare status names exactly (False folds case before comparing)",
    )
    strict_workflow: bool = Field(
        default=False,
        description="Judge backward moves by topological order, rework edges left out",
    )
    default_status: str = Field(
        default="New",
        description="Status assumed for tasks that have none",
    )
    completed_status: str = Field(
        default="Completed",
        description="Status that marks a task as completed (compared ignoring case)",
    )
    transitions_file: Path | None = Field(
        default=None,
        description="JSON file with the workflow snapshot (statuses and transitions)",
    )

    @model_validator(mode="after")
    def validate_status_names(self) -> "Settings":
        """Reject blank workflow status names."""
        for field_name in ("default_status", "completed_status"):
            value = getattr(self, field_name).strip()
            if not value:
                raise ValueError(f"{field_name} must not be blank")
            object.__setattr__(self, field_name, value)
        return self


# Global settings instance
settings = Settings()
