"""
Configuration management for the tagging pipeline.
"""

import json
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import DEFAULT_GENERAL_THRESHOLD, DEFAULT_CHARACTER_THRESHOLD


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_prefix="TAGGER_",
        env_file=".env",
        case_sensitive=False,
        protected_namespaces=("settings_",),
    )

    # Model Configuration
    model_path: Optional[str] = Field(default=None)
    tags_path: Optional[str] = Field(default=None)
    providers: List[str] = Field(default=["CPUExecutionProvider"])

    # Threshold Configuration
    general_threshold: float = Field(default=DEFAULT_GENERAL_THRESHOLD, ge=0.0, le=1.0)
    character_threshold: float = Field(default=DEFAULT_CHARACTER_THRESHOLD, ge=0.0, le=1.0)
    general_mcut_enabled: bool = Field(default=False)
    character_mcut_enabled: bool = Field(default=False)

    # Logging Configuration
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure the log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"TAGGER_LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("providers", mode="before")
    @classmethod
    def parse_providers(cls, v):
        """Accept a JSON array or a comma-separated list of providers."""
        if isinstance(v, str):
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    raise ValueError("Invalid JSON format for TAGGER_PROVIDERS")
            return [p.strip() for p in v.split(",") if p.strip()]
        return v


# Global settings instance
settings = Settings()
