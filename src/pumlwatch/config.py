"""Configuration settings for pumlwatch.

Values are read from PUMLWATCH_* environment variables and an optional .env
file. Command-line options override them (see pumlwatch.cli).
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PUMLWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Renderer
    plantuml_path: Path = Field(default=Path("plantuml.jar"))
    java_path: str = "java"

    # Source and output trees
    input_dir: Path = Field(default=Path("input"))
    output_dir: Path = Field(default=Path("output"))

    # HTTP server
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings cache (useful for testing)."""
    global _settings
    _settings = None
