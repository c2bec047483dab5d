"""Configuration for DocVault."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR = Path.home() / ".docvault"

DEFAULT_ALLOWED_TYPES = [
    "txt", "text", "md", "markdown", "html", "htm",
    "pdf", "docx", "json", "xml", "csv", "log",
]


class Settings(BaseSettings):
    """Settings read from ``DOCVAULT_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="DOCVAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    uploads_path: Path = Field(
        default=APP_DIR / "uploads",
        description="Directory uploaded files are copied into",
    )
    converted_path: Path = Field(
        default=APP_DIR / "converted",
        description="Default output directory for conversions",
    )
    max_file_size: int = Field(default=50 * 1024 * 1024, gt=0)
    allowed_types: list[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_TYPES))
    preview_lines: int = Field(default=50, gt=0)
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
