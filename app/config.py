"""
MealLog settings, loaded from environment variables or a .env file.
"""

from enum import Enum
from typing import Optional, Tuple
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every field maps to an upper-case environment variable of the same name,
    e.g. ``IMAGE_MAX_DIMENSION=1280``.
    """

    app_name: str = "MealLog"
    app_version: str = "1.0.0"
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Deployment environment"
    )
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    # Database
    database_url: str = Field(
        default="postgresql+psycopg2://user@localhost:5432/meallog",
        description="SQLAlchemy URL; sqlite URLs are accepted for local runs and tests",
    )
    db_echo: bool = Field(default=False, description="Echo SQL statements")
    db_init_attempts: int = Field(default=8, ge=1, description="Table creation attempts at startup")
    db_init_delay_sec: float = Field(default=2.0, ge=0, description="Pause between attempts")

    # Meal photos
    image_max_dimension: int = Field(
        default=1920, ge=1, description="Longest side of a stored photo, in pixels"
    )
    image_max_upload_bytes: int = Field(
        default=5 * 1024 * 1024, ge=1, description="Largest accepted upload, in bytes"
    )
    image_fallback_width: int = Field(
        default=800, ge=1, description="Width recorded when a photo's size cannot be read"
    )
    image_fallback_height: int = Field(
        default=600, ge=1, description="Height recorded when a photo's size cannot be read"
    )
    image_cache_control: str = Field(
        default="public, no-cache",
        description="Cache-Control for served photos; clients revalidate with the ETag",
    )
    upload_tmp_dir: Optional[str] = Field(
        default=None, description="Where uploads are staged (system temp dir if unset)"
    )
    legacy_upload_dir: str = Field(
        default="uploads", description="Directory behind legacy /uploads/<file> photo URLs"
    )

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # API
    api_prefix: str = Field(default="/api", description="Prefix for every API route")
    api_title: str = "MealLog API"
    api_description: str = "Restaurant meal journal with database-resident photo storage"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    @property
    def image_fallback_size(self) -> Tuple[int, int]:
        return (self.image_fallback_width, self.image_fallback_height)

    @property
    def uses_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT


settings = Settings()
