"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App Info
    app_name: str = "App Store Catalog API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8400
    workers: int = 1

    # Database
    data_save_folder: str = "./data"
    db_file: str = "catalog.db"

    @property
    def database_url(self) -> str:
        """SQLite database URL."""
        db_path = Path(self.data_save_folder) / self.db_file
        return f"sqlite+aiosqlite:///{db_path}"

    # JWT Authentication
    jwt_secret_key: str = Field(
        default="c8Rk2vQnZ7LxH4pTfW9sYdJ3mBgE6uAa",
        alias="JWT_SECRET_KEY",
    )
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60 * 24  # 24 hours
    jwt_issuer: str = "https://localhost:8400/"
    jwt_audience: str = "https://localhost:8400/"

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Local staging for multipart uploads
    upload_dir: str = Field(default="./uploads", alias="UPLOAD_DIR")
    upload_retention_minutes: int = 30

    # Media upload service (Cloudinary-compatible signed upload API)
    media_upload_url: str = Field(
        default="https://api.cloudinary.com/v1_1/demo/image/upload",
        alias="MEDIA_UPLOAD_URL",
    )
    media_api_key: str = Field(default="", alias="MEDIA_API_KEY")
    media_api_secret: str = Field(default="", alias="MEDIA_API_SECRET")
    media_upload_folder: str | None = Field(default=None, alias="MEDIA_UPLOAD_FOLDER")
    media_upload_timeout: float = 60.0

    # Catalog
    default_page_size: int = 48
    max_tags: int = 15
    # 0 = rank every match
    relevance_candidate_limit: int = Field(
        default=0,
        alias="RELEVANCE_CANDIDATE_LIMIT",
    )
    relevance_refresh_minutes: int = 60

    # Scheduler (upload sweep, relevance refresh)
    enable_background_jobs: bool = Field(
        default=True,
        alias="ENABLE_BACKGROUND_JOBS",
    )

    @field_validator("media_upload_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Remove trailing slash from the upload endpoint."""
        return v.rstrip("/") if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
