"""Application settings loaded from the environment and `.env`."""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(default="sqlite:///./intake.db", description="SQLAlchemy database URL")
    statement_timeout_seconds: float = Field(default=15.0, description="Per-statement timeout")
    submission_timeout_seconds: float = Field(default=30.0, description="Overall budget for one submission")
    isolation_level: str = Field(default="READ COMMITTED", description="Transaction isolation level")

    # Document storage
    storage_backend: str = Field(default="local", description="'local' or 'cloudinary'")
    upload_dir: str = Field(default="uploads", description="Directory for locally stored documents")
    public_base_url: Optional[str] = Field(default=None, description="Base URL used to build local document URLs")
    max_upload_mb: int = Field(default=10, description="Maximum size of one uploaded document")
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_folder: str = "pdf_uploads"
    cloudinary_timeout_seconds: float = 30.0

    # Application
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")
    cors_origins: List[str] = Field(default=["http://localhost:5173"])

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    return Settings()
