"""Application configuration with environment-based settings."""

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings


class AccessLogDestination(str, Enum):
    STDOUT = "stdout"
    FILE = "file"
    EXTERNAL = "external"
    NONE = "none"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Media library
    MEDIA_DIR: str = "/media"
    PLACEHOLDER_IMAGE_PATH: str | None = None  # Served when a thumbnail is missing

    # Catalog database
    SQLITE_PATH: str = "data/fletnix.db"

    # Streaming
    STREAM_CHUNK_SIZE: int = 8192
    STRICT_RANGE_REQUESTS: bool = True  # 416 on unsatisfiable ranges instead of full content
    IMAGE_CACHE_MAX_AGE: int = 86400

    # HTTP
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    ACCESS_LOG_DESTINATION: AccessLogDestination = AccessLogDestination.STDOUT
    ACCESS_LOG_FILE_PATH: str = "logs/access.log"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def access_logging_enabled(self) -> bool:
        """Check if access log lines should be emitted at all."""
        return self.ACCESS_LOG_DESTINATION != AccessLogDestination.NONE


# Video extensions picked up by the local library scan
SCANNABLE_VIDEO_EXTENSIONS = {".mp4", ".mkv", ".avi", ".mov", ".webm"}

# Top-level folders under MEDIA_DIR
MOVIES_DIR = "movies"
TV_DIR = "tv"
THUMBNAILS_DIR = "thumbnails"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
