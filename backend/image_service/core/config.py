"""
Random Image Service Configuration

Configuration management with environment variable support.
Implements secure defaults and validation for all settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation and secure defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )
    SERVICE_NAME: str = Field(
        default="random-image-service", description="Service name for logs and health"
    )
    SERVICE_VERSION: str = Field(default="0.1.0", description="Service version")

    # API configuration
    API_HOST: str = Field(default="0.0.0.0", description="API server host")
    API_PORT: int = Field(default=3000, ge=1, le=65535, description="API server port")

    # Image source configuration
    IMAGE_SOURCE_URL: str = Field(
        default="https://picsum.photos/1200",
        description="Upstream URL returning a random JPEG image",
    )
    IMAGE_WINDOW_SECONDS: float = Field(
        default=600.0,
        gt=0,
        le=86400,
        description="Seconds a fetched image is served before it is considered stale",
    )
    IMAGE_CACHE_PATH: str = Field(
        default="files/image.jpg",
        description="File where the latest image is kept for cold-start recovery",
    )
    IMAGE_FETCH_TIMEOUT_SECONDS: float = Field(
        default=30.0, gt=0, le=300, description="Upstream request timeout"
    )
    IMAGE_FETCH_MAX_ATTEMPTS: int = Field(
        default=2,
        ge=1,
        le=10,
        description="Attempts per fetch on transport errors (1 disables retry)",
    )
    IMAGE_FETCH_RETRY_BACKOFF_SECONDS: float = Field(
        default=0.5, ge=0, le=30, description="Exponential backoff multiplier"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=True, description="Render logs as JSON lines")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @field_validator("IMAGE_SOURCE_URL")
    @classmethod
    def validate_image_source_url(cls, v):
        """Validate upstream URL scheme."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("IMAGE_SOURCE_URL must be an http(s) URL")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    # Alias properties for snake_case usage
    @property
    def environment(self) -> str:
        """Alias for ENVIRONMENT."""
        return self.ENVIRONMENT

    @property
    def image_source_url(self) -> str:
        """Alias for IMAGE_SOURCE_URL."""
        return self.IMAGE_SOURCE_URL

    @property
    def image_window_seconds(self) -> float:
        """Alias for IMAGE_WINDOW_SECONDS."""
        return self.IMAGE_WINDOW_SECONDS

    @property
    def image_cache_path(self) -> str:
        """Alias for IMAGE_CACHE_PATH."""
        return self.IMAGE_CACHE_PATH

    @property
    def image_fetch_timeout_seconds(self) -> float:
        """Alias for IMAGE_FETCH_TIMEOUT_SECONDS."""
        return self.IMAGE_FETCH_TIMEOUT_SECONDS

    @property
    def image_fetch_max_attempts(self) -> int:
        """Alias for IMAGE_FETCH_MAX_ATTEMPTS."""
        return self.IMAGE_FETCH_MAX_ATTEMPTS

    @property
    def image_fetch_retry_backoff_seconds(self) -> float:
        """Alias for IMAGE_FETCH_RETRY_BACKOFF_SECONDS."""
        return self.IMAGE_FETCH_RETRY_BACKOFF_SECONDS


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
