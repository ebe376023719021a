"""Configuration management for the Learner Intervention Service."""

from typing import Dict, List, Optional
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
import json


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    # Application
    APP_NAME: str = "Learner Intervention Service"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production)$")
    SERVICE_NAME: str = "intervention-service"
    SERVICE_PORT: int = 8010

    # Cache
    CACHE_URL: Optional[str] = None
    CACHE_TTL: int = 900  # 15 minutes

    # Uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Analysis policy
    AT_RISK_MAX_WEEKS_BEHIND: int = Field(default=3, ge=1)
    GRACE_PERIOD_WEEKS: int = Field(default=3, ge=0)
    DEFAULT_COURSE_TOTAL_WEEKS: int = Field(default=11, ge=1)
    COURSE_TOTAL_WEEKS: Dict[str, int] = Field(
        default_factory=lambda: {"developer fundamentals": 10}
    )
    MAX_PROGRAM_WEEK: int = Field(default=11, ge=1)

    # Logging
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    LOG_FORMAT: str = Field(default="json", pattern="^(json|plain)$")

    # CORS
    CORS_ORIGINS: List[str] = Field(default_factory=list)

    @field_validator("CORS_ORIGINS", mode="before")
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("COURSE_TOTAL_WEEKS", mode="after")
    def normalize_course_keys(cls, v):
        return {key.strip().lower(): weeks for key, weeks in v.items() if key.strip()}

    # Monitoring
    ENABLE_METRICS: bool = True

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
