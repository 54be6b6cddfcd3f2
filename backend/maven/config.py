"""Application configuration."""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://maven:maven123@db:5432/maven"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # LLM
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_KEY: Optional[str] = None  # Legacy name, used when OPENAI_API_KEY is unset
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_TIMEOUT_SECONDS: float = 30.0

    # CSV upload
    CSV_MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB

    # Scoring thresholds
    HIGH_INTENT_THRESHOLD: int = 80
    QUALIFIED_SCORE_THRESHOLD: int = 70
    PIPELINE_VALUE_PER_QUALIFIED_LEAD: int = 50000

    # Integrations
    SYNC_DELAY_SECONDS: float = 2.0
    CONNECTOR_TIMEOUT_SECONDS: float = 30.0
    APOLLO_SYNC_PAGE_SIZE: int = 10
    CLAY_SYNC_BATCH_SIZE: int = 5

    # Demo data inserted on first startup
    SEED_DEMO_DATA: bool = True

    @property
    def openai_api_key(self) -> Optional[str]:
        return self.OPENAI_API_KEY or self.OPENAI_KEY

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
