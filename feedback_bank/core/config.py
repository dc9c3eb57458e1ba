"""
Application configuration management with environment-based settings.
"""
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # ============= Application Settings =============
    APP_NAME: str = "Feedback Bank"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Reusable grading feedback snippets organised by module and question"
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")

    # ============= Server Settings =============
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)
    RELOAD: bool = Field(default=False)
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redoc"

    # CORS Settings
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    # ============= Database Settings =============
    DATABASE_URL: str = Field(default="sqlite:///./feedback_bank.db")
    DATABASE_ECHO: bool = False

    # ============= Monitoring Settings =============
    SENTRY_DSN: Optional[str] = None
    SENTRY_ENVIRONMENT: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1
    PROMETHEUS_ENABLED: bool = True

    # ============= Client Settings =============
    CLIENT_BASE_URL: str = "http://localhost:8000"
    CLIENT_TIMEOUT_SECONDS: float = 10.0
    REORDER_DEBOUNCE_SECONDS: float = 0.5
    LOCK_POLL_INTERVAL_SECONDS: float = 5.0

    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

settings = Settings()
