"""
Application configuration from environment variables.
Settings class using pydantic-settings; values are injected explicitly into services.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root so it loads when running from the repo or elsewhere
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Console settings loaded from environment and .env.
    All fields have defaults for local dev; validate for production.
    """

    # Backend collaborator (REST/JSON)
    api_url: str = Field(
        default="http://127.0.0.1:8000",
        description="Base URL of the accounts/products backend",
        validation_alias="API_URL",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds",
        validation_alias="REQUEST_TIMEOUT",
    )
    # No retry policy unless explicitly configured.
    max_retries: int = Field(
        default=0,
        ge=0,
        description="Retries on 429/5xx and transport errors",
        validation_alias="MAX_RETRIES",
    )

    # List controllers
    list_page_size: int = Field(default=10, ge=1, validation_alias="LIST_PAGE_SIZE")
    picker_page_size: int = Field(default=5, ge=1, validation_alias="PICKER_PAGE_SIZE")

    # Application
    ENVIRONMENT: str = "development"
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    # Store as string so env never triggers json.loads; parsed in cors_origins_list.
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated origins or JSON array",
        validation_alias="CORS_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def normalize_cors_origins(cls, v: object) -> str:
        """Ensure we always have a string (avoid empty env causing json.loads in pydantic-settings)."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return "http://localhost:3000"
        if isinstance(v, list):
            return ",".join(str(x).strip() for x in v if str(x).strip())
        return str(v).strip()

    @field_validator("api_url", mode="before")
    @classmethod
    def strip_api_url(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS from comma-separated or JSON array string."""
        raw = (self.cors_origins or "").strip()
        if not raw:
            return ["http://localhost:3000"]
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                return [x.strip() for x in parsed if isinstance(x, str) and x.strip()]
        return [x.strip() for x in raw.split(",") if x.strip()] or ["http://localhost:3000"]

    def validate_for_production(self) -> None:
        """
        Call to validate that required env vars are set (e.g. on startup in production).
        Raises ValueError with missing keys.
        """
        missing: List[str] = []
        if not self.api_url:
            missing.append("API_URL")
        if self.ENVIRONMENT == "production" and self.api_url.startswith("http://127.0.0.1"):
            missing.append("API_URL (still pointing at localhost)")
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
