"""Application configuration."""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "EV_Inventory_Traceability"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Upstream warranty backend (raw movement payloads)
    UPSTREAM_API_BASE_URL: str = "http://localhost:8080/api"
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0
    UPSTREAM_BEARER: Optional[str] = None

    # Ledger paging
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 200

    # Display
    UNKNOWN_CENTER_LABEL: str = "Không rõ trung tâm"
    DISPLAY_PLACEHOLDER: str = "—"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def upstream_base_url(self) -> str:
        """Upstream base URL with exactly one trailing slash."""
        return self.UPSTREAM_API_BASE_URL.rstrip("/") + "/"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
