"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost/cookgpt"

    # Auth
    session_ttl_hours: int = 24 * 14
    min_password_length: int = 6

    # Object storage (recipe images)
    storage_root: str = "./storage"
    storage_bucket: str = "cookgpt.appspot.com"
    storage_public_base_url: str = "http://localhost:8000"

    # Recipe generation (Gemini)
    gemini_api_key: str = ""
    gemini_text_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout: float = 60.0

    # Payments (Cashfree subscriptions)
    cashfree_client_id: str = ""
    cashfree_client_secret: str = ""
    cashfree_api_base: str = "https://sandbox.cashfree.com"
    cashfree_api_version: str = "2022-09-01"

    # Application
    app_origin: str = "http://localhost:3000"
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cashfree_configured(self) -> bool:
        """Check if Cashfree credentials are present."""
        return bool(self.cashfree_client_id and self.cashfree_client_secret)

    @property
    def gemini_configured(self) -> bool:
        """Check if a Gemini API key is present."""
        return bool(self.gemini_api_key)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
