"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Optional, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Equilibrius"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql+psycopg2://postgres:postgres@db:5432/equilibrius"
    DB_ECHO: bool = False

    # Identity provider access tokens (HS256, sub = user id)
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = "authenticated"

    # Identity lookup for the notification pipeline: "database" or "auth_admin"
    IDENTITY_BACKEND: str = "database"
    AUTH_ADMIN_URL: str = ""  # e.g. https://<ref>.supabase.co/auth/v1
    AUTH_SERVICE_ROLE_KEY: str = ""

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:5173", "http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Trigger authentication
    CRON_SECRET: str = ""  # Required for the daily sweep (X-Cron-Secret)
    WEBHOOK_SECRET: str = ""  # Optional for the mood-entry webhook (X-Webhook-Secret)

    # Email (Resend)
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    NOTIFICATION_FROM_EMAIL: str = "Equilibrius <notificacoes@equilibrius-br.com.br>"
    EMAIL_TIMEOUT_SECONDS: float = 10.0
    EMAIL_MAX_CONCURRENCY: int = 5

    # Notification pipeline
    NOTIFY_CONCURRENCY: int = 10  # Users processed in parallel during a sweep
    NOTIFY_RUN_TIMEOUT_SECONDS: float = 120.0  # Matches the hosting function limit
    NOTIFICATION_TIMEZONE: str = "America/Sao_Paulo"  # "Yesterday" is computed here

    # Support contacts
    MAX_SUPPORT_CONTACTS: int = 2

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
