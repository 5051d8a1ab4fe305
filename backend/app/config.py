"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./event_moderation.db"
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"
    LOG_LEVEL: str = "INFO"

    # Optional super-admin created at startup when missing
    BOOTSTRAP_SUPERADMIN_USERNAME: str = ""
    BOOTSTRAP_SUPERADMIN_EMAIL: str = ""
    BOOTSTRAP_SUPERADMIN_PASSWORD: str = ""

    class Config:
        env_file = ".env"


settings = Settings()
