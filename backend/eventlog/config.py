"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./eventlog.db"
    JWT_SECRET: str = "development-secret-key"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 7 * 24 * 60
    CORS_ORIGINS: str = "http://localhost:3000"
    MAX_ATTACHMENT_SIZE: int = 10 * 1024 * 1024  # bytes
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
