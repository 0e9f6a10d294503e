"""
Configuration management for the Account Service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Account Service configuration loaded from environment variables"""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "./logs"

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./app.db"

    # Token Configuration
    ACCESS_TOKEN_SECRET: str = "change-this-access-secret-in-prod"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_SECRET: str = "change-this-refresh-secret-in-prod"
    REFRESH_TOKEN_EXPIRE_DAYS: int = 10
    JWT_ALGORITHM: str = "HS256"

    # Cookie attributes for token delivery. Only relax these for local development.
    COOKIE_SECURE: bool = True
    COOKIE_HTTPONLY: bool = True

    # Uploads and image hosting
    UPLOAD_DIR: str = "./public/temp/uploads"
    IMAGE_HOST_URL: str = ""
    IMAGE_HOST_API_KEY: str = ""
    IMAGE_HOST_TIMEOUT_SECONDS: float = 30.0

    # Development-only endpoints
    DEV_MODE: bool = False

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
