"""
Configuration management for the Todo Service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Todo Service configuration loaded from environment variables"""

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./todo.db"

    # Token Configuration
    JWT_SECRET: str = "change-this-secret-in-prod"
    JWT_ALGORITHM: str = "HS256"
    AUTH_HEADER: str = "x-auth"

    # Credential Policy
    PASSWORD_MIN_LENGTH: int = 6

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
