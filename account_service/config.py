"""
Centralized application configuration.

This module uses Pydantic's BaseSettings to load configuration from
environment variables and a .env file, providing a single, type-safe
source of truth for all settings. The settings object is frozen, so the
signing secret and every other value are read-only after startup.
"""

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    # --- Core API Settings ---
    PROJECT_NAME: str = "Fitness Account Service"
    API_PREFIX: str = "/api"

    # --- Database Settings ---
    DATABASE_URL: str = "sqlite:///./account_service.db"

    # --- Token Settings ---
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # --- Avatar Upload Settings ---
    UPLOAD_DIR: str = "uploads"
    MAX_AVATAR_BYTES: int = 5 * 1024 * 1024

    # --- Environment & System Settings ---
    LOG_LEVEL: str = "INFO"
    ENABLE_SCHEDULER: bool = True

    # --- Pydantic Model Configuration ---
    class Config:
        """Loads settings from the .env file and makes them immutable."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        frozen = True


# Create a single, globally accessible settings instance
settings = Settings()
