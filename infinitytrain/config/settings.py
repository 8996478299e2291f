"""
Settings Configuration

Centralized runtime settings for the InfinityTrain API.
All settings are loaded from environment variables (optionally via .env).
"""
import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

load_dotenv(dotenv_path=ENV_FILE)


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


def get_int_env(key: str, default: int) -> int:
    """Get an integer value from environment variable."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return int(value)


class Settings:
    """
    Runtime settings for the application.

    To add a new setting:
    1. Add it here as a class property
    2. Load it from environment variable
    3. Use it in your code
    """

    # Relational store connection string
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./infinitytrain.db")

    # Uploads
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", str(PROJECT_ROOT / "uploads"))
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_BYTES: int = get_int_env("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)

    # HTTP
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    ALLOWED_ORIGINS: str = os.getenv("ALLOWED_ORIGINS", "")
    AUTH_RATE_LIMIT: str = os.getenv("AUTH_RATE_LIMIT", "30/minute")

    # Startup
    SEED_DEMO_DATA: bool = get_bool_env("SEED_DEMO_DATA", True)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info").upper()

    # Avatars generated at signup
    AVATAR_URL_TEMPLATE: str = os.getenv(
        "AVATAR_URL_TEMPLATE",
        "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"
    )

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == "development"

    @classmethod
    def cors_origins(cls) -> list:
        origins = [
            "http://localhost:3000",
            "http://localhost:5000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5000",
            "http://127.0.0.1:5173",
        ]
        for origin in cls.ALLOWED_ORIGINS.split(","):
            origin = origin.strip()
            if origin:
                origins.append(origin)
        return origins


settings = Settings()
