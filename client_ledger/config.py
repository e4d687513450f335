"""
Application configuration.

All configuration is loaded from environment variables.
The same settings serve the gateway service and the ledger
client that talks to it.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Client Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./client_ledger.db"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Ledger client
    GATEWAY_URL: str = os.getenv("GATEWAY_URL", "http://localhost:8000")
    GATEWAY_TIMEOUT: float = float(os.getenv("GATEWAY_TIMEOUT", "10.0"))
    STRICT_DATES: bool = os.getenv("STRICT_DATES", "false").lower() == "true"


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    The Settings object is created once and reused for all
    subsequent calls.
    """
    return Settings()
