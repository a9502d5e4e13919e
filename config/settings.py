"""
Configuration settings for the account client
"""
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Keys used on the persistence port (names shared with the web client)
TOKEN_KEY = "token"
USER_KEY = "user"
PENDING_CHECKOUT_KEY = "pendingPlanCheckout"

# Plan slugs with special handling
PLAN_ENTERPRISE = "enterprise"
PRICE_CUSTOM = "Custom"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Backend REST API (auth, plans, subscriptions)
    api_url: str = Field(default="http://localhost:3001/api/v1", alias="API_URL")
    request_timeout: float = Field(default=10.0, alias="REQUEST_TIMEOUT")

    # Durable client-side storage
    storage_url: str = Field(default="sqlite:///./client_storage.db", alias="STORAGE_URL")

    # Dashboard confirmation banner after a successful checkout
    checkout_banner_seconds: float = Field(default=5.0, alias="CHECKOUT_BANNER_SECONDS")

    # Frontend configuration
    frontend_url: Optional[str] = Field(default="http://localhost:5173", alias="FRONTEND_URL")

    # Environment configuration
    env: Optional[str] = Field(default=None, alias="ENV")
    log_dir: Path = Field(default=Path("./logs"), alias="LOG_DIR")


# Instantiate settings object
settings = Settings()

# Determine if we're in production mode
IS_PRODUCTION = bool(settings.env and settings.env.lower() == "production")
