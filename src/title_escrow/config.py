"""Application configuration via pydantic-settings.

Reads from .env file or environment variables. All settings are validated
at startup — if a setting is malformed, the app fails fast with a clear
error message.

Usage:
    from title_escrow.config import get_settings
    settings = get_settings()
    print(settings.seller_address)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for Title Escrow."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True
    app_log_level: str = "DEBUG"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    cors_origins: list[str] = ["*"]

    # --- Escrow Roles (fixed for the lifetime of an engine) ---
    seller_address: str = "0x" + "5e" * 20
    inspector_address: str = "0x" + "1c" * 20
    lender_address: str = "0x" + "1e" * 20

    # Leave empty to let the engine generate its own address.
    escrow_address: str = ""

    # --- Title Registry ---
    # Identity allowed to mint titles. Empty means "same as seller".
    registry_minter: str = ""

    # --- Ledger ---
    # Value credited to each role at startup in development (0 disables).
    faucet_amount: int = 0

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings."""
    return Settings()
