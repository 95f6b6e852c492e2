# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application settings loaded from the environment."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the portal core."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    database_url: str = "sqlite:///./portal.db"
    secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Role code that bypasses every permission check
    super_admin_role_code: str = "SUPER_ADMIN"

    log_level: str = "INFO"
    seed_on_startup: bool = True


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
