"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: Literal["memory", "supabase"] = "memory"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    websocket_path: str = "/api/planning-poker-ws"
    session_code_length: int = 6
    broadcast_send_timeout: float = 5.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
