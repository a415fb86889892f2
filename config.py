"""
config.py
Process configuration from environment variables (prefix STUDY_ROOM_, .env supported).

Business settings (gateway credentials, pricing, PIN) live in the store, see models.Settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STUDY_ROOM_", env_file=".env", case_sensitive=False)

    db_file: Path = Path(__file__).with_name("study_room.db")

    log_level: str = "INFO"
    log_format: str = "json"

    sms_gateway_url: str = "https://api.netgsm.com.tr/sms/send/get/"
    sms_timeout_seconds: float = 30.0


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()
