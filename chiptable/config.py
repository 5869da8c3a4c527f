"""Runtime settings, read once from the environment (prefix CHIPTABLE_)."""
from __future__ import annotations
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CHIPTABLE_", env_file=".env", extra="ignore")

    all_in_min_stack: int = 1000
    default_stack: int = 1000
    max_name_length: int = 24
    log_capacity: int = 80
    room_code_length: int = 4
    room_code_attempts: int = 32

    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
