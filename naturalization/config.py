# naturalization/config.py

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NATURALIZATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Local store (profile + trips), one JSON document
    data_file: Path = Path.home() / ".naturalization-tracker" / "data.json"

    # Logging
    log_level: str = "WARNING"
    json_logs: bool = False

    # Import: read 01/02/2023 as January 2nd. Off by default; ambiguous otherwise.
    assume_us_mdy: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
