"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

STORAGE_BACKENDS = {"file", "supabase"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: str = "file"
    storage_key: str = "@protein_tracker_data"
    data_dir: Path = Path("data")
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    timezone: str = "UTC"
    default_target_protein: float = 150.0
    openfoodfacts_base_url: str = "https://world.openfoodfacts.org"
    openfoodfacts_user_agent: str = "protein-ledger/0.1"
    lookup_debug: bool = False
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_storage_backend(raw: str | None) -> str:
    """Normalize the storage backend name, defaulting to ``file``."""
    if raw is None:
        return "file"
    cleaned = raw.strip().lower()
    if not cleaned:
        return "file"
    if cleaned not in STORAGE_BACKENDS:
        raise ValueError(f"Unknown storage backend: {raw}")
    return cleaned
