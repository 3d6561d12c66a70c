"""Centralised application settings loaded from environment / .env file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _resolve_data_dir() -> Path:
    """Return the directory that holds the local preference database."""
    return _PROJECT_ROOT / "data"


_DEFAULT_DB_URL = f"sqlite+aiosqlite:///{_resolve_data_dir() / 'emotion_wellbeing.db'}"


class Settings(BaseSettings):
    """All runtime configuration for the emotion-wellbeing client.

    Values are read from environment variables first, then from a *.env* file
    located at the project root.  Every variable lives in the flat
    ``EMOTION_WELLBEING_`` namespace.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMOTION_WELLBEING_",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Remote services ───────────────────────────────────────
    auth_base_url: str = "https://emotion-730u.onrender.com"
    fitness_base_url: str = "https://emotion-730u.onrender.com"
    predict_base_url: str = "https://emotionmll.onrender.com"
    request_timeout: float | None = None  # None → wait indefinitely

    # ── OAuth redirect ────────────────────────────────────────
    auth_platform: str = "mobile"
    auth_provider: str = "google"
    callback_scheme: str = "emotionwellbeing"
    callback_host: str = "auth-success"

    # ── Local preference store ────────────────────────────────
    database_url: str = _DEFAULT_DB_URL
    preference_namespace: str = "auth"

    # ── Pipeline behaviour ────────────────────────────────────
    parallel_fetch: bool = False
    usage_window_hours: int = 24
    usage_top_n: int = 5
    usage_export_path: str = str(_resolve_data_dir() / "usage_stats.json")

    # ── Local shell ───────────────────────────────────────────
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()
