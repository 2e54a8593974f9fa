"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the engine's optional environment variables (log level and path, the
result-cache switch and the fuzzy matcher's minimum token length).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Container for engine configuration read from the environment.

    Attributes:
        log_level: Numeric logging level.
        log_path: Optional file that receives a copy of the log output.
        cache_enabled: Whether `BenchmarkEngine` memoizes results by default.
        fuzzy_min_token_length: Shortest token the specialty matcher compares.
    """
    log_level: int
    log_path: Path | None
    cache_enabled: bool
    fuzzy_min_token_length: int


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise RuntimeError(
            f"SURVEY_BENCH_LOG_LEVEL must be a logging level name, got {raw!r}."
        )
    return level


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise RuntimeError(f"{name} must be a boolean flag, got {raw!r}.")


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if a variable is set to a value that cannot be parsed.
    """
    log_level = _parse_level(os.getenv("SURVEY_BENCH_LOG_LEVEL", "INFO"))
    log_path_raw = os.getenv("SURVEY_BENCH_LOG_PATH", "").strip()
    cache_enabled = _parse_bool(
        "SURVEY_BENCH_CACHE_ENABLED", os.getenv("SURVEY_BENCH_CACHE_ENABLED", "true")
    )

    token_raw = os.getenv("SURVEY_BENCH_FUZZY_MIN_TOKEN_LENGTH", "2").strip()
    try:
        fuzzy_min_token_length = int(token_raw)
    except ValueError:
        fuzzy_min_token_length = 0
    if fuzzy_min_token_length < 1:
        raise RuntimeError(
            "SURVEY_BENCH_FUZZY_MIN_TOKEN_LENGTH must be a positive integer "
            f"(got {token_raw!r})."
        )

    return Settings(
        log_level=log_level,
        log_path=Path(log_path_raw) if log_path_raw else None,
        cache_enabled=cache_enabled,
        fuzzy_min_token_length=fuzzy_min_token_length,
    )
