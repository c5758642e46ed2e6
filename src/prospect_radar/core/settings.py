"""Centralized runtime configuration resolved from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from prospect_radar.core.paths import DEFAULT_ANNOTATIONS_PATH

# Defaults used when corresponding environment variables are not set.
DEFAULT_SHEET_ID = "1sExxYG0OZi74d3Ne7lIH6_Fdn3Eoyz6_lFk-eyAGUEY"
DEFAULT_PLAYERS_SHEET = "Players"
DEFAULT_CONFIG_SHEET = "Config"
DEFAULT_FETCH_TIMEOUT = 20.0
DEFAULT_FETCH_RETRIES = 2
DEFAULT_INTEL_MODEL = "gemini-2.5-flash"


@dataclass(frozen=True)
class RadarConfig:
    """Resolved settings for source loading, annotation storage and intel lookups."""

    sheet_id: str = DEFAULT_SHEET_ID
    players_sheet: str = DEFAULT_PLAYERS_SHEET
    config_sheet: str = DEFAULT_CONFIG_SHEET
    players_csv: Optional[Path] = None
    config_csv: Optional[Path] = None
    annotations_path: Path = DEFAULT_ANNOTATIONS_PATH
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    fetch_retries: int = DEFAULT_FETCH_RETRIES
    intel_model: str = DEFAULT_INTEL_MODEL
    intel_api_key: Optional[str] = None


def _read_str(name: str, default: str) -> str:
    """Return a non-empty string from the environment or the provided default."""
    value = os.getenv(name, default).strip()
    return value or default


def _read_optional_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def _read_optional_path(name: str) -> Optional[Path]:
    value = _read_optional_str(name)
    return Path(value) if value else None


def _read_positive_float(name: str, default: float) -> float:
    """Parse a strictly positive float from the environment variable named ``name``."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}.")
    return value


def _read_non_negative_int(name: str, default: int) -> int:
    """Parse a non-negative integer from the environment variable named ``name``."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}.")
    return value


def load_radar_config() -> RadarConfig:
    """Load and validate runtime configuration from environment variables."""
    return RadarConfig(
        sheet_id=_read_str("PROSPECT_SHEET_ID", DEFAULT_SHEET_ID),
        players_sheet=_read_str("PROSPECT_PLAYERS_SHEET", DEFAULT_PLAYERS_SHEET),
        config_sheet=_read_str("PROSPECT_CONFIG_SHEET", DEFAULT_CONFIG_SHEET),
        players_csv=_read_optional_path("PROSPECT_PLAYERS_CSV"),
        config_csv=_read_optional_path("PROSPECT_CONFIG_CSV"),
        annotations_path=_read_optional_path("PROSPECT_ANNOTATIONS_PATH") or DEFAULT_ANNOTATIONS_PATH,
        fetch_timeout=_read_positive_float("PROSPECT_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
        fetch_retries=_read_non_negative_int("PROSPECT_FETCH_RETRIES", DEFAULT_FETCH_RETRIES),
        intel_model=_read_str("PROSPECT_INTEL_MODEL", DEFAULT_INTEL_MODEL),
        intel_api_key=_read_optional_str("PROSPECT_INTEL_API_KEY") or _read_optional_str("GEMINI_API_KEY"),
    )


__all__ = ["RadarConfig", "load_radar_config"]
