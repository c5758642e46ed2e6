"""Service wrapper around the prospect intel lookup."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from prospect_radar.intel import IntelResult, request_intel
from prospect_radar.services import board_service

logger = logging.getLogger(__name__)

_INTEL_CACHE: Dict[Tuple[str, str, str], IntelResult] = {}


def _cache_key(name: str, league: str, country: str) -> Tuple[str, str, str]:
    return (name.strip().casefold(), league.strip().casefold(), country.strip().casefold())


def fetch_player_intel(name: str, *, refresh: bool = False) -> IntelResult:
    """Look up intel for a player on the board, reusing a cached result unless ``refresh``."""
    player = board_service.get_player(name)
    league = str(player.get("League") or "")
    country = str(player.get("Country") or "")
    key = _cache_key(name, league, country)

    if not refresh and key in _INTEL_CACHE:
        logger.info("Returning cached intel", extra={"cache_hit": True, "player": name})
        return _INTEL_CACHE[key]

    logger.info("Fetching new intel", extra={"cache_hit": False, "player": name})
    result = request_intel(name, league, country)
    _INTEL_CACHE[key] = result
    return result


def apply_intel(
    name: str,
    result: IntelResult,
    *,
    skills: bool = True,
    stats: bool = True,
) -> Optional[Dict[str, Any]]:
    """Persist the structured parts of an intel result; returns the refreshed player or ``None``."""
    updated: Optional[Dict[str, Any]] = None
    if skills and result.suggested_skills:
        updated = board_service.save_skills(name, result.suggested_skills)
    if stats and result.found_stats is not None:
        updated = board_service.save_live_stats(name, result.found_stats)
    return updated


def clear_intel_cache() -> None:
    _INTEL_CACHE.clear()


__all__ = ["apply_intel", "clear_intel_cache", "fetch_player_intel"]
