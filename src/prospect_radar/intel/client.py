"""HTTP client for the search-grounded text model that produces prospect intel."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from prospect_radar.core.settings import RadarConfig, load_radar_config

from .parser import IntelResult, IntelSource, parse_intel_response
from .prompts import build_intel_prompt

logger = logging.getLogger(__name__)

GENERATE_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class IntelLookupError(RuntimeError):
    """Raised when the intel lookup cannot be completed; callers may retry."""

    retryable = True


def _response_text(payload: Dict[str, Any]) -> str:
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(str(part.get("text", "")) for part in parts if isinstance(part, dict))


def _grounding_sources(payload: Dict[str, Any]) -> List[IntelSource]:
    candidates = payload.get("candidates") or []
    if not candidates:
        return []
    chunks = (candidates[0].get("groundingMetadata") or {}).get("groundingChunks") or []
    sources: List[IntelSource] = []
    for chunk in chunks:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if isinstance(web, dict) and web.get("uri"):
            sources.append(IntelSource(title=str(web.get("title") or web["uri"]), uri=str(web["uri"])))
    return sources


def request_intel(
    name: str,
    league: str,
    country: str,
    *,
    cfg: Optional[RadarConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> IntelResult:
    """Run one grounded lookup and parse it; any transport or API failure raises ``IntelLookupError``."""
    cfg = cfg or load_radar_config()
    if not cfg.intel_api_key:
        raise IntelLookupError("Intel API key is not configured (set PROSPECT_INTEL_API_KEY).")

    body = {
        "contents": [{"parts": [{"text": build_intel_prompt(name, league, country)}]}],
        "tools": [{"google_search": {}}],
    }
    url = GENERATE_URL.format(model=cfg.intel_model)
    logger.info("Requesting prospect intel", extra={"player": name, "model": cfg.intel_model})
    try:
        with httpx.Client(timeout=cfg.fetch_timeout * 3, transport=transport) as client:
            resp = client.post(url, json=body, headers={"x-goog-api-key": cfg.intel_api_key})
            resp.raise_for_status()
            payload = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.exception("Intel lookup failed")
        raise IntelLookupError(
            "Failed to retrieve AI intel. Please check your API key or connection."
        ) from exc

    return parse_intel_response(_response_text(payload), _grounding_sources(payload))


__all__ = ["IntelLookupError", "request_intel"]
