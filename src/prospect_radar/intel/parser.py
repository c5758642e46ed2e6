"""Split a free-text intel response into display text and an optional typed payload."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional

from prospect_radar.core.records import LiveStatsOverride, normalize_skills

logger = logging.getLogger(__name__)

NO_INTEL_TEXT = "No recent information found."

_JSON_FENCE = re.compile(r"```json\s*\n(.*?)\n\s*```", re.DOTALL)
_BARE_FENCE = re.compile(r"```\s*\n(.*?)\n\s*```", re.DOTALL)
_ANY_FENCE = re.compile(r"```(?:json)?.*?```", re.DOTALL)


@dataclass(frozen=True)
class IntelSource:
    title: str
    uri: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "uri": self.uri}


@dataclass(frozen=True)
class IntelResult:
    text: str
    sources: List[IntelSource] = field(default_factory=list)
    suggested_skills: Optional[Dict[str, int]] = None
    found_stats: Optional[LiveStatsOverride] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "sources": [source.to_dict() for source in self.sources],
            "suggestedSkills": dict(self.suggested_skills) if self.suggested_skills else None,
            "foundStats": self.found_stats.to_dict() if self.found_stats else None,
        }


def _extract_json_block(text: str) -> Optional[str]:
    match = _JSON_FENCE.search(text) or _BARE_FENCE.search(text)
    return match.group(1) if match else None


def _parse_stats(payload: Any) -> Optional[LiveStatsOverride]:
    if not isinstance(payload, Mapping):
        return None
    values = {}
    for key in ("GP", "G", "A", "P"):
        value = payload.get(key)
        if isinstance(value, bool) or not isinstance(value, Real):
            return None
        values[key] = int(value)
    return LiveStatsOverride.from_dict(values)


def parse_intel_response(full_text: Optional[str], sources: Optional[List[IntelSource]] = None) -> IntelResult:
    """
    Attempt structured extraction from an unstructured model response.

    The text result is always returned. ``suggested_skills`` and ``found_stats``
    are only populated when a fenced JSON block parses and carries usable
    fields; anything malformed leaves them absent instead of failing.
    """
    text = (full_text or "").strip() or NO_INTEL_TEXT
    suggested_skills: Optional[Dict[str, int]] = None
    found_stats: Optional[LiveStatsOverride] = None

    block = _extract_json_block(text)
    if block is not None:
        try:
            data = json.loads(block)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse intel JSON block", extra={"error": str(exc)})
            data = None
        if isinstance(data, Mapping):
            if isinstance(data.get("skills"), Mapping):
                suggested_skills = normalize_skills(data["skills"])
            found_stats = _parse_stats(data.get("stats"))

    clean_text = _ANY_FENCE.sub("", text).strip() or NO_INTEL_TEXT
    return IntelResult(
        text=clean_text,
        sources=list(sources or []),
        suggested_skills=suggested_skills,
        found_stats=found_stats,
    )


__all__ = ["IntelResult", "IntelSource", "NO_INTEL_TEXT", "parse_intel_response"]
