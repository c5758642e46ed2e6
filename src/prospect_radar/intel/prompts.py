"""Prompt builders for prospect intel lookups."""

from __future__ import annotations

from prospect_radar.core.records import SKILL_NAMES


def _safe_text(value: object, fallback: str) -> str:
    """Return a clean string or a fallback if the value is missing."""
    if value is None:
        return fallback
    cleaned = str(value).strip()
    return cleaned or fallback


def build_intel_prompt(name: str, league: str, country: str) -> str:
    """Ask for a short scouting summary followed by a fenced JSON block of stats and grades."""
    player = _safe_text(name, "the player")
    league_text = _safe_text(league, "an unknown league")
    country_text = _safe_text(country, "unknown country")
    skill_list = ", ".join(SKILL_NAMES)
    skill_json = ", ".join(f'"{skill}": 50' for skill in SKILL_NAMES)

    return (
        "Perform a google search for the latest scouting reports, recent game performance stats, "
        f'and news for ice hockey player "{player}" playing in the {league_text} ({country_text}).\n\n'
        "I need you to extract data into a structured format AND provide a text summary.\n\n"
        "1. First, provide a comprehensive summary (max 300 words) covering:\n"
        "   - Recent performance trends (last 5-10 games).\n"
        "   - Notable strengths and weaknesses.\n"
        "   - Draft stock movement.\n\n"
        "2. Then, at the very end of your response, strictly output a JSON code block "
        "(wrapped in ```json ... ```) containing:\n"
        '   - "stats": The player\'s current season total GP, G, A, P (if found).\n'
        f'   - "skills": Estimated scouting grades (20-80 scale) for [{skill_list}] based on the '
        "reports read. Be realistic. 50 is average, 80 is elite.\n\n"
        "The JSON block must look like this:\n"
        "{\n"
        '  "stats": { "GP": 0, "G": 0, "A": 0, "P": 0 },\n'
        f'  "skills": {{ {skill_json} }}\n'
        "}\n"
    )


__all__ = ["build_intel_prompt"]
