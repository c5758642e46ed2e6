from __future__ import annotations

from dataclasses import replace
from typing import Optional, Tuple

from prospect_radar.core.metrics import round_fixed
from prospect_radar.core.records import LiveStatsOverride, RawPlayerRecord


def points_per_game(points: int, games_played: int) -> float:
    if games_played <= 0:
        return 0.0
    return round_fixed(points / games_played, 2)


def apply_live_stats(
    record: RawPlayerRecord,
    override: Optional[LiveStatsOverride],
) -> Tuple[RawPlayerRecord, bool]:
    """
    Replace the sourced counting stats with a live correction.

    Returns the (possibly new) record and whether an override was applied. PPG is
    always re-derived from the corrected P and GP; every other field is kept.
    """
    if override is None:
        return record, False
    corrected = replace(
        record,
        gp=override.gp,
        g=override.g,
        a=override.a,
        p=override.p,
        ppg=points_per_game(override.p, override.gp),
    )
    return corrected, True


__all__ = ["apply_live_stats", "points_per_game"]
