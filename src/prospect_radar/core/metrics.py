"""Derived prospect scores: NHL equivalency and population-relative 0-100 scales.

Scores are computed in two phases. ``population_scalars`` reduces the whole
(post-override) population to the two maxima the relative scores depend on, and
``compute_derived_metrics`` then scores one player against those scalars. A
player's scores are only meaningful together with the scalars they were
computed against, so callers always recompute the full population.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from prospect_radar.core.records import DerivedMetrics, LeagueConfig, RawPlayerRecord

DEFAULT_LEAGUE_FACTOR = 0.25
RANK_HEADROOM = 1.1
STATS_WEIGHT = 0.5
RANK_WEIGHT = 0.5
SCORE_FLOOR = 0.0
SCORE_CEILING = 100.0


@dataclass(frozen=True)
class PopulationScalars:
    max_nhle: float = 0.0
    max_avg_rank: float = 0.0


def round_fixed(value: float, digits: int = 1) -> float:
    """Round half away from zero on the value's shortest decimal form (``36.15 -> 36.2``)."""
    if not math.isfinite(value):
        return float(value)
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def _clamp_score(value: float) -> float:
    return min(SCORE_CEILING, max(SCORE_FLOOR, value))


def compute_nhle(record: RawPlayerRecord, config: LeagueConfig) -> float:
    factor = config.factor_for(record.league, DEFAULT_LEAGUE_FACTOR)
    return round_fixed(record.ppg * factor * config.season_length_nhl, 1)


def compute_stats_score(nhle: float, max_nhle: float) -> float:
    if max_nhle == 0:
        return 0.0
    return _clamp_score(round_fixed(nhle / max_nhle * 100, 1))


def compute_rank_score(avg_rank: float, max_avg_rank: float) -> float:
    # AvgRank 0 (unranked) is scored as-is; ordering layers sink it separately.
    if max_avg_rank == 0:
        return 0.0
    score = 100 - (avg_rank / (max_avg_rank * RANK_HEADROOM) * 100)
    return _clamp_score(round_fixed(score, 1))


def compute_composite_score(stats_score: float, rank_score: float) -> float:
    return round_fixed(stats_score * STATS_WEIGHT + rank_score * RANK_WEIGHT, 1)


def population_scalars(records: Iterable[RawPlayerRecord], config: LeagueConfig) -> PopulationScalars:
    """Maxima of NHLe and AvgRank across the population; zeros for an empty one."""
    max_nhle = 0.0
    max_avg_rank = 0.0
    seen = False
    for record in records:
        nhle = compute_nhle(record, config)
        if not seen:
            max_nhle, max_avg_rank, seen = nhle, record.avg_rank, True
            continue
        max_nhle = max(max_nhle, nhle)
        max_avg_rank = max(max_avg_rank, record.avg_rank)
    return PopulationScalars(max_nhle=max_nhle, max_avg_rank=max_avg_rank)


def compute_derived_metrics(
    record: RawPlayerRecord,
    config: LeagueConfig,
    scalars: PopulationScalars,
) -> DerivedMetrics:
    nhle = compute_nhle(record, config)
    stats_score = compute_stats_score(nhle, scalars.max_nhle)
    rank_score = compute_rank_score(record.avg_rank, scalars.max_avg_rank)
    return DerivedMetrics(
        nhle=nhle,
        stats_score=stats_score,
        rank_score=rank_score,
        composite_score=compute_composite_score(stats_score, rank_score),
    )


__all__ = [
    "DEFAULT_LEAGUE_FACTOR",
    "PopulationScalars",
    "compute_composite_score",
    "compute_derived_metrics",
    "compute_nhle",
    "compute_rank_score",
    "compute_stats_score",
    "population_scalars",
    "round_fixed",
]
