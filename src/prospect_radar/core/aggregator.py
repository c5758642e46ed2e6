"""Population pass: overrides, population scalars, per-player scores, annotations."""

from __future__ import annotations

import logging
from typing import List, Sequence

from prospect_radar.core.metrics import compute_derived_metrics, population_scalars
from prospect_radar.core.overrides import apply_live_stats
from prospect_radar.core.records import LeagueConfig, PlayerEntity, RawPlayerRecord
from prospect_radar.storage.annotation_store import AnnotationSnapshot

logger = logging.getLogger(__name__)


def build_player_entities(
    records: Sequence[RawPlayerRecord],
    config: LeagueConfig,
    annotations: AnnotationSnapshot,
) -> List[PlayerEntity]:
    """
    Build the full presentation-facing prospect list from scratch.

    Live-stat overrides stored in each player's scouting report are applied
    first, then the NHLe and AvgRank maxima are taken over the corrected
    population, and only then is every player scored. An empty input yields an
    empty list, which callers must read as "no data available".
    """
    if not records:
        return []

    prepared = []
    for record in records:
        scouting = annotations.scouting_for(record.name)
        corrected, has_live_stats = apply_live_stats(record, scouting.live_stats)
        prepared.append((corrected, scouting, has_live_stats))

    scalars = population_scalars([item[0] for item in prepared], config)
    logger.info(
        "Computed population scalars",
        extra={
            "players": len(prepared),
            "max_nhle": scalars.max_nhle,
            "max_avg_rank": scalars.max_avg_rank,
            "live_overrides": sum(1 for item in prepared if item[2]),
        },
    )

    entities: List[PlayerEntity] = []
    for record, scouting, has_live_stats in prepared:
        entities.append(
            PlayerEntity(
                record=record,
                metrics=compute_derived_metrics(record, config, scalars),
                tags=tuple(annotations.tags_for(record.name)),
                is_watched=annotations.is_watched(record.name),
                scouting=scouting,
                has_live_stats=has_live_stats,
            )
        )
    return entities


__all__ = ["build_player_entities"]
