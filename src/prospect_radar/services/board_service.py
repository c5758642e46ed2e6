"""Service functions for the prospect board: cached population, queries and annotation commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Sequence

import numpy as np
import pandas as pd

from prospect_radar.core.aggregator import build_player_entities
from prospect_radar.core.records import SKILL_NAMES, LeagueConfig, LiveStatsOverride, PlayerEntity, RawPlayerRecord
from prospect_radar.core.row_mapper import map_config, map_player_rows
from prospect_radar.core.settings import load_radar_config
from prospect_radar.ingest.sheet_source import load_source_rows
from prospect_radar.storage.annotation_store import AnnotationStore, JsonAnnotationStore

logger = logging.getLogger(__name__)

SortField = Literal["CompositeScore", "AvgRank", "Tier", "NHLe", "PPG"]
SortOrder = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = ("CompositeScore", "AvgRank", "Tier", "NHLe", "PPG")
ASCENDING_BY_DEFAULT = {"AvgRank", "Tier"}
MAX_COMPARE = 4

# (label, column, full mark) for the comparison stats radar.
STATS_RADAR_AXES: tuple[tuple[str, str, float], ...] = (
    ("NHLe", "NHLe", 100.0),
    ("PPG", "PPG", 2.0),
    ("CompScore", "CompositeScore", 100.0),
    ("StatsScore", "StatsScore", 100.0),
    ("RankScore", "RankScore", 100.0),
    ("GP", "GP", 70.0),
)
COMPARE_SKILL_ORDER: tuple[str, ...] = ("Skating", "Shooting", "Hands", "Passing", "IQ", "Defense", "Physicality", "Compete")


class NoProspectDataError(LookupError):
    """Raised when the source produced no valid player rows."""


class PlayerNotFoundError(KeyError):
    """Raised when a player name is not part of the current population."""


@dataclass
class _SourceCache:
    records: List[RawPlayerRecord]
    league_config: LeagueConfig


_SOURCE_CACHE: _SourceCache | None = None
_BOARD_CACHE: List[PlayerEntity] | None = None
_STORE_OVERRIDE: AnnotationStore | None = None


def set_annotation_store(store: AnnotationStore | None) -> None:
    """Inject an annotation store (``None`` restores the configured JSON store)."""
    global _STORE_OVERRIDE
    _STORE_OVERRIDE = store
    invalidate_board()


def get_annotation_store() -> AnnotationStore:
    if _STORE_OVERRIDE is not None:
        return _STORE_OVERRIDE
    return JsonAnnotationStore(load_radar_config().annotations_path)


def invalidate_board() -> None:
    global _BOARD_CACHE
    _BOARD_CACHE = None


def refresh_board() -> None:
    """Drop both the decoded source and the scored board so the next read refetches everything."""
    global _SOURCE_CACHE
    _SOURCE_CACHE = None
    invalidate_board()


def _load_source() -> _SourceCache:
    global _SOURCE_CACHE
    if _SOURCE_CACHE is not None:
        return _SOURCE_CACHE
    player_rows, config_rows = load_source_rows(load_radar_config())
    _SOURCE_CACHE = _SourceCache(
        records=map_player_rows(player_rows),
        league_config=map_config(config_rows),
    )
    return _SOURCE_CACHE


def get_league_config() -> LeagueConfig:
    return _load_source().league_config


def get_players() -> List[PlayerEntity]:
    """Return the scored population, rebuilding it when annotations or sources changed."""
    global _BOARD_CACHE
    if _BOARD_CACHE is not None:
        return list(_BOARD_CACHE)

    source = _load_source()
    entities = build_player_entities(
        source.records,
        source.league_config,
        get_annotation_store().snapshot(),
    )
    logger.info("Board rebuilt", extra={"players": len(entities)})
    _BOARD_CACHE = entities
    return list(entities)


def _require_players() -> List[PlayerEntity]:
    players = get_players()
    if not players:
        raise NoProspectDataError("No prospect data available.")
    return players


def _find_player(players: Sequence[PlayerEntity], name: str) -> PlayerEntity:
    for player in players:
        if player.name == name:
            return player
    raise PlayerNotFoundError(f"Unknown player: {name}")


def players_frame(players: Sequence[PlayerEntity]) -> pd.DataFrame:
    """Flat frame of the filterable/sortable fields, indexed by position in ``players``."""
    rows = []
    for idx, player in enumerate(players):
        r, m = player.record, player.metrics
        rows.append(
            {
                "idx": idx,
                "Name": r.name,
                "League": r.league,
                "Position": r.position,
                "Tier": r.tier,
                "AvgRank": r.avg_rank,
                "PPG": r.ppg,
                "GP": r.gp,
                "NHLe": m.nhle,
                "StatsScore": m.stats_score,
                "RankScore": m.rank_score,
                "CompositeScore": m.composite_score,
                "isWatched": player.is_watched,
                "tags": list(player.tags),
            }
        )
    columns = ["idx", "Name", "League", "Position", "Tier", "AvgRank", "PPG", "GP", "NHLe",
               "StatsScore", "RankScore", "CompositeScore", "isWatched", "tags"]
    return pd.DataFrame(rows, columns=columns)


def sort_players_frame(frame: pd.DataFrame, sort_by: str, sort_order: SortOrder) -> pd.DataFrame:
    """Stable sort; when sorting by AvgRank the unranked sentinel (0) always goes last."""
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"sort_by must be one of {', '.join(SORT_FIELDS)}, got {sort_by!r}.")
    ascending = sort_order == "asc"
    if sort_by != "AvgRank":
        return frame.sort_values(sort_by, ascending=ascending, kind="mergesort")
    out = frame.assign(_unranked=frame["AvgRank"] == 0)
    out = out.sort_values(["_unranked", "AvgRank"], ascending=[True, ascending], kind="mergesort")
    return out.drop(columns="_unranked")


def query_players(
    *,
    min_tier: int | None = None,
    max_tier: int | None = None,
    leagues: Sequence[str] | None = None,
    positions: Sequence[str] | None = None,
    search: str | None = None,
    min_composite: float | None = None,
    watched_only: bool = False,
    tag: str | None = None,
    sort_by: str = "AvgRank",
    sort_order: SortOrder | None = None,
    limit: int = 100,
    offset: int = 0,
) -> dict[str, Any]:
    players = _require_players()
    frame = players_frame(players)

    if min_tier is not None:
        frame = frame[frame["Tier"] >= int(min_tier)]
    if max_tier is not None:
        frame = frame[frame["Tier"] <= int(max_tier)]
    if min_composite is not None:
        frame = frame[frame["CompositeScore"] >= float(min_composite)]
    if leagues:
        wanted = {str(league).casefold() for league in leagues}
        frame = frame[frame["League"].str.casefold().isin(wanted)]
    if positions:
        wanted = {str(pos).casefold() for pos in positions}
        frame = frame[frame["Position"].str.casefold().isin(wanted)]
    if search:
        query = search.strip().casefold()
        if query:
            matches = frame["Name"].str.casefold().str.contains(query, regex=False) | frame[
                "League"
            ].str.casefold().str.contains(query, regex=False)
            frame = frame[matches.astype(bool)]
    if watched_only:
        frame = frame[frame["isWatched"].astype(bool)]
    if tag:
        wanted_tag = tag.strip().casefold()
        has_tag = frame["tags"].apply(lambda tags: any(t.casefold() == wanted_tag for t in tags))
        frame = frame[has_tag.astype(bool)]

    if sort_order is None:
        sort_order = "asc" if sort_by in ASCENDING_BY_DEFAULT else "desc"
    frame = sort_players_frame(frame, sort_by, sort_order)

    total = int(len(frame))
    start = max(int(offset), 0)
    end = start + max(int(limit), 0)
    page = frame.iloc[start:end]

    return {
        "total": total,
        "count": int(len(page)),
        "limit": int(limit),
        "offset": int(offset),
        "sort_by": sort_by,
        "sort_order": sort_order,
        "items": [players[int(i)].to_dict() for i in page["idx"]],
    }


def get_player(name: str) -> dict[str, Any]:
    return _find_player(_require_players(), name).to_dict()


def list_filter_options() -> dict[str, Any]:
    """Distinct leagues and positions present on the board, plus configured league factors."""
    frame = players_frame(_require_players())
    config = get_league_config()
    return {
        "leagues": sorted(frame["League"].dropna().unique().tolist()),
        "positions": sorted(frame["Position"].dropna().unique().tolist()),
        "league_factors": dict(config.league_factors),
        "season_length_nhl": config.season_length_nhl,
    }


def compare_players(names: Sequence[str]) -> dict[str, Any]:
    """Radar datasets for up to four players: scaled production profile and raw skill grades."""
    players = _require_players()
    by_name = {player.name: player for player in players}
    active: List[PlayerEntity] = []
    for name in list(names)[:MAX_COMPARE]:
        player = by_name.get(name)
        if player is not None and player not in active:
            active.append(player)

    stats_radar: List[Dict[str, Any]] = []
    if active:
        frame = players_frame(active).set_index("Name")
        for label, column, full_mark in STATS_RADAR_AXES:
            scaled = np.clip(frame[column].astype(float) / full_mark * 100.0, 0.0, 100.0)
            point: Dict[str, Any] = {"subject": label, "fullMark": full_mark}
            point.update({name: float(value) for name, value in scaled.items()})
            stats_radar.append(point)
    else:
        stats_radar = [{"subject": label, "fullMark": full_mark} for label, _, full_mark in STATS_RADAR_AXES]

    skills_radar: List[Dict[str, Any]] = []
    for skill in COMPARE_SKILL_ORDER:
        point = {"subject": skill}
        for player in active:
            point[player.name] = int(player.scouting.skills.get(skill, 50))
        skills_radar.append(point)

    return {
        "players": [player.to_dict() for player in active],
        "stats_radar": stats_radar,
        "skills_radar": skills_radar,
    }


def _write_and_reload(name: str) -> dict[str, Any]:
    invalidate_board()
    return get_player(name)


def _ensure_known(name: str) -> None:
    _find_player(_require_players(), name)


def add_tag(name: str, tag: str) -> dict[str, Any]:
    _ensure_known(name)
    get_annotation_store().add_tag(name, tag)
    return _write_and_reload(name)


def remove_tag(name: str, tag: str) -> dict[str, Any]:
    _ensure_known(name)
    get_annotation_store().remove_tag(name, tag)
    return _write_and_reload(name)


def toggle_watch(name: str) -> dict[str, Any]:
    _ensure_known(name)
    get_annotation_store().toggle_watch(name)
    return _write_and_reload(name)


def save_skills(name: str, skills: Mapping[str, Any]) -> dict[str, Any]:
    _ensure_known(name)
    unknown = sorted(set(skills) - set(SKILL_NAMES))
    if unknown:
        raise ValueError(f"Unknown skill(s): {', '.join(unknown)}")
    get_annotation_store().save_skills(name, skills)
    return _write_and_reload(name)


def save_live_stats(name: str, stats: LiveStatsOverride) -> dict[str, Any]:
    _ensure_known(name)
    if min(stats.gp, stats.g, stats.a, stats.p) < 0:
        raise ValueError("Live stats must be non-negative.")
    get_annotation_store().save_live_stats(name, stats)
    return _write_and_reload(name)


def add_note(name: str, text: str) -> dict[str, Any]:
    _ensure_known(name)
    get_annotation_store().add_note(name, text)
    return _write_and_reload(name)


def delete_note(name: str, note_id: str) -> dict[str, Any]:
    _ensure_known(name)
    get_annotation_store().delete_note(name, note_id)
    return _write_and_reload(name)


def health_payload() -> dict[str, Any]:
    cfg = load_radar_config()
    out: dict[str, Any] = {
        "status": "ok",
        "sources": {
            "players": str(cfg.players_csv) if cfg.players_csv else f"sheet:{cfg.players_sheet}",
            "config": str(cfg.config_csv) if cfg.config_csv else f"sheet:{cfg.config_sheet}",
            "annotations_path": str(cfg.annotations_path),
        },
    }
    try:
        players = get_players()
        out["player_count"] = int(len(players))
        out["league_count"] = int(len(get_league_config().league_factors))
        if not players:
            out["status"] = "no_data"
    except Exception as exc:
        out["status"] = "error"
        out["player_count"] = None
        out["error"] = str(exc)
    return out


__all__ = [
    "NoProspectDataError",
    "PlayerNotFoundError",
    "SORT_FIELDS",
    "add_note",
    "add_tag",
    "compare_players",
    "delete_note",
    "get_annotation_store",
    "get_league_config",
    "get_player",
    "get_players",
    "health_payload",
    "invalidate_board",
    "list_filter_options",
    "players_frame",
    "query_players",
    "refresh_board",
    "remove_tag",
    "save_live_stats",
    "save_skills",
    "set_annotation_store",
    "sort_players_frame",
    "toggle_watch",
]
