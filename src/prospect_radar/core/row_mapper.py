"""Map decoded sheet rows onto typed player records and league configuration."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from prospect_radar.core.records import DEFAULT_SEASON_LENGTH_NHL, LeagueConfig, RawPlayerRecord

logger = logging.getLogger(__name__)

# Columns A-S of the player tab; Name (F) is the last column a row must reach.
PLAYER_COLUMNS: tuple[str, ...] = (
    "Tier",
    "AvgRank",
    "InTierRank",
    "V1Rank",
    "JohnRank",
    "Name",
    "Country",
    "League",
    "GP",
    "G",
    "A",
    "P",
    "PPG",
    "Birthdate",
    "Age",
    "Height",
    "Weight",
    "Shoots",
    "Position",
)
MIN_PLAYER_ROW_WIDTH = PLAYER_COLUMNS.index("Name") + 1
UNKNOWN_PLAYER = "Unknown"

SEASON_LENGTH_LABEL = "SeasonLengthNHL"
LEAGUE_TABLE_HEADER = ("League", "NHLeFactor")

_INT_PREFIX = re.compile(r"^[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_int(value: Optional[str], default: int = 0) -> int:
    """Leading-integer parse: ``"6.5" -> 6``, ``"12abc" -> 12``, unparsable -> ``default``."""
    if value is None:
        return default
    match = _INT_PREFIX.match(value.strip())
    if not match:
        return default
    return int(match.group(0))


def parse_float(value: Optional[str], default: Optional[float] = 0.0) -> Optional[float]:
    """Leading-float parse mirroring ``parse_int``; returns ``default`` when nothing parses."""
    if value is None:
        return default
    match = _FLOAT_PREFIX.match(value.strip())
    if not match:
        return default
    return float(match.group(0))


def _cell(row: Sequence[str], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def map_player_row(row: Optional[Sequence[str]]) -> Optional[RawPlayerRecord]:
    """Convert one player-tab row into a record, or ``None`` when the row is too short."""
    if not row or len(row) < MIN_PLAYER_ROW_WIDTH:
        return None

    return RawPlayerRecord(
        tier=parse_int(_cell(row, 0)),
        avg_rank=parse_float(_cell(row, 1)),
        in_tier_rank=parse_int(_cell(row, 2)),
        v1_rank=parse_int(_cell(row, 3)),
        john_rank=parse_int(_cell(row, 4)),
        name=_cell(row, 5) or UNKNOWN_PLAYER,
        country=_cell(row, 6),
        league=_cell(row, 7),
        gp=parse_int(_cell(row, 8)),
        g=parse_int(_cell(row, 9)),
        a=parse_int(_cell(row, 10)),
        p=parse_int(_cell(row, 11)),
        ppg=parse_float(_cell(row, 12)),
        birthdate=_cell(row, 13),
        age=parse_int(_cell(row, 14)),
        height=_cell(row, 15),
        weight=parse_int(_cell(row, 16)),
        shoots=_cell(row, 17) or "L",
        position=_cell(row, 18),
    )


def map_player_rows(rows: Iterable[Sequence[str]]) -> List[RawPlayerRecord]:
    """Map every data row (row 0 is the header) and drop rows that are not players."""
    records: List[RawPlayerRecord] = []
    dropped = 0
    for index, row in enumerate(rows):
        if index == 0:
            continue
        record = map_player_row(row)
        if record is None or record.name == UNKNOWN_PLAYER:
            dropped += 1
            continue
        records.append(record)
    if dropped:
        logger.info("Dropped non-player rows", extra={"dropped": dropped, "kept": len(records)})
    return records


def map_config(rows: Iterable[Sequence[str]]) -> LeagueConfig:
    """Scan config rows for the season-length scalar and the league factor table."""
    season_length = DEFAULT_SEASON_LENGTH_NHL
    factors: Dict[str, float] = {}
    league_start_row = -1

    for index, row in enumerate(rows):
        first = _cell(row, 0)
        if not first:
            continue
        second = _cell(row, 1)

        if first.strip() == SEASON_LENGTH_LABEL and second:
            parsed = parse_float(second, default=None)
            if parsed is not None:
                season_length = int(parsed)
            else:
                logger.warning("Ignoring unparsable season length", extra={"value": second})

        if first.strip() == LEAGUE_TABLE_HEADER[0] and second == LEAGUE_TABLE_HEADER[1]:
            league_start_row = index + 1

        if league_start_row > 0 and index >= league_start_row:
            factor = parse_float(second, default=None)
            if factor is not None:
                factors[first] = factor

    return LeagueConfig(league_factors=factors, season_length_nhl=season_length)


__all__ = [
    "MIN_PLAYER_ROW_WIDTH",
    "PLAYER_COLUMNS",
    "map_config",
    "map_player_row",
    "map_player_rows",
    "parse_float",
    "parse_int",
]
