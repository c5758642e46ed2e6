"""Typed records flowing through the prospect scoring pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_SEASON_LENGTH_NHL = 82
DEFAULT_SKILL_GRADE = 50
MIN_SKILL_GRADE = 20
MAX_SKILL_GRADE = 80

SKILL_NAMES: Tuple[str, ...] = (
    "Skating",
    "Shooting",
    "Hands",
    "Passing",
    "Physicality",
    "IQ",
    "Defense",
    "Compete",
)


@dataclass(frozen=True)
class RawPlayerRecord:
    """One prospect's season-to-date facts as sourced from the player tab."""

    name: str
    tier: int = 0
    avg_rank: float = 0.0
    in_tier_rank: int = 0
    v1_rank: int = 0
    john_rank: int = 0
    country: str = ""
    league: str = ""
    gp: int = 0
    g: int = 0
    a: int = 0
    p: int = 0
    ppg: float = 0.0
    birthdate: str = ""
    age: int = 0
    height: str = ""
    weight: int = 0
    shoots: str = "L"
    position: str = ""


@dataclass(frozen=True)
class LeagueConfig:
    """League strength factors plus the NHL season length, fixed for one pass."""

    league_factors: Mapping[str, float] = field(default_factory=dict)
    season_length_nhl: int = DEFAULT_SEASON_LENGTH_NHL

    def __post_init__(self) -> None:
        object.__setattr__(self, "league_factors", MappingProxyType(dict(self.league_factors)))

    def factor_for(self, league: str, default: float) -> float:
        return self.league_factors.get(league, default)


@dataclass(frozen=True)
class LiveStatsOverride:
    gp: int
    g: int
    a: int
    p: int

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LiveStatsOverride":
        """Build from either ``GP/G/A/P`` or lowercase keys; missing values raise ``KeyError``."""

        def _pick(key: str) -> int:
            if key in payload:
                return int(payload[key])
            return int(payload[key.lower()])

        return cls(gp=_pick("GP"), g=_pick("G"), a=_pick("A"), p=_pick("P"))

    def to_dict(self) -> Dict[str, int]:
        return {"GP": self.gp, "G": self.g, "A": self.a, "P": self.p}


def clamp_grade(value: Any) -> int:
    try:
        grade = int(round(float(value)))
    except (TypeError, ValueError):
        return DEFAULT_SKILL_GRADE
    return min(MAX_SKILL_GRADE, max(MIN_SKILL_GRADE, grade))


def default_skills() -> Dict[str, int]:
    return {name: DEFAULT_SKILL_GRADE for name in SKILL_NAMES}


def normalize_skills(skills: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    """Overlay known skill grades on the defaults, clamped to the 20-80 scale."""
    out = default_skills()
    if not skills:
        return out
    for name in SKILL_NAMES:
        if name in skills and skills[name] is not None:
            out[name] = clamp_grade(skills[name])
    return out


@dataclass(frozen=True)
class PlayerNote:
    id: str
    text: str
    date: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "text": self.text, "date": self.date}


@dataclass(frozen=True)
class ScoutingReport:
    skills: Mapping[str, int] = field(default_factory=default_skills)
    notes: Tuple[PlayerNote, ...] = ()
    live_stats: Optional[LiveStatsOverride] = None

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> "ScoutingReport":
        if not payload:
            return cls()
        notes = tuple(
            PlayerNote(id=str(n.get("id", "")), text=str(n.get("text", "")), date=str(n.get("date", "")))
            for n in payload.get("notes") or []
            if isinstance(n, Mapping)
        )
        live_raw = payload.get("liveStats") or payload.get("live_stats")
        live_stats = None
        if isinstance(live_raw, Mapping):
            try:
                live_stats = LiveStatsOverride.from_dict(live_raw)
            except (KeyError, TypeError, ValueError):
                live_stats = None
        return cls(skills=normalize_skills(payload.get("skills")), notes=notes, live_stats=live_stats)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "skills": dict(self.skills),
            "notes": [note.to_dict() for note in self.notes],
        }
        if self.live_stats is not None:
            out["liveStats"] = self.live_stats.to_dict()
        return out


@dataclass(frozen=True)
class DerivedMetrics:
    nhle: float
    stats_score: float
    rank_score: float
    composite_score: float


@dataclass(frozen=True)
class PlayerEntity:
    """Presentation-facing prospect: sourced record, derived scores and annotations."""

    record: RawPlayerRecord
    metrics: DerivedMetrics
    tags: Tuple[str, ...] = ()
    is_watched: bool = False
    scouting: ScoutingReport = field(default_factory=ScoutingReport)
    has_live_stats: bool = False

    @property
    def name(self) -> str:
        return self.record.name

    def to_dict(self) -> Dict[str, Any]:
        r = self.record
        return {
            "Tier": r.tier,
            "AvgRank": r.avg_rank,
            "InTierRank": r.in_tier_rank,
            "V1Rank": r.v1_rank,
            "JohnRank": r.john_rank,
            "Name": r.name,
            "Country": r.country,
            "League": r.league,
            "GP": r.gp,
            "G": r.g,
            "A": r.a,
            "P": r.p,
            "PPG": r.ppg,
            "Birthdate": r.birthdate,
            "Age": r.age,
            "Height": r.height,
            "Weight": r.weight,
            "Shoots": r.shoots,
            "Position": r.position,
            "NHLe": self.metrics.nhle,
            "StatsScore": self.metrics.stats_score,
            "RankScore": self.metrics.rank_score,
            "CompositeScore": self.metrics.composite_score,
            "tags": list(self.tags),
            "isWatched": self.is_watched,
            "scouting": self.scouting.to_dict(),
            "hasLiveStats": self.has_live_stats,
        }


__all__ = [
    "DEFAULT_SEASON_LENGTH_NHL",
    "DEFAULT_SKILL_GRADE",
    "SKILL_NAMES",
    "DerivedMetrics",
    "LeagueConfig",
    "LiveStatsOverride",
    "PlayerEntity",
    "PlayerNote",
    "RawPlayerRecord",
    "ScoutingReport",
    "clamp_grade",
    "default_skills",
    "normalize_skills",
]
