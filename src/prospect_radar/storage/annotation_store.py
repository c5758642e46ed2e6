"""Key/value storage for user annotations keyed by player name.

Annotations are owned outside the scoring pipeline: the aggregator only ever
reads an ``AnnotationSnapshot`` taken once per pass, and every edit goes
through one of the store's write commands.
"""

from __future__ import annotations

import copy
import json
import logging
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from prospect_radar.core.records import (
    LiveStatsOverride,
    PlayerNote,
    ScoutingReport,
    default_skills,
    normalize_skills,
)

logger = logging.getLogger(__name__)


def _empty_state() -> Dict[str, Any]:
    return {"tags": {}, "watched": [], "scouting": {}}


def _coerce_state(payload: Any) -> Dict[str, Any]:
    state = _empty_state()
    if not isinstance(payload, dict):
        return state
    tags = payload.get("tags")
    if isinstance(tags, dict):
        state["tags"] = {
            str(name): [str(tag) for tag in values]
            for name, values in tags.items()
            if isinstance(values, list)
        }
    watched = payload.get("watched")
    if isinstance(watched, list):
        state["watched"] = [str(name) for name in watched]
    scouting = payload.get("scouting")
    if isinstance(scouting, dict):
        state["scouting"] = {str(name): report for name, report in scouting.items() if isinstance(report, dict)}
    return state


class AnnotationSnapshot:
    """Read-only view of the annotation state at one point in time."""

    def __init__(self, state: Mapping[str, Any]):
        self._state = copy.deepcopy(dict(state))

    def tags_for(self, name: str) -> List[str]:
        return list(self._state.get("tags", {}).get(name, []))

    def is_watched(self, name: str) -> bool:
        return name in self._state.get("watched", [])

    def scouting_for(self, name: str) -> ScoutingReport:
        return ScoutingReport.from_dict(self._state.get("scouting", {}).get(name))

    def watched_names(self) -> List[str]:
        return list(self._state.get("watched", []))


class AnnotationStore:
    """Base store: subclasses provide ``_load`` and ``_save`` of the raw state."""

    def _load(self) -> Dict[str, Any]:
        raise NotImplementedError

    def _save(self, state: Dict[str, Any]) -> None:
        raise NotImplementedError

    def snapshot(self) -> AnnotationSnapshot:
        return AnnotationSnapshot(self._load())

    def _scouting_entry(self, state: Dict[str, Any], name: str) -> Dict[str, Any]:
        existing = state["scouting"].get(name)
        if not existing:
            existing = {"skills": default_skills(), "notes": []}
        return dict(existing)

    def add_tag(self, name: str, tag: str) -> List[str]:
        tag = tag.strip()
        if not tag:
            raise ValueError("tag cannot be empty.")
        state = self._load()
        player_tags = list(state["tags"].get(name, []))
        if tag not in player_tags:
            player_tags.append(tag)
            state["tags"][name] = player_tags
            self._save(state)
            logger.info("Tag added", extra={"player": name, "tag": tag})
        return player_tags

    def remove_tag(self, name: str, tag: str) -> List[str]:
        state = self._load()
        player_tags = [t for t in state["tags"].get(name, []) if t != tag]
        state["tags"][name] = player_tags
        self._save(state)
        return player_tags

    def toggle_watch(self, name: str) -> bool:
        """Flip watchlist membership and return the new state."""
        state = self._load()
        watched = list(state["watched"])
        if name in watched:
            watched = [n for n in watched if n != name]
            is_watched = False
        else:
            watched.append(name)
            is_watched = True
        state["watched"] = watched
        self._save(state)
        logger.info("Watchlist toggled", extra={"player": name, "watched": is_watched})
        return is_watched

    def save_skills(self, name: str, skills: Mapping[str, Any]) -> Dict[str, int]:
        state = self._load()
        entry = self._scouting_entry(state, name)
        entry["skills"] = normalize_skills(skills)
        state["scouting"][name] = entry
        self._save(state)
        return dict(entry["skills"])

    def save_live_stats(self, name: str, stats: LiveStatsOverride) -> LiveStatsOverride:
        """Store a live-stats correction, replacing any previous one wholesale."""
        state = self._load()
        entry = self._scouting_entry(state, name)
        entry["liveStats"] = stats.to_dict()
        entry.pop("live_stats", None)
        state["scouting"][name] = entry
        self._save(state)
        logger.info("Live stats saved", extra={"player": name, **stats.to_dict()})
        return stats

    def add_note(self, name: str, text: str) -> PlayerNote:
        text = text.strip()
        if not text:
            raise ValueError("note text cannot be empty.")
        state = self._load()
        entry = self._scouting_entry(state, name)
        note = PlayerNote(id=uuid.uuid4().hex, text=text, date=date.today().isoformat())
        entry["notes"] = [note.to_dict(), *list(entry.get("notes") or [])]
        state["scouting"][name] = entry
        self._save(state)
        return note

    def delete_note(self, name: str, note_id: str) -> bool:
        state = self._load()
        entry = self._scouting_entry(state, name)
        notes = list(entry.get("notes") or [])
        keep = [n for n in notes if str(n.get("id")) != str(note_id)]
        deleted = len(keep) != len(notes)
        entry["notes"] = keep
        state["scouting"][name] = entry
        self._save(state)
        return deleted


class InMemoryAnnotationStore(AnnotationStore):
    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._state = _coerce_state(copy.deepcopy(dict(initial)) if initial else None)

    def _load(self) -> Dict[str, Any]:
        return copy.deepcopy(self._state)

    def _save(self, state: Dict[str, Any]) -> None:
        self._state = copy.deepcopy(state)


class JsonAnnotationStore(AnnotationStore):
    """Annotation state persisted as one JSON document on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _quarantine(self) -> Path:
        """Move an unreadable file aside so the next save cannot overwrite it."""
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        self.path.replace(target)
        return target

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return _empty_state()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            moved = self._quarantine()
            logger.error(
                "Annotation file is not valid JSON; moved aside and starting empty",
                extra={"path": str(self.path), "moved_to": str(moved), "error": str(exc)},
            )
            return _empty_state()
        return _coerce_state(payload)

    def _save(self, state: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(state, ensure_ascii=True, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)


__all__ = [
    "AnnotationSnapshot",
    "AnnotationStore",
    "InMemoryAnnotationStore",
    "JsonAnnotationStore",
]
