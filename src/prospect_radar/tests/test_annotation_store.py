from __future__ import annotations

import json
from pathlib import Path

import pytest

from prospect_radar.core.records import LiveStatsOverride
from prospect_radar.storage.annotation_store import InMemoryAnnotationStore, JsonAnnotationStore


def test_json_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "state" / "annotations.json"
    store = JsonAnnotationStore(path)
    store.add_tag("Ivan Demidov", "Elite Hands")
    store.add_tag("Ivan Demidov", "Elite Hands")
    store.add_tag("Ivan Demidov", "Sleeper")
    assert store.toggle_watch("Ivan Demidov") is True

    reopened = JsonAnnotationStore(path).snapshot()
    assert reopened.tags_for("Ivan Demidov") == ["Elite Hands", "Sleeper"]
    assert reopened.is_watched("Ivan Demidov")
    assert reopened.watched_names() == ["Ivan Demidov"]

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert set(payload) == {"tags", "watched", "scouting"}


def test_toggle_watch_flips_membership() -> None:
    store = InMemoryAnnotationStore()
    assert store.toggle_watch("Cole Eiserman") is True
    assert store.toggle_watch("Cole Eiserman") is False
    assert not store.snapshot().is_watched("Cole Eiserman")


def test_remove_tag_and_blank_tag() -> None:
    store = InMemoryAnnotationStore()
    store.add_tag("Zeev Buium", "PP QB")
    assert store.remove_tag("Zeev Buium", "PP QB") == []
    with pytest.raises(ValueError):
        store.add_tag("Zeev Buium", "   ")


def test_save_skills_clamps_and_fills_defaults() -> None:
    store = InMemoryAnnotationStore()
    skills = store.save_skills("Artyom Levshunov", {"Skating": 95, "Hands": 10, "Telepathy": 80})
    assert skills["Skating"] == 80
    assert skills["Hands"] == 20
    assert skills["Passing"] == 50
    assert "Telepathy" not in skills
    assert store.snapshot().scouting_for("Artyom Levshunov").skills["Skating"] == 80


def test_live_stats_are_replaced_wholesale() -> None:
    store = InMemoryAnnotationStore()
    store.save_live_stats("Sam Dickinson", LiveStatsOverride(gp=20, g=5, a=20, p=25))
    store.save_live_stats("Sam Dickinson", LiveStatsOverride(gp=22, g=6, a=21, p=27))
    report = store.snapshot().scouting_for("Sam Dickinson")
    assert report.live_stats == LiveStatsOverride(gp=22, g=6, a=21, p=27)
    assert report.to_dict()["liveStats"] == {"GP": 22, "G": 6, "A": 21, "P": 27}


def test_live_stats_keep_existing_skills_and_notes() -> None:
    store = InMemoryAnnotationStore()
    store.save_skills("Sam Dickinson", {"IQ": 70})
    store.add_note("Sam Dickinson", "Great first pass.")
    store.save_live_stats("Sam Dickinson", LiveStatsOverride(gp=20, g=5, a=20, p=25))
    report = store.snapshot().scouting_for("Sam Dickinson")
    assert report.skills["IQ"] == 70
    assert [n.text for n in report.notes] == ["Great first pass."]


def test_notes_are_newest_first_and_deletable() -> None:
    store = InMemoryAnnotationStore()
    first = store.add_note("Macklin Celebrini", "  Dominant in transition.  ")
    second = store.add_note("Macklin Celebrini", "Strong on the forecheck.")
    assert first.id != second.id
    assert first.text == "Dominant in transition."

    notes = store.snapshot().scouting_for("Macklin Celebrini").notes
    assert [n.id for n in notes] == [second.id, first.id]

    assert store.delete_note("Macklin Celebrini", first.id) is True
    assert store.delete_note("Macklin Celebrini", "missing") is False
    remaining = store.snapshot().scouting_for("Macklin Celebrini").notes
    assert [n.id for n in remaining] == [second.id]


def test_empty_note_is_rejected() -> None:
    with pytest.raises(ValueError):
        InMemoryAnnotationStore().add_note("Macklin Celebrini", " ")


def test_snapshot_is_isolated_from_later_writes() -> None:
    store = InMemoryAnnotationStore()
    store.add_tag("Berkly Catton", "Speed")
    snapshot = store.snapshot()
    store.add_tag("Berkly Catton", "Motor")
    assert snapshot.tags_for("Berkly Catton") == ["Speed"]


def test_missing_file_starts_empty(tmp_path: Path) -> None:
    assert JsonAnnotationStore(tmp_path / "missing.json").snapshot().watched_names() == []


def test_corrupt_file_is_moved_aside_before_the_next_write(tmp_path: Path) -> None:
    path = tmp_path / "annotations.json"
    document = {
        "tags": {f"P{i}": ["Sleeper"] for i in range(50)},
        "watched": ["P1", "P2"],
        "scouting": {},
    }
    damaged = json.dumps(document) + "x"
    path.write_text(damaged, encoding="utf-8")

    store = JsonAnnotationStore(path)
    store.add_tag("P0", "Speed")

    assert JsonAnnotationStore(path).snapshot().tags_for("P0") == ["Speed"]
    moved = list(tmp_path.glob("annotations.json.corrupt-*"))
    assert len(moved) == 1
    assert moved[0].read_text(encoding="utf-8") == damaged
    recovered = json.loads(moved[0].read_text(encoding="utf-8")[:-1])
    assert len(recovered["tags"]) == 50
    assert recovered["watched"] == ["P1", "P2"]


def test_saves_replace_the_file_without_leftovers(tmp_path: Path) -> None:
    path = tmp_path / "annotations.json"
    store = JsonAnnotationStore(path)
    store.add_tag("Tij Iginla", "Shooter")
    store.toggle_watch("Tij Iginla")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["annotations.json"]
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["tags"] == {"Tij Iginla": ["Shooter"]}
    assert payload["watched"] == ["Tij Iginla"]


def test_malformed_sections_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "annotations.json"
    path.write_text(
        json.dumps({"tags": ["oops"], "watched": "nope", "scouting": {"A": {"liveStats": {"GP": 3}}}}),
        encoding="utf-8",
    )
    snapshot = JsonAnnotationStore(path).snapshot()
    assert snapshot.tags_for("A") == []
    assert snapshot.watched_names() == []
    assert snapshot.scouting_for("A").live_stats is None
