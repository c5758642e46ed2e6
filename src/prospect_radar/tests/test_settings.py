from __future__ import annotations

from pathlib import Path

import pytest

from prospect_radar.core.paths import DEFAULT_ANNOTATIONS_PATH
from prospect_radar.core.settings import DEFAULT_FETCH_RETRIES, load_radar_config


def test_defaults_without_env(monkeypatch) -> None:
    for name in ("PROSPECT_PLAYERS_CSV", "PROSPECT_ANNOTATIONS_PATH", "PROSPECT_FETCH_RETRIES",
                 "PROSPECT_INTEL_API_KEY", "GEMINI_API_KEY", "PROSPECT_PLAYERS_SHEET"):
        monkeypatch.delenv(name, raising=False)
    cfg = load_radar_config()
    assert cfg.players_csv is None
    assert cfg.players_sheet == "Players"
    assert cfg.annotations_path == DEFAULT_ANNOTATIONS_PATH
    assert cfg.fetch_retries == DEFAULT_FETCH_RETRIES
    assert cfg.intel_api_key is None


def test_env_overrides(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("PROSPECT_PLAYERS_CSV", str(tmp_path / "players.csv"))
    monkeypatch.setenv("PROSPECT_PLAYERS_SHEET", "  ")
    monkeypatch.setenv("PROSPECT_FETCH_TIMEOUT", "5")
    monkeypatch.delenv("PROSPECT_INTEL_API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "fallback-key")
    cfg = load_radar_config()
    assert cfg.players_csv == tmp_path / "players.csv"
    assert cfg.players_sheet == "Players"
    assert cfg.fetch_timeout == 5.0
    assert cfg.intel_api_key == "fallback-key"


@pytest.mark.parametrize(
    ("name", "value"),
    [("PROSPECT_FETCH_TIMEOUT", "0"), ("PROSPECT_FETCH_TIMEOUT", "soon"), ("PROSPECT_FETCH_RETRIES", "-1")],
)
def test_invalid_numbers_name_the_variable(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        load_radar_config()
