from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from prospect_radar.core.settings import RadarConfig
from prospect_radar.ingest import sheet_source
from prospect_radar.ingest.sheet_source import decode_csv, load_source_rows, read_csv_rows, sheet_csv_url


def test_decode_csv_handles_quotes_and_blank_lines() -> None:
    text = 'Name,Note\n"Demidov, Ivan","said ""wow"""\n\n  Catton  , fast \r\n"multi\nline",x\n'
    assert decode_csv(text) == [
        ["Name", "Note"],
        ["Demidov, Ivan", 'said "wow"'],
        ["Catton", "fast"],
        ["multi\nline", "x"],
    ]


def test_decode_csv_empty_text() -> None:
    assert decode_csv("") == []


def test_sheet_csv_url_quotes_tab_name() -> None:
    url = sheet_csv_url("abc123", "Draft Board")
    assert url == "https://docs.google.com/spreadsheets/d/abc123/gviz/tq?tqx=out:csv&sheet=Draft%20Board"


def test_read_csv_rows_missing_file(tmp_path: Path) -> None:
    assert read_csv_rows(tmp_path / "absent.csv") == []


def test_read_csv_rows_strips_bom(tmp_path: Path) -> None:
    path = tmp_path / "players.csv"
    path.write_text("\ufeffTier,AvgRank\n1,2.5\n", encoding="utf-8")
    assert read_csv_rows(path) == [["Tier", "AvgRank"], ["1", "2.5"]]


def test_local_csv_sources_take_precedence(tmp_path: Path, monkeypatch) -> None:
    players = tmp_path / "players.csv"
    config = tmp_path / "config.csv"
    players.write_text("Tier,AvgRank\n1,2.5\n", encoding="utf-8")
    config.write_text("League,NHLeFactor\nNCAA,0.41\n", encoding="utf-8")

    def _no_network(*args, **kwargs):
        raise AssertionError("network should not be used when CSV paths are set")

    monkeypatch.setattr(sheet_source, "fetch", _no_network)
    player_rows, config_rows = load_source_rows(RadarConfig(players_csv=players, config_csv=config))
    assert player_rows[1] == ["1", "2.5"]
    assert config_rows[1] == ["NCAA", "0.41"]


def test_sheet_tabs_are_fetched_by_name(monkeypatch) -> None:
    seen: list[str] = []

    def _fake_fetch(url: str, timeout: float = 20.0, retries: int = 2, sleep_between: float = 1.5) -> str:
        seen.append(url)
        return "a,b\n1,2\n"

    monkeypatch.setattr(sheet_source, "fetch", _fake_fetch)
    player_rows, config_rows = load_source_rows(RadarConfig(sheet_id="sheet-1"))
    assert player_rows == [["a", "b"], ["1", "2"]]
    assert config_rows == [["a", "b"], ["1", "2"]]
    assert seen[0].endswith("sheet=Players")
    assert seen[1].endswith("sheet=Config")
    assert "/d/sheet-1/" in seen[0]


def test_failed_fetch_degrades_to_no_rows(monkeypatch) -> None:
    def _boom(*args, **kwargs):
        raise httpx.ConnectError("network down")

    monkeypatch.setattr(sheet_source, "fetch", _boom)
    assert sheet_source.fetch_sheet_rows("sheet-1", "Players") == []


def test_fetch_retries_then_raises(monkeypatch) -> None:
    calls = {"n": 0}

    def _handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(500, request=request)

    real_client = httpx.Client

    def _client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(_handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(sheet_source.httpx, "Client", _client)
    monkeypatch.setattr(sheet_source.time, "sleep", lambda _: None)

    with pytest.raises(httpx.HTTPStatusError):
        sheet_source.fetch("https://example.test/sheet.csv", retries=2)
    assert calls["n"] == 3
