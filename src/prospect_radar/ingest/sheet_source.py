"""
Tabular source loading for the player and config tabs.

Rows come either from a local CSV export or from the Google Sheets "gviz" CSV
endpoint of a named tab. Decoding is plain CSV: quoted cells may hold commas,
doubled quotes and line breaks; every cell is trimmed and blank lines dropped.
"""

from __future__ import annotations

import csv
import io
import logging
import time
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import quote

import httpx

from prospect_radar.core.settings import RadarConfig

logger = logging.getLogger(__name__)

GVIZ_CSV_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&sheet={sheet}"

Rows = List[List[str]]


def decode_csv(text: str) -> Rows:
    reader = csv.reader(io.StringIO(text, newline=""))
    return [[cell.strip() for cell in row] for row in reader if row]


def sheet_csv_url(sheet_id: str, sheet_name: str) -> str:
    return GVIZ_CSV_URL.format(sheet_id=sheet_id, sheet=quote(sheet_name, safe=""))


def fetch(url: str, timeout: float = 20.0, retries: int = 2, sleep_between: float = 1.5) -> str:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            with httpx.Client(follow_redirects=True, timeout=timeout) as client:
                r = client.get(url)
                r.raise_for_status()
                return r.text
        except httpx.HTTPError as e:
            last_err = e
            if attempt < retries:
                time.sleep(sleep_between)
            else:
                raise
    raise RuntimeError(f"Failed to fetch {url}: {last_err}")


def fetch_sheet_rows(sheet_id: str, sheet_name: str, *, timeout: float = 20.0, retries: int = 2) -> Rows:
    """Download one tab; a failed fetch is logged and yields no rows."""
    url = sheet_csv_url(sheet_id, sheet_name)
    try:
        text = fetch(url, timeout=timeout, retries=retries)
    except httpx.HTTPError as exc:
        logger.error("Failed to load sheet tab", extra={"sheet": sheet_name, "error": str(exc)})
        return []
    return decode_csv(text)


def read_csv_rows(path: Path) -> Rows:
    if not path.exists():
        logger.error("Source CSV not found", extra={"path": str(path)})
        return []
    return decode_csv(path.read_text(encoding="utf-8-sig"))


def _load_tab(local_path: Optional[Path], cfg: RadarConfig, sheet_name: str) -> Rows:
    if local_path is not None:
        return read_csv_rows(local_path)
    return fetch_sheet_rows(cfg.sheet_id, sheet_name, timeout=cfg.fetch_timeout, retries=cfg.fetch_retries)


def load_source_rows(cfg: RadarConfig) -> Tuple[Rows, Rows]:
    """Return ``(player_rows, config_rows)`` for the configured sources."""
    player_rows = _load_tab(cfg.players_csv, cfg, cfg.players_sheet)
    config_rows = _load_tab(cfg.config_csv, cfg, cfg.config_sheet)
    logger.info(
        "Loaded source rows",
        extra={"player_rows": len(player_rows), "config_rows": len(config_rows)},
    )
    return player_rows, config_rows


__all__ = [
    "decode_csv",
    "fetch",
    "fetch_sheet_rows",
    "load_source_rows",
    "read_csv_rows",
    "sheet_csv_url",
]
