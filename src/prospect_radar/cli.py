from __future__ import annotations

from typing import List, Optional

import pandas as pd
import typer

from prospect_radar.core.records import LiveStatsOverride
from prospect_radar.intel import IntelLookupError
from prospect_radar.logging import configure_logging
from prospect_radar.services import board_service, intel_service

app = typer.Typer(add_completion=False, help="Score, browse and annotate the draft prospect board.")

BOARD_COLUMNS = ["Tier", "AvgRank", "Name", "League", "Position", "GP", "P", "PPG", "NHLe", "CompositeScore"]


@app.callback()
def main_callback(
    log_level: str = typer.Option("INFO", "--log-level", help="Log level for the rotating log file."),
) -> None:
    configure_logging(log_level.upper())


def _fail(exc: Exception) -> None:
    message = exc.args[0] if isinstance(exc, KeyError) and exc.args else str(exc)
    typer.echo(f"[error] {message}", err=True)
    raise typer.Exit(1)


@app.command()
def board(
    sort_by: str = typer.Option("AvgRank", "--sort", "-s", help="CompositeScore, AvgRank, Tier, NHLe or PPG."),
    order: Optional[str] = typer.Option(None, "--order", help="asc or desc (defaults depend on the field)."),
    limit: int = typer.Option(25, "--limit", "-n"),
    min_tier: Optional[int] = typer.Option(None, "--min-tier"),
    max_tier: Optional[int] = typer.Option(None, "--max-tier"),
    league: List[str] = typer.Option(None, "--league", "-l", help="Restrict to league(s)."),
    search: Optional[str] = typer.Option(None, "--search", "-q"),
    watched: bool = typer.Option(False, "--watched", help="Only watched players."),
) -> None:
    """Print the scored board."""
    if order is not None and order not in ("asc", "desc"):
        _fail(ValueError("--order must be asc or desc."))
    try:
        payload = board_service.query_players(
            min_tier=min_tier,
            max_tier=max_tier,
            leagues=league or None,
            search=search,
            watched_only=watched,
            sort_by=sort_by,
            sort_order=order,
            limit=limit,
        )
    except (board_service.NoProspectDataError, ValueError) as exc:
        _fail(exc)
        return
    frame = pd.DataFrame(payload["items"], columns=BOARD_COLUMNS)
    typer.echo(f"{payload['count']} of {payload['total']} prospects | sort={payload['sort_by']} {payload['sort_order']}")
    if not frame.empty:
        typer.echo(frame.to_string(index=False))


@app.command()
def player(name: str = typer.Argument(..., help="Player name as it appears on the board.")) -> None:
    """Show one prospect's scores and scouting report."""
    try:
        item = board_service.get_player(name)
    except (board_service.NoProspectDataError, board_service.PlayerNotFoundError) as exc:
        _fail(exc)
        return
    typer.echo(f"{item['Name']} | {item['Position']} | {item['League']} ({item['Country']}) | Tier {item['Tier']}")
    live = " (live)" if item["hasLiveStats"] else ""
    typer.echo(f"GP {item['GP']}  G {item['G']}  A {item['A']}  P {item['P']}  PPG {item['PPG']}{live}")
    typer.echo(
        f"NHLe {item['NHLe']}  Stats {item['StatsScore']}  Rank {item['RankScore']}  "
        f"Composite {item['CompositeScore']}  AvgRank {item['AvgRank']}"
    )
    typer.echo("Skills: " + ", ".join(f"{k} {v}" for k, v in item["scouting"]["skills"].items()))
    if item["tags"]:
        typer.echo("Tags: " + ", ".join(item["tags"]))
    if item["isWatched"]:
        typer.echo("On watchlist")
    for note in item["scouting"]["notes"]:
        typer.echo(f"- [{note['date']}] {note['text']} ({note['id']})")


@app.command()
def watch(name: str) -> None:
    """Toggle a player on or off the watchlist."""
    try:
        item = board_service.toggle_watch(name)
    except (board_service.NoProspectDataError, board_service.PlayerNotFoundError) as exc:
        _fail(exc)
        return
    typer.echo(f"{name}: {'watching' if item['isWatched'] else 'not watching'}")


@app.command()
def tag(
    name: str,
    label: str = typer.Argument(..., help="Tag to add or remove."),
    remove: bool = typer.Option(False, "--remove", help="Remove the tag instead of adding it."),
) -> None:
    """Add or remove a tag."""
    try:
        if remove:
            item = board_service.remove_tag(name, label)
        else:
            item = board_service.add_tag(name, label)
    except (board_service.NoProspectDataError, board_service.PlayerNotFoundError, ValueError) as exc:
        _fail(exc)
        return
    typer.echo(f"{name}: tags = {', '.join(item['tags']) or '(none)'}")


@app.command()
def note(name: str, text: str) -> None:
    """Attach a scouting note."""
    try:
        board_service.add_note(name, text)
    except (board_service.NoProspectDataError, board_service.PlayerNotFoundError, ValueError) as exc:
        _fail(exc)
        return
    typer.echo(f"{name}: note added")


@app.command()
def stats(
    name: str,
    gp: int = typer.Option(..., "--gp", min=0),
    goals: int = typer.Option(..., "--goals", "-g", min=0),
    assists: int = typer.Option(..., "--assists", "-a", min=0),
    points: Optional[int] = typer.Option(None, "--points", "-p", min=0, help="Defaults to goals + assists."),
) -> None:
    """Override a player's season counting stats with live numbers."""
    override = LiveStatsOverride(gp=gp, g=goals, a=assists, p=goals + assists if points is None else points)
    try:
        item = board_service.save_live_stats(name, override)
    except (board_service.NoProspectDataError, board_service.PlayerNotFoundError, ValueError) as exc:
        _fail(exc)
        return
    typer.echo(f"{name}: PPG {item['PPG']} | NHLe {item['NHLe']} | Composite {item['CompositeScore']}")


@app.command()
def intel(
    name: str,
    apply: bool = typer.Option(False, "--apply", help="Save suggested skills and found stats."),
) -> None:
    """Fetch AI intel for a player."""
    try:
        result = intel_service.fetch_player_intel(name)
        item = intel_service.apply_intel(name, result) if apply else None
    except (board_service.NoProspectDataError, board_service.PlayerNotFoundError, IntelLookupError) as exc:
        _fail(exc)
        return
    typer.echo(result.text)
    for source in result.sources:
        typer.echo(f"  source: {source.title} <{source.uri}>")
    if result.found_stats is not None:
        s = result.found_stats
        typer.echo(f"Found stats: GP {s.gp}  G {s.g}  A {s.a}  P {s.p}")
    if result.suggested_skills:
        typer.echo("Suggested skills: " + ", ".join(f"{k} {v}" for k, v in result.suggested_skills.items()))
    if item is not None:
        typer.echo(f"Applied intel to {name}: Composite {item['CompositeScore']}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
