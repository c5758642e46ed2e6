"""FastAPI routes for the prospect board and player annotations."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from prospect_radar.core.records import LiveStatsOverride
from prospect_radar.services.board_service import (
    NoProspectDataError,
    PlayerNotFoundError,
    add_note,
    add_tag,
    compare_players,
    delete_note,
    get_player,
    list_filter_options,
    query_players,
    refresh_board,
    remove_tag,
    save_live_stats,
    save_skills,
    toggle_watch,
)

router = APIRouter(prefix="/prospects", tags=["prospects"])


class ProspectListResponse(BaseModel):
    total: int
    count: int
    limit: int
    offset: int
    sort_by: str
    sort_order: str
    items: List[Dict[str, Any]]


class ProspectResponse(BaseModel):
    item: Dict[str, Any]


class CompareResponse(BaseModel):
    players: List[Dict[str, Any]]
    stats_radar: List[Dict[str, Any]]
    skills_radar: List[Dict[str, Any]]


class FilterOptionsResponse(BaseModel):
    leagues: List[str]
    positions: List[str]
    league_factors: Dict[str, float]
    season_length_nhl: int


class TagRequest(BaseModel):
    tag: str


class NoteRequest(BaseModel):
    text: str


class SkillsRequest(BaseModel):
    skills: Dict[str, int]


class LiveStatsRequest(BaseModel):
    GP: int = Field(..., ge=0)
    G: int = Field(..., ge=0)
    A: int = Field(..., ge=0)
    P: int = Field(..., ge=0)


def _run(action, *args, **kwargs):
    try:
        return action(*args, **kwargs)
    except NoProspectDataError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except PlayerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0] if exc.args else "Unknown player")
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.get("", response_model=ProspectListResponse, summary="Query the prospect board")
def prospects_list(
    min_tier: Optional[int] = Query(None, ge=0, le=5),
    max_tier: Optional[int] = Query(None, ge=0, le=5),
    league: Optional[List[str]] = Query(None),
    position: Optional[List[str]] = Query(None),
    search: Optional[str] = Query(None),
    min_composite: Optional[float] = Query(None, ge=0, le=100),
    watched_only: bool = Query(False),
    tag: Optional[str] = Query(None),
    sort_by: Literal["CompositeScore", "AvgRank", "Tier", "NHLe", "PPG"] = Query("AvgRank"),
    sort_order: Optional[Literal["asc", "desc"]] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> ProspectListResponse:
    """Filter, sort and paginate the scored board; unranked players sink when sorting by AvgRank."""
    payload = _run(
        query_players,
        min_tier=min_tier,
        max_tier=max_tier,
        leagues=league,
        positions=position,
        search=search,
        min_composite=min_composite,
        watched_only=watched_only,
        tag=tag,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return ProspectListResponse(**payload)


@router.get("/compare", response_model=CompareResponse, summary="Radar data for up to four players")
def prospects_compare(names: List[str] = Query(...)) -> CompareResponse:
    return CompareResponse(**_run(compare_players, names))


@router.get("/filters", response_model=FilterOptionsResponse, summary="Leagues, positions and league factors")
def prospects_filters() -> FilterOptionsResponse:
    return FilterOptionsResponse(**_run(list_filter_options))


@router.post("/refresh", summary="Refetch sources and rebuild the board")
def prospects_refresh() -> dict:
    refresh_board()
    payload = _run(query_players, limit=1)
    return {"status": "ok", "total": payload["total"]}


@router.get("/{name}", response_model=ProspectResponse, summary="Get one prospect")
def prospects_get(name: str) -> ProspectResponse:
    return ProspectResponse(item=_run(get_player, name))


@router.post("/{name}/tags", response_model=ProspectResponse, summary="Add a tag")
def prospects_add_tag(name: str, payload: TagRequest) -> ProspectResponse:
    return ProspectResponse(item=_run(add_tag, name, payload.tag))


@router.delete("/{name}/tags/{tag}", response_model=ProspectResponse, summary="Remove a tag")
def prospects_remove_tag(name: str, tag: str) -> ProspectResponse:
    return ProspectResponse(item=_run(remove_tag, name, tag))


@router.post("/{name}/watch", response_model=ProspectResponse, summary="Toggle watchlist membership")
def prospects_toggle_watch(name: str) -> ProspectResponse:
    return ProspectResponse(item=_run(toggle_watch, name))


@router.put("/{name}/skills", response_model=ProspectResponse, summary="Save manual skill grades")
def prospects_save_skills(name: str, payload: SkillsRequest) -> ProspectResponse:
    return ProspectResponse(item=_run(save_skills, name, payload.skills))


@router.put("/{name}/live-stats", response_model=ProspectResponse, summary="Override season counting stats")
def prospects_save_live_stats(name: str, payload: LiveStatsRequest) -> ProspectResponse:
    stats = LiveStatsOverride(gp=payload.GP, g=payload.G, a=payload.A, p=payload.P)
    return ProspectResponse(item=_run(save_live_stats, name, stats))


@router.post("/{name}/notes", response_model=ProspectResponse, summary="Add a scouting note")
def prospects_add_note(name: str, payload: NoteRequest) -> ProspectResponse:
    return ProspectResponse(item=_run(add_note, name, payload.text))


@router.delete("/{name}/notes/{note_id}", response_model=ProspectResponse, summary="Delete a scouting note")
def prospects_delete_note(name: str, note_id: str) -> ProspectResponse:
    return ProspectResponse(item=_run(delete_note, name, note_id))


__all__ = ["router"]
