"""FastAPI routes for AI-sourced prospect intel."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from prospect_radar.intel import IntelLookupError
from prospect_radar.services.board_service import NoProspectDataError, PlayerNotFoundError
from prospect_radar.services.intel_service import apply_intel, fetch_player_intel

router = APIRouter(prefix="/intel", tags=["intel"])


class IntelResponse(BaseModel):
    name: str
    text: str
    sources: List[Dict[str, str]]
    suggestedSkills: Optional[Dict[str, int]] = None
    foundStats: Optional[Dict[str, int]] = None
    applied: bool = False
    item: Optional[Dict[str, Any]] = None


@router.post("/{name}", response_model=IntelResponse, summary="Look up AI intel for a prospect")
def intel_lookup(
    name: str,
    apply: bool = Query(False, description="Save suggested skills and found stats to the player."),
    refresh: bool = Query(False, description="Bypass the in-process intel cache."),
) -> IntelResponse:
    """Return the text summary plus any structured grades/stats the model produced."""
    try:
        result = fetch_player_intel(name, refresh=refresh)
        item = apply_intel(name, result) if apply else None
    except (NoProspectDataError, PlayerNotFoundError) as exc:
        raise HTTPException(status_code=404, detail=exc.args[0] if exc.args else "Unknown player")
    except IntelLookupError as exc:
        raise HTTPException(
            status_code=503,
            detail=f"{exc} Retry the request.",
            headers={"Retry-After": "30"},
        )
    return IntelResponse(name=name, applied=item is not None, item=item, **result.to_dict())


__all__ = ["router"]
