"""Stateless previews of the scheduling engine; nothing is stored."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ladder import engine
from ladder.errors import SchedulingError
from ladder.routes.rotations import PlayerPayload

router = APIRouter()


class SessionsPreviewRequest(BaseModel):
    start_date: date
    end_date: date
    weekday: int
    session_start: str
    session_end: str
    timezone: Optional[str] = None


class SessionPreview(BaseModel):
    date: date
    start_instant: str
    end_instant: str


class RotationsPreviewRequest(BaseModel):
    roster: List[PlayerPayload]
    games_per_match: int
    games_per_rotation: int
    court_number: int = 1


class RotationPreview(BaseModel):
    game_number: int
    rotation_number: int
    team1: List[PlayerPayload]
    team2: List[PlayerPayload]


@router.post("/engine/sessions", response_model=List[SessionPreview])
def preview_sessions(request: SessionsPreviewRequest):
    """Preview the game-day calendar for a season window"""
    try:
        return engine.generate_sessions(
            request.start_date,
            request.end_date,
            request.weekday,
            request.session_start,
            request.session_end,
            tz=request.timezone,
        )
    except SchedulingError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (KeyError, ValueError) as e:
        # unknown timezone name
        raise HTTPException(status_code=422, detail=f"Invalid timezone: {e}")


@router.post("/engine/rotations", response_model=List[RotationPreview])
def preview_rotations(request: RotationsPreviewRequest):
    """Preview one court's rotation without storing it"""
    try:
        return engine.generate_rotations(
            [p.to_ref() for p in request.roster],
            request.games_per_match,
            request.games_per_rotation,
            court_number=request.court_number,
        )
    except SchedulingError as e:
        raise HTTPException(status_code=422, detail=str(e))
