import logging
from datetime import date, datetime, time
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator, model_validator
from sqlmodel import Session, select

from ladder.database import get_session
from ladder.errors import SchedulingError
from ladder.models.court_rotation import CourtRotation
from ladder.models.game_day import GameDay
from ladder.models.league import League, utc_now
from ladder.services.calendar_generator import SeasonWindow, generate_sessions
from ladder.services.time_conversion import (
    format_time_of_day,
    format_utc_instant,
    utc_to_local_date,
    utc_to_local_time,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_timezone(v):
    if not v or not v.strip():
        raise ValueError("timezone is required")
    try:
        ZoneInfo(v.strip())
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"unknown timezone '{v}'") from None
    return v.strip()


class LeagueCreate(BaseModel):
    name: str
    location: Optional[str] = None
    timezone: str
    start_date: date
    end_date: date
    play_day: int
    start_time: time
    end_time: time
    games_per_match: int = 6
    games_per_rotation: int = 2
    players_per_court: int = 4
    courts: int = 1

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        return _check_timezone(v)

    @field_validator("play_day")
    @classmethod
    def validate_play_day(cls, v):
        if not 0 <= v <= 6:
            raise ValueError("play_day must be between 0 (Sunday) and 6 (Saturday)")
        return v

    @model_validator(mode="after")
    def validate_league(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be >= start_date")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be greater than start_time")
        if self.games_per_match < 1 or self.games_per_rotation < 1:
            raise ValueError("games_per_match and games_per_rotation must be >= 1")
        if self.games_per_rotation > self.games_per_match:
            raise ValueError("games_per_rotation cannot exceed games_per_match")
        return self


class LeagueUpdate(BaseModel):
    name: Optional[str] = None
    location: Optional[str] = None
    timezone: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    play_day: Optional[int] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    games_per_match: Optional[int] = None
    games_per_rotation: Optional[int] = None
    players_per_court: Optional[int] = None
    courts: Optional[int] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        if v is None:
            return v
        return _check_timezone(v)


class LeagueResponse(BaseModel):
    id: int
    name: str
    location: Optional[str]
    timezone: str
    start_date: date
    end_date: date
    play_day: int
    start_time: time
    end_time: time
    games_per_match: int
    games_per_rotation: int
    players_per_court: int
    courts: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GameDayResponse(BaseModel):
    id: int
    league_id: int
    date: date
    start_time: str
    end_time: str
    status: str
    is_finalized: bool
    start_datetime_utc: str
    end_datetime_utc: str
    local_date: date
    local_start_time: str
    local_end_time: str


SCHEDULE_FIELDS = ("timezone", "start_date", "end_date", "play_day", "start_time", "end_time")


def season_window_for(league: League) -> SeasonWindow:
    return SeasonWindow(
        start_date=league.start_date,
        end_date=league.end_date,
        weekday=league.play_day,
        session_start=league.start_time,
        session_end=league.end_time,
    )


def regenerate_game_days(session: Session, league: League) -> List[GameDay]:
    """Replace the league's game days inside its season range.

    The generator runs first so an invalid window leaves storage untouched;
    the delete and the inserts are committed together.
    """
    sessions = generate_sessions(season_window_for(league), league.timezone)

    existing = session.exec(
        select(GameDay).where(
            GameDay.league_id == league.id,
            GameDay.date >= league.start_date,
            GameDay.date <= league.end_date,
        )
    ).all()
    for game_day in existing:
        # Child records first
        for rotation in session.exec(select(CourtRotation).where(CourtRotation.game_day_id == game_day.id)).all():
            session.delete(rotation)
        session.delete(game_day)
    session.flush()

    created: List[GameDay] = []
    for play in sessions:
        game_day = GameDay(
            league_id=league.id,
            date=play.date,
            start_time=league.start_time,
            end_time=league.end_time,
            status="pending",
            is_finalized=False,
            start_datetime_utc=format_utc_instant(play.start_instant),
            end_datetime_utc=format_utc_instant(play.end_instant),
        )
        session.add(game_day)
        created.append(game_day)
    session.commit()

    logger.info(
        "League %s: replaced %d game days with %d", league.id, len(existing), len(created)
    )
    return created


def game_day_response(game_day: GameDay, tz: str) -> GameDayResponse:
    return GameDayResponse(
        id=game_day.id,
        league_id=game_day.league_id,
        date=game_day.date,
        start_time=format_time_of_day(game_day.start_time),
        end_time=format_time_of_day(game_day.end_time),
        status=game_day.status,
        is_finalized=game_day.is_finalized,
        start_datetime_utc=game_day.start_datetime_utc,
        end_datetime_utc=game_day.end_datetime_utc,
        local_date=utc_to_local_date(game_day.start_datetime_utc, tz),
        local_start_time=format_time_of_day(utc_to_local_time(game_day.start_datetime_utc, tz)),
        local_end_time=format_time_of_day(utc_to_local_time(game_day.end_datetime_utc, tz)),
    )


def get_league_or_404(session: Session, league_id: int) -> League:
    league = session.get(League, league_id)
    if not league:
        raise HTTPException(status_code=404, detail="League not found")
    return league


@router.get("/leagues", response_model=List[LeagueResponse])
def list_leagues(session: Session = Depends(get_session)):
    """List all leagues"""
    return session.exec(select(League)).all()


@router.post("/leagues", response_model=LeagueResponse, status_code=201)
def create_league(league_data: LeagueCreate, session: Session = Depends(get_session)):
    """Create a league and generate its game days"""
    league = League(**league_data.model_dump())
    session.add(league)
    session.flush()

    try:
        regenerate_game_days(session, league)
    except SchedulingError as e:
        session.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    session.refresh(league)
    return league


@router.get("/leagues/{league_id}", response_model=LeagueResponse)
def get_league(league_id: int, session: Session = Depends(get_session)):
    """Get a league by ID"""
    return get_league_or_404(session, league_id)


@router.put("/leagues/{league_id}", response_model=LeagueResponse)
def update_league(league_id: int, league_data: LeagueUpdate, session: Session = Depends(get_session)):
    """Update a league; a changed season window regenerates its game days"""
    league = get_league_or_404(session, league_id)

    update_data = league_data.model_dump(exclude_unset=True)
    schedule_changed = any(
        field in update_data and update_data[field] != getattr(league, field) for field in SCHEDULE_FIELDS
    )
    for field, value in update_data.items():
        setattr(league, field, value)

    if league.end_date < league.start_date:
        session.rollback()
        raise HTTPException(status_code=422, detail="end_date must be >= start_date")
    if league.games_per_match < 1 or league.games_per_rotation < 1:
        session.rollback()
        raise HTTPException(status_code=422, detail="games_per_match and games_per_rotation must be >= 1")
    if league.games_per_rotation > league.games_per_match:
        session.rollback()
        raise HTTPException(status_code=422, detail="games_per_rotation cannot exceed games_per_match")

    league.updated_at = utc_now()
    session.add(league)

    if schedule_changed:
        try:
            regenerate_game_days(session, league)
        except SchedulingError as e:
            session.rollback()
            raise HTTPException(status_code=422, detail=str(e))
    else:
        session.commit()

    session.refresh(league)
    return league


@router.get("/leagues/{league_id}/game-days", response_model=List[GameDayResponse])
def get_game_days(league_id: int, session: Session = Depends(get_session)):
    """Get all game days for a league"""
    league = get_league_or_404(session, league_id)

    game_days = session.exec(
        select(GameDay).where(GameDay.league_id == league_id).order_by(GameDay.date)
    ).all()

    return [game_day_response(gd, league.timezone) for gd in game_days]


def get_game_day_or_404(session: Session, league_id: int, game_day_id: int) -> GameDay:
    game_day = session.get(GameDay, game_day_id)
    if not game_day or game_day.league_id != league_id:
        raise HTTPException(status_code=404, detail="Game day not found")
    return game_day


@router.post("/leagues/{league_id}/game-days/{game_day_id}/finalize", response_model=GameDayResponse)
def finalize_game_day(league_id: int, game_day_id: int, session: Session = Depends(get_session)):
    """Mark a game day completed; its rotations are then locked"""
    league = get_league_or_404(session, league_id)
    game_day = get_game_day_or_404(session, league_id, game_day_id)

    if not game_day.is_finalized:
        game_day.is_finalized = True
        game_day.status = "completed"
        game_day.updated_at = utc_now()
        session.add(game_day)
        session.commit()
        session.refresh(game_day)
        logger.info("League %s: finalized game day %s (%s)", league_id, game_day_id, game_day.date)

    return game_day_response(game_day, league.timezone)
