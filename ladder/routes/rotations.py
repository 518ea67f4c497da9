import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from ladder.database import get_session
from ladder.errors import SchedulingError
from ladder.models.court_rotation import CourtRotation
from ladder.routes.leagues import get_game_day_or_404, get_league_or_404
from ladder.services.rotation_engine import (
    GameAssignment,
    PlayerRef,
    RotationParameters,
    generate_court_rotations,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class PlayerPayload(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    rating: Optional[float] = None

    def to_ref(self) -> PlayerRef:
        return PlayerRef(id=self.id, first_name=self.first_name, last_name=self.last_name, rating=self.rating)


class GenerateRotationsRequest(BaseModel):
    # Court number (or "unassigned") -> ordered roster
    assignments: Dict[str, List[PlayerPayload]]
    games_per_match: Optional[int] = None
    games_per_rotation: Optional[int] = None


class RotationResponse(BaseModel):
    court_number: int
    game_number: int
    rotation_number: int
    team1: List[PlayerPayload]
    team2: List[PlayerPayload]
    sitting_out_player_id: Optional[str] = None


class GenerateRotationsResponse(BaseModel):
    game_day_id: int
    courts: Dict[int, int]  # court_number -> games generated


def _row_for(league_id: int, game_day_id: int, game: GameAssignment) -> CourtRotation:
    return CourtRotation(
        league_id=league_id,
        game_day_id=game_day_id,
        court_number=game.court_number,
        game_number=game.game_number,
        rotation_number=game.rotation_number,
        team1_player1_id=game.team1[0].id,
        team1_player2_id=game.team1[1].id,
        team2_player1_id=game.team2[0].id,
        team2_player2_id=game.team2[1].id,
        sitting_out_player_id=game.sitting_out.id if game.sitting_out else None,
        team1_json=[p.to_dict() for p in game.team1],
        team2_json=[p.to_dict() for p in game.team2],
    )


def _team_from_row(players_json, id_a: str, id_b: str) -> List[PlayerPayload]:
    if players_json:
        return [PlayerPayload(**p) for p in players_json]
    return [PlayerPayload(id=id_a), PlayerPayload(id=id_b)]


def replace_court_rotations(
    session: Session,
    league_id: int,
    game_day_id: int,
    rotations: Dict[int, List[GameAssignment]],
) -> None:
    """Swap stored rotations for the given courts in one transaction."""
    for court_number, games in rotations.items():
        existing = session.exec(
            select(CourtRotation).where(
                CourtRotation.league_id == league_id,
                CourtRotation.game_day_id == game_day_id,
                CourtRotation.court_number == court_number,
            )
        ).all()
        for row in existing:
            session.delete(row)
        for game in games:
            session.add(_row_for(league_id, game_day_id, game))

        logger.info(
            "Game day %s court %s: replaced %d games with %d",
            game_day_id,
            court_number,
            len(existing),
            len(games),
        )
    session.commit()


@router.post(
    "/leagues/{league_id}/game-days/{game_day_id}/rotations",
    response_model=GenerateRotationsResponse,
)
def generate_game_day_rotations(
    league_id: int,
    game_day_id: int,
    request: GenerateRotationsRequest,
    session: Session = Depends(get_session),
):
    """Generate court rotations for a game day, replacing any stored ones"""
    league = get_league_or_404(session, league_id)
    game_day = get_game_day_or_404(session, league_id, game_day_id)
    if game_day.is_finalized:
        raise HTTPException(status_code=409, detail="Game day is finalized; its rotations cannot be regenerated")

    params = RotationParameters(
        games_per_match=league.games_per_match if request.games_per_match is None else request.games_per_match,
        games_per_rotation=(
            league.games_per_rotation if request.games_per_rotation is None else request.games_per_rotation
        ),
    )
    assignments = {court: [p.to_ref() for p in players] for court, players in request.assignments.items()}

    try:
        rotations = generate_court_rotations(assignments, params)
    except SchedulingError as e:
        raise HTTPException(status_code=422, detail=str(e))

    replace_court_rotations(session, league_id, game_day_id, rotations)

    return GenerateRotationsResponse(
        game_day_id=game_day_id,
        courts={court: len(games) for court, games in rotations.items()},
    )


@router.get(
    "/leagues/{league_id}/game-days/{game_day_id}/courts/{court_number}/rotations",
    response_model=List[RotationResponse],
)
def get_court_rotations(
    league_id: int,
    game_day_id: int,
    court_number: int,
    session: Session = Depends(get_session),
):
    """Get stored rotations for one court, in game order"""
    get_league_or_404(session, league_id)
    get_game_day_or_404(session, league_id, game_day_id)

    rows = session.exec(
        select(CourtRotation)
        .where(
            CourtRotation.game_day_id == game_day_id,
            CourtRotation.court_number == court_number,
        )
        .order_by(CourtRotation.game_number)
    ).all()

    return [
        RotationResponse(
            court_number=row.court_number,
            game_number=row.game_number,
            rotation_number=row.rotation_number,
            team1=_team_from_row(row.team1_json, row.team1_player1_id, row.team1_player2_id),
            team2=_team_from_row(row.team2_json, row.team2_player1_id, row.team2_player2_id),
            sitting_out_player_id=row.sitting_out_player_id,
        )
        for row in rows
    ]
