from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from ladder.models.game_day import GameDay
    from ladder.models.league import League


class CourtRotation(SQLModel, table=True):
    """One game on one court of a game day."""

    __tablename__ = "court_rotation"

    id: Optional[int] = Field(default=None, primary_key=True)
    league_id: int = Field(foreign_key="league.id", index=True)
    game_day_id: int = Field(foreign_key="game_day.id", index=True)
    court_number: int = Field(index=True)
    game_number: int
    rotation_number: int

    team1_player1_id: str
    team1_player2_id: str
    team2_player1_id: str
    team2_player2_id: str
    sitting_out_player_id: Optional[str] = Field(default=None)
    # Player display fields as submitted with the roster
    team1_json: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON))
    team2_json: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON))

    # Relationships
    league: "League" = Relationship(back_populates="rotations")
    game_day: "GameDay" = Relationship(back_populates="rotations")
