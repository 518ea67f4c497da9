from datetime import date, datetime, time
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from ladder.models.court_rotation import CourtRotation
    from ladder.models.league import League


class GameDay(SQLModel, table=True):
    __tablename__ = "game_day"
    __table_args__ = (SAUniqueConstraint("league_id", "date", name="uq_league_game_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    league_id: int = Field(foreign_key="league.id", index=True)
    date: date
    start_time: time
    end_time: time
    status: str = Field(default="pending")
    is_finalized: bool = Field(default=False)
    # ISO-8601 UTC ("...Z"), as produced by the calendar generator
    start_datetime_utc: str
    end_datetime_utc: str
    updated_at: Optional[datetime] = Field(default=None)

    # Relationships
    league: "League" = Relationship(back_populates="game_days")
    rotations: List["CourtRotation"] = Relationship(back_populates="game_day")
