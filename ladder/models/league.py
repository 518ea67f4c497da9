from datetime import date, datetime, time, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from ladder.models.court_rotation import CourtRotation
    from ladder.models.game_day import GameDay


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class League(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    location: Optional[str] = None
    timezone: str
    start_date: date
    end_date: date
    play_day: int  # 0 = Sunday ... 6 = Saturday
    start_time: time
    end_time: time
    games_per_match: int = Field(default=6)
    games_per_rotation: int = Field(default=2)
    players_per_court: int = Field(default=4)
    courts: int = Field(default=1)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    # Relationships
    game_days: List["GameDay"] = Relationship(back_populates="league")
    rotations: List["CourtRotation"] = Relationship(back_populates="league")
