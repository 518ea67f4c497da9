"""
Plain-signature entry points returning JSON-ready dicts.

    generate_sessions(start_date, end_date, weekday, "HH:MM", "HH:MM")
        -> [{date, start_instant, end_instant}]
    generate_rotations(roster, games_per_match, games_per_rotation)
        -> [{game_number, rotation_number, team1, team2}]

The session calendar uses *tz* when given, else the LEAGUE_TIMEZONE setting.
"""

from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, List, Optional, Sequence, Union

from ladder.config import default_timezone
from ladder.services import calendar_generator, rotation_engine
from ladder.services.calendar_generator import PlaySession, SeasonWindow
from ladder.services.rotation_engine import (
    CourtRoster,
    GameAssignment,
    PlayerLike,
    RotationParameters,
)
from ladder.services.time_conversion import TimeZoneLike, format_utc_instant


def session_to_dict(session: PlaySession) -> Dict[str, Any]:
    return {
        "date": session.date.isoformat(),
        "start_instant": format_utc_instant(session.start_instant),
        "end_instant": format_utc_instant(session.end_instant),
    }


def assignment_to_dict(game: GameAssignment) -> Dict[str, Any]:
    return {
        "game_number": game.game_number,
        "rotation_number": game.rotation_number,
        "team1": [p.to_dict() for p in game.team1],
        "team2": [p.to_dict() for p in game.team2],
    }


def generate_sessions(
    start_date: Union[str, date],
    end_date: Union[str, date],
    weekday: int,
    session_start: Union[str, time],
    session_end: Union[str, time],
    tz: Optional[TimeZoneLike] = None,
) -> List[Dict[str, Any]]:
    season = SeasonWindow.from_raw(start_date, end_date, weekday, session_start, session_end)
    zone = default_timezone() if tz is None else tz
    return [session_to_dict(s) for s in calendar_generator.generate_sessions(season, zone)]


def generate_rotations(
    roster: Sequence[PlayerLike],
    games_per_match: int,
    games_per_rotation: int,
    court_number: int = 1,
) -> List[Dict[str, Any]]:
    games = rotation_engine.generate_rotations(
        CourtRoster(court_number=court_number, players=tuple(roster)),
        RotationParameters(games_per_match=games_per_match, games_per_rotation=games_per_rotation),
    )
    return [assignment_to_dict(g) for g in games]
