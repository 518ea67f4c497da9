"""
Weekly game-day calendar for a season.

Given a season window (date range, play day, local start/end time) produce
one PlaySession per matching weekday, each with UTC start/end instants
computed for that specific date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Union

from ladder.errors import InvalidWindow
from ladder.services.time_conversion import (
    TimeZoneLike,
    local_to_utc,
    parse_time_of_day,
    weekday_index,
)

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class SeasonWindow:
    start_date: date
    end_date: date
    weekday: int  # 0 = Sunday ... 6 = Saturday
    session_start: time
    session_end: time

    @classmethod
    def from_raw(
        cls,
        start_date: Union[str, date],
        end_date: Union[str, date],
        weekday: int,
        session_start: Union[str, time],
        session_end: Union[str, time],
    ) -> "SeasonWindow":
        """Build a window from ISO date strings and "HH:MM" times."""
        try:
            start = date.fromisoformat(start_date) if isinstance(start_date, str) else start_date
            end = date.fromisoformat(end_date) if isinstance(end_date, str) else end_date
            begins = parse_time_of_day(session_start)
            ends = parse_time_of_day(session_end)
        except ValueError as exc:
            raise InvalidWindow(str(exc)) from exc
        return cls(
            start_date=start,
            end_date=end,
            weekday=weekday,
            session_start=begins,
            session_end=ends,
        )


@dataclass(frozen=True)
class PlaySession:
    """One scheduled game day."""
    date: date
    start_instant: datetime
    end_instant: datetime


def validate_window(season: SeasonWindow) -> None:
    if isinstance(season.weekday, bool) or not isinstance(season.weekday, int):
        raise InvalidWindow(f"weekday must be an integer 0-6, got {season.weekday!r}")
    if not 0 <= season.weekday <= 6:
        raise InvalidWindow(f"weekday must be between 0 (Sunday) and 6 (Saturday), got {season.weekday}")

    try:
        start = parse_time_of_day(season.session_start)
        end = parse_time_of_day(season.session_end)
    except ValueError as exc:
        raise InvalidWindow(str(exc)) from exc
    if start >= end:
        raise InvalidWindow(
            f"session_start ({start:%H:%M}) must be earlier than session_end ({end:%H:%M})"
        )


def first_play_date(start_date: date, weekday: int) -> date:
    """First date on or after *start_date* that falls on *weekday*."""
    offset = (weekday - weekday_index(start_date) + DAYS_PER_WEEK) % DAYS_PER_WEEK
    return start_date + timedelta(days=offset)


def play_dates(season: SeasonWindow) -> List[date]:
    dates: List[date] = []
    if season.start_date > season.end_date:
        return dates

    current = first_play_date(season.start_date, season.weekday)
    while current <= season.end_date:
        dates.append(current)
        current += timedelta(days=DAYS_PER_WEEK)
    return dates


def generate_sessions(season: SeasonWindow, tz: TimeZoneLike) -> List[PlaySession]:
    """Generate the ordered game-day sessions for *season* in zone *tz*.

    An inverted date range, or one that holds no matching weekday, gives an
    empty list. Invalid weekday or times raise InvalidWindow up front, as
    does any date on which the window's instants come out inverted (a start
    time inside a spring-forward gap).
    """
    validate_window(season)

    sessions = [
        PlaySession(
            date=day,
            start_instant=local_to_utc(day, season.session_start, tz),
            end_instant=local_to_utc(day, season.session_end, tz),
        )
        for day in play_dates(season)
    ]
    for session in sessions:
        if session.start_instant >= session.end_instant:
            raise InvalidWindow(
                f"session on {session.date} starts at {session.start_instant:%H:%M}Z, "
                f"not before its end at {session.end_instant:%H:%M}Z (local clock change)"
            )

    logger.debug(
        "Generated %d sessions for %s..%s (weekday=%d)",
        len(sessions),
        season.start_date,
        season.end_date,
        season.weekday,
    )
    return sessions
