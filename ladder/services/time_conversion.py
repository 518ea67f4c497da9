"""
Wall-clock <-> UTC conversion for league game days.

Offsets are looked up per calendar date through zoneinfo, so a 19:00 start
stays 19:00 on the local clock on both sides of a daylight-saving change.
Times of day are kept at minute resolution.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

TimeZoneLike = Union[str, tzinfo]
InstantLike = Union[datetime, str]


def resolve_timezone(tz: TimeZoneLike) -> tzinfo:
    """Return a tzinfo for an IANA zone name or pass a tzinfo through."""
    if isinstance(tz, str):
        return ZoneInfo(tz.strip())
    return tz


def parse_time_of_day(value: Union[str, time]) -> time:
    """Normalize "HH:MM" / "HH:MM:SS" strings or time objects to whole minutes.

    Seconds and microseconds are dropped, tzinfo is discarded.
    """
    if isinstance(value, time):
        return time(value.hour, value.minute)
    if not isinstance(value, str):
        raise ValueError(f"time of day must be 'HH:MM' or a time, got {value!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"time of day must be 'HH:MM', got {value!r}")
    try:
        hour = int(parts[0])
        minute = int(parts[1])
        if len(parts) == 3:
            float(parts[2])
    except ValueError:
        raise ValueError(f"time of day must be 'HH:MM', got {value!r}") from None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"time of day out of range: {value!r}")
    return time(hour, minute)


def parse_instant(instant: InstantLike) -> datetime:
    """Coerce *instant* to an aware UTC datetime.

    Naive datetimes are taken to already be UTC. ISO strings may end in 'Z'.
    """
    if isinstance(instant, str):
        raw = instant.strip()
        if raw.endswith("Z") or raw.endswith("z"):
            raw = raw[:-1] + "+00:00"
        instant = datetime.fromisoformat(raw)
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def local_to_utc(day: date, time_of_day: Union[str, time], tz: TimeZoneLike) -> datetime:
    """Convert a local (date, time of day) to the UTC instant it denotes.

    Ambiguous times (clock set back) resolve to the first occurrence.
    Non-existent times (clock set forward) land after the gap.
    """
    zone = resolve_timezone(tz)
    local = datetime.combine(day, parse_time_of_day(time_of_day)).replace(tzinfo=zone)
    return local.astimezone(timezone.utc)


def _to_local(instant: InstantLike, tz: TimeZoneLike) -> datetime:
    return parse_instant(instant).astimezone(resolve_timezone(tz))


def utc_to_local_date(instant: InstantLike, tz: TimeZoneLike) -> date:
    return _to_local(instant, tz).date()


def utc_to_local_time(instant: InstantLike, tz: TimeZoneLike) -> time:
    local = _to_local(instant, tz)
    return time(local.hour, local.minute)


def format_utc_instant(instant: InstantLike) -> str:
    """ISO-8601 UTC rendering with a 'Z' suffix, second resolution."""
    return parse_instant(instant).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_time_of_day(value: Optional[time]) -> Optional[str]:
    if value is None:
        return None
    return f"{value.hour:02d}:{value.minute:02d}"


def weekday_index(day: date) -> int:
    """Play-day index of *day*: 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7
