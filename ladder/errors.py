"""
Scheduling engine errors.

All of them are raised before any output is produced, so a caller never
sees a partial calendar or a partial rotation list.
"""


class SchedulingError(ValueError):
    """Base class for every validation failure raised by the engine."""


class InvalidWindow(SchedulingError):
    """Season window is unusable (bad weekday, bad times, start >= end)."""


class InsufficientPlayers(SchedulingError):
    """Court roster is too small for any rotation regime."""


class InvalidParameters(SchedulingError):
    """Rotation counts are non-positive or inconsistent, or the roster repeats a player."""
