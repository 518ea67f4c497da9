"""Ladder league scheduling: game-day calendars and court rotations."""

__version__ = "0.1.0"
