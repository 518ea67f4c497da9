from ladder.models.court_rotation import CourtRotation
from ladder.models.game_day import GameDay
from ladder.models.league import League

__all__ = [
    "League",
    "GameDay",
    "CourtRotation",
]
