"""
Court rotation pairing for doubles ladder play.

Two regimes, picked by roster size:

  4 players   fixed 3-pairing cycle covering each partnership once:
                (p1,p4) v (p2,p3)   (p1,p2) v (p3,p4)   (p1,p3) v (p2,p4)
  5+ players  one player sits out per rotation, cycling through roster
              order; the remaining players in roster order are paired
              positionally: (a0,a3) v (a1,a2)

Each rotation is played for games_per_rotation consecutive games until
games_per_match games exist; the final rotation may be cut short.

The 5+ positional rule does NOT guarantee every pair partners exactly once
over a full sit-out cycle. partnership_counts() exposes the distribution
for reporting; the pairing itself is intentionally left as is.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ladder.errors import InsufficientPlayers, InvalidParameters

logger = logging.getLogger(__name__)

MIN_PLAYERS = 4
SIT_OUT_MIN_PLAYERS = 5
UNASSIGNED_COURT = "unassigned"


@dataclass(frozen=True)
class PlayerRef:
    """Opaque player reference; display fields are echoed, never interpreted."""
    id: str
    first_name: str = ""
    last_name: str = ""
    rating: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PlayerRef":
        rating = data.get("rating", data.get("dup_rating"))
        return cls(
            id=str(data["id"]),
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            rating=float(rating) if rating is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "rating": self.rating,
        }


Team = Tuple[PlayerRef, PlayerRef]
PlayerLike = Union[PlayerRef, Mapping[str, Any]]


def as_player(value: PlayerLike) -> PlayerRef:
    if isinstance(value, PlayerRef):
        return value
    return PlayerRef.from_mapping(value)


@dataclass(frozen=True)
class CourtRoster:
    court_number: int
    players: Tuple[PlayerRef, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any sequence, store an immutable tuple
        object.__setattr__(self, "players", tuple(as_player(p) for p in self.players))


@dataclass(frozen=True)
class RotationParameters:
    games_per_match: int
    games_per_rotation: int


@dataclass(frozen=True)
class GameAssignment:
    game_number: int
    rotation_number: int
    team1: Team
    team2: Team
    court_number: int = 1
    sitting_out: Optional[PlayerRef] = None


class RotationRegime(str, Enum):
    FOUR_PLAYER_CYCLE = "four_player_cycle"
    SIT_OUT = "sit_out"


@dataclass(frozen=True)
class FourPlayerCycle:
    players: Tuple[PlayerRef, PlayerRef, PlayerRef, PlayerRef]
    regime: RotationRegime = RotationRegime.FOUR_PLAYER_CYCLE

    def pairings(self) -> List[Tuple[Team, Team]]:
        p1, p2, p3, p4 = self.players
        return [
            ((p1, p4), (p2, p3)),
            ((p1, p2), (p3, p4)),
            ((p1, p3), (p2, p4)),
        ]

    def pairing_for(self, rotation_number: int) -> Tuple[Team, Team, Optional[PlayerRef]]:
        cycle = self.pairings()
        team1, team2 = cycle[(rotation_number - 1) % len(cycle)]
        return team1, team2, None


@dataclass(frozen=True)
class SitOutRotation:
    players: Tuple[PlayerRef, ...]
    regime: RotationRegime = RotationRegime.SIT_OUT

    def sit_out_index(self, rotation_number: int) -> int:
        return (rotation_number - 1) % len(self.players)

    def pairing_for(self, rotation_number: int) -> Tuple[Team, Team, Optional[PlayerRef]]:
        idx = self.sit_out_index(rotation_number)
        active = self.players[:idx] + self.players[idx + 1:]
        team1 = (active[0], active[3])
        team2 = (active[1], active[2])
        return team1, team2, self.players[idx]


RotationStrategy = Union[FourPlayerCycle, SitOutRotation]


def select_strategy(players: Sequence[PlayerLike]) -> RotationStrategy:
    """Pick the regime for a roster; rejects rosters under four players."""
    roster = tuple(as_player(p) for p in players)
    if len(roster) < MIN_PLAYERS:
        raise InsufficientPlayers(
            f"A court needs at least {MIN_PLAYERS} players, got {len(roster)}"
        )
    if len(roster) == MIN_PLAYERS:
        return FourPlayerCycle(players=roster)
    return SitOutRotation(players=roster)


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_parameters(params: RotationParameters) -> None:
    gpm = params.games_per_match
    gpr = params.games_per_rotation
    if not _is_count(gpm) or not _is_count(gpr):
        raise InvalidParameters(
            f"games_per_match and games_per_rotation must be integers, got {gpm!r} and {gpr!r}"
        )
    if gpm <= 0:
        raise InvalidParameters(f"games_per_match must be positive, got {gpm}")
    if gpr <= 0:
        raise InvalidParameters(f"games_per_rotation must be positive, got {gpr}")
    if gpr > gpm:
        raise InvalidParameters(
            f"games_per_rotation ({gpr}) cannot exceed games_per_match ({gpm})"
        )


def validate_roster(roster: CourtRoster) -> RotationStrategy:
    strategy = select_strategy(roster.players)
    seen = set()
    for player in roster.players:
        if player.id in seen:
            raise InvalidParameters(
                f"Player {player.id} appears more than once on court {roster.court_number}"
            )
        seen.add(player.id)
    return strategy


def generate_rotations(roster: CourtRoster, params: RotationParameters) -> List[GameAssignment]:
    """Game-by-game pairings for one court.

    Deterministic: identical roster order and parameters always give the
    same list. All validation happens before anything is produced.
    """
    strategy = validate_roster(roster)
    validate_parameters(params)

    games: List[GameAssignment] = []
    game_number = 1
    rotation_number = 1
    while game_number <= params.games_per_match:
        team1, team2, sitting_out = strategy.pairing_for(rotation_number)
        for _ in range(params.games_per_rotation):
            if game_number > params.games_per_match:
                break
            games.append(
                GameAssignment(
                    game_number=game_number,
                    rotation_number=rotation_number,
                    team1=team1,
                    team2=team2,
                    court_number=roster.court_number,
                    sitting_out=sitting_out,
                )
            )
            game_number += 1
        rotation_number += 1

    logger.debug(
        "Court %s: %d games over %d rotations (%s, %d players)",
        roster.court_number,
        len(games),
        rotation_number - 1,
        strategy.regime.value,
        len(roster.players),
    )
    return games


def generate_court_rotations(
    assignments: Mapping[Union[int, str], Sequence[PlayerLike]],
    params: RotationParameters,
) -> Dict[int, List[GameAssignment]]:
    """Run the engine for every court in a {court_number: players} map.

    The "unassigned" bucket is skipped. Every court is validated before
    any result is returned, so one bad court fails the whole batch.
    """
    rosters: List[CourtRoster] = []
    for court_key, players in assignments.items():
        if str(court_key) == UNASSIGNED_COURT:
            continue
        try:
            court_number = int(court_key)
        except (TypeError, ValueError):
            raise InvalidParameters(f"Court key must be a number, got {court_key!r}") from None
        if any(r.court_number == court_number for r in rosters):
            raise InvalidParameters(f"Court {court_number} is listed more than once")
        rosters.append(CourtRoster(court_number=court_number, players=tuple(players)))

    for roster in rosters:
        validate_roster(roster)
    validate_parameters(params)

    return {
        roster.court_number: generate_rotations(roster, params)
        for roster in sorted(rosters, key=lambda r: r.court_number)
    }


def partnership_counts(assignments: Iterable[GameAssignment]) -> Counter:
    """Count rotations shared by each unordered partner pair (by player id).

    Each rotation is counted once, however many games it spans.
    """
    counts: Counter = Counter()
    seen_rotations = set()
    for game in assignments:
        key = (game.court_number, game.rotation_number)
        if key in seen_rotations:
            continue
        seen_rotations.add(key)
        for a, b in (game.team1, game.team2):
            counts[tuple(sorted((a.id, b.id)))] += 1
    return counts
