"""Match record — immutable value types for a finished, recorded match.

A Match holds an ordered list of Rounds, each an ordered list of Tricks,
plus roster and scoring metadata. Nothing here has behavior beyond simple
lookups; the replay engine reads these values and never mutates them.

Hands are deliberately absent: every card a player held in a round is
played exactly once in that round's tricks, so the trick log is enough to
rebuild them (see ``trickreplay.hands``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CardColor(Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    BROWN = "brown"


@dataclass(frozen=True)
class Card:
    """A single card. Equal (and hashable) by color and value."""

    color: CardColor
    value: int

    @property
    def key(self) -> str:
        """Stable string key, e.g. ``"red-5"``."""
        return f"{self.color.value}-{self.value}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class TrickCard:
    """One play within a trick."""

    player_name: str
    card: Card


@dataclass(frozen=True)
class Trick:
    """A completed trick. ``plays`` is in play order, lead card first."""

    plays: tuple[TrickCard, ...]
    winner_name: str
    points_awarded: int


@dataclass(frozen=True)
class TeamScore:
    team1: int = 0
    team2: int = 0


@dataclass(frozen=True)
class Round:
    """One scored hand of the game."""

    tricks: tuple[Trick, ...]
    bet_amount: int
    without_trump: bool
    offensive_team: int  # 1 or 2
    offensive_points: int
    defensive_points: int
    bet_made: bool
    round_score_delta: TeamScore
    trump: CardColor | None = None

    @property
    def last_trick_index(self) -> int:
        """Index of the final trick; 0 for a round that recorded none."""
        return max(len(self.tricks) - 1, 0)

    @property
    def participants(self) -> list[str]:
        """Player names in order of first appearance in the trick log."""
        seen: dict[str, None] = {}
        for trick in self.tricks:
            for play in trick.plays:
                seen.setdefault(play.player_name, None)
        return list(seen)


@dataclass(frozen=True)
class Match:
    """A completed match. Built once from a finished game, never mutated.

    ``player_teams`` runs parallel to ``player_names``. ``rounds`` may be
    empty when the game ended before any round completed; that is a valid
    empty timeline, not an error.
    """

    match_id: str
    rounds: tuple[Round, ...]
    player_names: tuple[str, ...]
    player_teams: tuple[int, ...]
    final_score: TeamScore
    winning_team: int
    duration_s: int | None = None
    is_bot_game: bool = False
    created_at: str | None = None
    finished_at: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.rounds

    @property
    def num_rounds(self) -> int:
        return len(self.rounds)

    def team_of(self, player_name: str) -> int | None:
        """Team (1 or 2) of a rostered player; None for unknown names."""
        try:
            return self.player_teams[self.player_names.index(player_name)]
        except (ValueError, IndexError):
            return None
