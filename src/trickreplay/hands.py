"""Hand reconstruction and play progress, derived from the trick log.

A match record never stores hands. Each round deals a fixed hand and every
card in it is played exactly once within the round, so the cards a player
is recorded as playing, taken in trick order then play order, are exactly
that player's round-starting hand. The displayed hand order is that order.

Both functions here are pure. HandCache memoizes them per match; it is a
speed-up only and can be dropped without changing any result.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Mapping, Sequence

from trickreplay.record import Card, Round

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandCard:
    """A card of a reconstructed hand, flagged if already played."""

    card: Card
    played: bool


def reconstruct_hands(
    round_: Round,
    player_names: list[str] | tuple[str, ...],
    aliases: Mapping[str, str] | None = None,
    *,
    round_index: int | None = None,
) -> dict[str, list[Card]]:
    """Rebuild each player's round-starting hand from ``round_.tricks``.

    Rostered players who appear in the round are registered first, in
    roster order; rostered players with no recorded plays are left out.
    A play under a name that was never registered (a bot that replaced a
    player mid-game) gets its own hand, created on first encounter, and a
    warning is logged. ``aliases`` maps such names onto a rostered name so
    their cards merge into that player's hand instead.
    """
    aliases = aliases or {}
    participants = {aliases.get(name, name) for name in round_.participants}
    hands: dict[str, list[Card]] = {
        name: [] for name in player_names if name in participants
    }

    for trick_index, trick in enumerate(round_.tricks):
        for play in trick.plays:
            name = aliases.get(play.player_name, play.player_name)
            if name not in hands:
                logger.warning(
                    "Player %r not in roster while rebuilding hands "
                    "(round=%s, trick=%d, roster=%s)",
                    name, round_index, trick_index, list(player_names),
                )
                hands[name] = []
            hands[name].append(play.card)

    return hands


def played_cards_up_to(round_: Round, trick_index: int) -> frozenset[Card]:
    """Cards played in tricks ``0..trick_index`` inclusive.

    A negative index means "before the first trick" and yields the empty
    set. An index past the last trick counts every trick.
    """
    if trick_index < 0:
        return frozenset()
    return frozenset(
        play.card
        for trick in round_.tricks[: trick_index + 1]
        for play in trick.plays
    )


def mark_played(
    hands: Mapping[str, Sequence[Card]], played: frozenset[Card],
) -> dict[str, list[HandCard]]:
    """Pair every card of every hand with its played flag."""
    return {
        name: [HandCard(card=c, played=c in played) for c in cards]
        for name, cards in hands.items()
    }


class HandCache:
    """Bounded LRU memo for hands and played-sets of one match.

    Hands are keyed by ``(match_id, round_index)`` and played-sets by
    ``(match_id, round_index, trick_index)``. Cached hands are stored as
    tuples and handed out in a fresh dict, so callers cannot alter them.
    """

    def __init__(self, max_entries: int = 64) -> None:
        self._max_entries = max(1, max_entries)
        self._hands: OrderedDict[tuple, dict[str, tuple[Card, ...]]] = OrderedDict()
        self._played: OrderedDict[tuple, frozenset[Card]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def hands(
        self,
        match_id: str,
        round_index: int,
        round_: Round,
        player_names: list[str] | tuple[str, ...],
        aliases: Mapping[str, str] | None = None,
    ) -> dict[str, tuple[Card, ...]]:
        key = (match_id, round_index)
        if key in self._hands:
            self.hits += 1
            self._hands.move_to_end(key)
            return dict(self._hands[key])
        self.misses += 1
        value = {
            name: tuple(cards)
            for name, cards in reconstruct_hands(
                round_, player_names, aliases, round_index=round_index,
            ).items()
        }
        self._store(self._hands, key, value)
        return dict(value)

    def played(
        self, match_id: str, round_index: int, round_: Round, trick_index: int,
    ) -> frozenset[Card]:
        key = (match_id, round_index, trick_index)
        if key in self._played:
            self.hits += 1
            self._played.move_to_end(key)
            return self._played[key]
        self.misses += 1
        value = played_cards_up_to(round_, trick_index)
        self._store(self._played, key, value)
        return value

    def clear(self) -> None:
        self._hands.clear()
        self._played.clear()

    def __len__(self) -> int:
        return len(self._hands) + len(self._played)

    def _store(self, table: OrderedDict, key: tuple, value) -> None:
        table[key] = value
        while len(table) > self._max_entries:
            table.popitem(last=False)
