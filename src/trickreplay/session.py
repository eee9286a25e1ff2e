"""ReplaySession — one viewer's replay of one finished match.

Wires a NavigationController, an AutoplayScheduler and a HandCache
together and turns the cursor into a ReplaySnapshot: everything a
renderer needs to draw the current position without reconstructing hands
or played-sets itself.

    with ReplaySession(match, config) as session:
        session.subscribe(render)      # called with a snapshot on every change
        session.start_autoplay(speed=2)
        ...
    # close() cancelled any pending autoplay tick

Snapshots are pushed synchronously after every cursor move and every
autoplay start/stop. Closing the session cancels pending timers and makes
further commands raise SessionClosedError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlencode

from trickreplay.autoplay import (
    AutoplayScheduler,
    AutoplayState,
    TimerFactory,
    threading_timer,
)
from trickreplay.config import ReplayConfig
from trickreplay.core.errors import SessionClosedError
from trickreplay.hands import HandCache, HandCard, mark_played
from trickreplay.navigation import (
    Boundaries,
    Cursor,
    NavigationController,
    NavigationEvent,
)
from trickreplay.record import Card, Match, Round, Trick

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandView:
    """A player's round-starting hand with played flags."""

    player_name: str
    team: int | None  # None for names outside the roster
    cards: tuple[HandCard, ...]

    @property
    def remaining(self) -> list[Card]:
        return [hc.card for hc in self.cards if not hc.played]


@dataclass(frozen=True)
class ReplaySnapshot:
    """The renderable state at one cursor position."""

    match_id: str
    cursor: Cursor
    round: Round | None
    trick: Trick | None
    hands: tuple[HandView, ...]
    played: frozenset[Card]
    boundaries: Boundaries
    autoplay: AutoplayState
    speed: float
    num_rounds: int

    @property
    def is_empty(self) -> bool:
        return self.cursor.is_empty

    @property
    def num_tricks(self) -> int:
        return len(self.round.tricks) if self.round else 0

    def hand_of(self, player_name: str) -> HandView | None:
        for hand in self.hands:
            if hand.player_name == player_name:
                return hand
        return None


SnapshotListener = Callable[[ReplaySnapshot], None]


def replay_link(base_url: str, match_id: str, round_index: int | None = None) -> str:
    """Shareable link to a replay, optionally opening at a round.

    Rounds are 1-based in the link, as shown to viewers.
    """
    params = {"replay": match_id}
    if round_index is not None:
        params["round"] = str(round_index + 1)
    return f"{base_url.rstrip('/')}/?{urlencode(params)}"


class ReplaySession:
    """Replay state for a single match and a single viewer."""

    def __init__(
        self,
        match: Match,
        config: ReplayConfig | None = None,
        timer_factory: TimerFactory = threading_timer,
        start: Cursor | None = None,
    ) -> None:
        self._match = match
        self._config = config or ReplayConfig()
        self._controller = NavigationController(match, start=start)
        self._autoplay = AutoplayScheduler(
            self._controller,
            speed=self._config.default_speed,
            delays=self._config.speed_delays_s,
            timer_factory=timer_factory,
            stop_on_jump=self._config.stop_on_jump,
        )
        self._cache = HandCache(self._config.cache_size)
        self._subscribers: list[SnapshotListener] = []
        self._closed = False

        self._controller.add_listener(self._on_navigation)
        self._autoplay.add_state_listener(self._on_autoplay_state)

        if match.is_empty:
            logger.info("Match %s has no recorded rounds", match.match_id)
        if self._config.autostart:
            self._autoplay.start()

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> ReplaySession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def match(self) -> Match:
        return self._match

    @property
    def cursor(self) -> Cursor:
        return self._controller.cursor

    @property
    def controller(self) -> NavigationController:
        return self._controller

    @property
    def autoplay(self) -> AutoplayScheduler:
        return self._autoplay

    @property
    def cache(self) -> HandCache:
        return self._cache

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> ReplaySnapshot:
        with self._controller.lock:
            return self._build_snapshot()

    def share_link(self, base_url: str, include_round: bool = True) -> str:
        c = self.cursor
        round_index = c.round_index if include_round and not c.is_empty else None
        return replay_link(base_url, self._match.match_id, round_index)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def step_forward(self) -> bool:
        self._check_open()
        return self._controller.step_forward()

    def step_backward(self) -> bool:
        self._check_open()
        return self._controller.step_backward()

    def jump_to_round(self, n: int) -> bool:
        self._check_open()
        return self._controller.jump_to_round(n)

    def jump_to_trick(self, n: int) -> bool:
        self._check_open()
        return self._controller.jump_to_trick(n)

    def start_autoplay(self, speed: float | None = None) -> None:
        self._check_open()
        self._autoplay.start(speed)

    def stop_autoplay(self) -> None:
        self._check_open()
        self._autoplay.stop()

    def toggle_autoplay(self) -> None:
        self._check_open()
        self._autoplay.toggle()

    def set_speed(self, speed: float) -> None:
        self._check_open()
        self._autoplay.set_speed(speed)
        self._publish()

    def close(self) -> None:
        """Tear down: cancel pending autoplay and drop all subscribers."""
        if self._closed:
            return
        with self._controller.lock:
            self._autoplay.close()
            self._controller.remove_listener(self._on_navigation)
            self._subscribers.clear()
            self._cache.clear()
            self._closed = True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError(
                f"Replay session for {self._match.match_id} is closed"
            )

    def _on_navigation(self, event: NavigationEvent) -> None:
        if event.changed:
            self._publish()

    def _on_autoplay_state(self, state: AutoplayState) -> None:
        self._publish()

    def _publish(self) -> None:
        if not self._subscribers:
            return
        snap = self._build_snapshot()
        for listener in list(self._subscribers):
            listener(snap)

    def _build_snapshot(self) -> ReplaySnapshot:
        c = self._controller.cursor
        common = dict(
            match_id=self._match.match_id,
            cursor=c,
            boundaries=self._controller.boundaries(),
            autoplay=self._autoplay.state,
            speed=self._autoplay.speed,
            num_rounds=self._match.num_rounds,
        )
        if c.is_empty:
            return ReplaySnapshot(
                round=None, trick=None, hands=(), played=frozenset(), **common,
            )

        round_ = self._match.rounds[c.round_index]
        trick = round_.tricks[c.trick_index] if round_.tricks else None
        hands = self._cache.hands(
            self._match.match_id, c.round_index, round_,
            self._match.player_names, self._config.player_aliases,
        )
        played = self._cache.played(
            self._match.match_id, c.round_index, round_, c.trick_index,
        )
        views = tuple(
            HandView(
                player_name=name,
                team=self._match.team_of(name),
                cards=tuple(cards),
            )
            for name, cards in mark_played(hands, played).items()
        )
        return ReplaySnapshot(
            round=round_, trick=trick, hands=views, played=played, **common,
        )
