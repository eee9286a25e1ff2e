"""Navigation — the replay cursor and the state machine that moves it.

The cursor is the (round, trick) position an observer is looking at. Only
NavigationController changes it, and only through four commands:

    step_forward    next trick, else first trick of next round, else no-op
    step_backward   previous trick, else last trick of previous round, else no-op
    jump_to_round   clamp to a valid round, land on its first trick
    jump_to_trick   clamp to a valid trick of the current round

Every command is total: out-of-range requests are clamped, boundary steps
are no-ops, and a match with no rounds keeps the cursor at EMPTY. Each
command returns True iff the cursor moved and emits a NavigationEvent to
registered listeners, in registration order, before returning.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from trickreplay.record import Match, Round

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cursor:
    round_index: int
    trick_index: int

    @property
    def is_empty(self) -> bool:
        return self.round_index < 0

    def __str__(self) -> str:
        if self.is_empty:
            return "(empty)"
        return f"({self.round_index},{self.trick_index})"


EMPTY = Cursor(-1, -1)
"""Cursor of a match with no rounds. Consumers treat it as nothing to show."""


@dataclass(frozen=True)
class Boundaries:
    """Which directions the cursor can still move in."""

    has_next_trick: bool = False
    has_prev_trick: bool = False
    has_next_round: bool = False
    has_prev_round: bool = False

    @property
    def can_step_forward(self) -> bool:
        return self.has_next_trick or self.has_next_round

    @property
    def can_step_backward(self) -> bool:
        return self.has_prev_trick or self.has_prev_round


class NavCommand(Enum):
    STEP_FORWARD = "step_forward"
    STEP_BACKWARD = "step_backward"
    JUMP_TO_ROUND = "jump_to_round"
    JUMP_TO_TRICK = "jump_to_trick"

    @property
    def is_jump(self) -> bool:
        return self in (NavCommand.JUMP_TO_ROUND, NavCommand.JUMP_TO_TRICK)


@dataclass(frozen=True)
class NavigationEvent:
    """Emitted after every command, whether or not the cursor moved."""

    command: NavCommand
    before: Cursor
    after: Cursor

    @property
    def changed(self) -> bool:
        return self.before != self.after


NavigationListener = Callable[[NavigationEvent], None]


def _clamp(n: int, low: int, high: int) -> int:
    return max(low, min(n, high))


class NavigationController:
    """Owns the cursor for one replay of one match.

    Commands are serialized through ``lock`` (re-entrant), so a command
    issued from a timer thread never interleaves with one issued by the
    viewer. Listeners run while the lock is held.
    """

    def __init__(self, match: Match, start: Cursor | None = None) -> None:
        self._match = match
        self._lock = threading.RLock()
        self._listeners: list[NavigationListener] = []
        if match.is_empty:
            self._cursor = EMPTY
        elif start is None:
            self._cursor = Cursor(0, 0)
        else:
            r = _clamp(start.round_index, 0, match.num_rounds - 1)
            t = _clamp(start.trick_index, 0, match.rounds[r].last_trick_index)
            self._cursor = Cursor(r, t)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def match(self) -> Match:
        return self._match

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def cursor(self) -> Cursor:
        return self._cursor

    @property
    def current_round(self) -> Round | None:
        if self._cursor.is_empty:
            return None
        return self._match.rounds[self._cursor.round_index]

    def boundaries(self) -> Boundaries:
        c = self._cursor
        if c.is_empty:
            return Boundaries()
        return Boundaries(
            has_next_trick=c.trick_index < self._last_trick(c.round_index),
            has_prev_trick=c.trick_index > 0,
            has_next_round=c.round_index < self._match.num_rounds - 1,
            has_prev_round=c.round_index > 0,
        )

    def is_terminal(self) -> bool:
        """True at the last trick of the last round, or for an empty match."""
        return not self.boundaries().can_step_forward

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: NavigationListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: NavigationListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def step_forward(self) -> bool:
        with self._lock:
            c = self._cursor
            if c.is_empty:
                new = c
            elif c.trick_index < self._last_trick(c.round_index):
                new = Cursor(c.round_index, c.trick_index + 1)
            elif c.round_index < self._match.num_rounds - 1:
                new = Cursor(c.round_index + 1, 0)
            else:
                new = c
            return self._apply(NavCommand.STEP_FORWARD, new)

    def step_backward(self) -> bool:
        with self._lock:
            c = self._cursor
            if c.is_empty:
                new = c
            elif c.trick_index > 0:
                new = Cursor(c.round_index, c.trick_index - 1)
            elif c.round_index > 0:
                prev = c.round_index - 1
                new = Cursor(prev, self._last_trick(prev))
            else:
                new = c
            return self._apply(NavCommand.STEP_BACKWARD, new)

    def jump_to_round(self, n: int) -> bool:
        with self._lock:
            if self._cursor.is_empty:
                return self._apply(NavCommand.JUMP_TO_ROUND, EMPTY)
            r = _clamp(n, 0, self._match.num_rounds - 1)
            if r != n:
                logger.debug("Round %d out of range, clamped to %d", n, r)
            return self._apply(NavCommand.JUMP_TO_ROUND, Cursor(r, 0))

    def jump_to_trick(self, n: int) -> bool:
        with self._lock:
            c = self._cursor
            if c.is_empty:
                return self._apply(NavCommand.JUMP_TO_TRICK, EMPTY)
            t = _clamp(n, 0, self._last_trick(c.round_index))
            if t != n:
                logger.debug("Trick %d out of range, clamped to %d", n, t)
            return self._apply(NavCommand.JUMP_TO_TRICK, Cursor(c.round_index, t))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _last_trick(self, round_index: int) -> int:
        return self._match.rounds[round_index].last_trick_index

    def _apply(self, command: NavCommand, new: Cursor) -> bool:
        event = NavigationEvent(command=command, before=self._cursor, after=new)
        self._cursor = new
        for listener in list(self._listeners):
            listener(event)
        return event.changed
