"""Shared test fixtures for trickreplay."""

import pytest

from factories import dealt_round, make_match


class _ManualTimer:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """TimerFactory whose clock only moves when a test calls ``advance``."""

    def __init__(self):
        self.now = 0.0
        self.created: list[_ManualTimer] = []

    def __call__(self, delay_s, callback):
        timer = _ManualTimer(self.now + delay_s, callback)
        self.created.append(timer)
        return timer

    @property
    def active(self) -> list[_ManualTimer]:
        return [t for t in self.created if not t.cancelled and t.callback]

    def advance(self, seconds: float) -> None:
        """Fire, in due order, every live timer due within ``seconds``."""
        target = self.now + seconds
        while True:
            due = [t for t in self.active if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            callback, timer.callback = timer.callback, None
            self.now = timer.due
            callback()
        self.now = target


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def two_round_match():
    """Round 0 has 3 tricks of 4 plays, round 1 has 2."""
    return make_match([dealt_round(3), dealt_round(2)])


@pytest.fixture
def empty_match():
    return make_match([])
