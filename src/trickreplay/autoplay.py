"""AutoplayScheduler — timer-driven forward stepping through a replay.

While running, the scheduler arms one single-shot timer; when it fires it
calls ``NavigationController.step_forward()`` and arms the next one. If the
step leaves the cursor where it was (end of the match), the scheduler stops
itself. Speed and cursor are read when the timer fires, never captured when
it is armed.

Viewer navigation invalidates the pending tick:
- a manual step that moves the cursor re-arms a full fresh delay;
- a jump stops playback (or, with ``stop_on_jump=False``, re-arms);
- a speed change re-arms at the new delay.
Elapsed time is never caught up by firing extra steps.

Timers come from a TimerFactory so tests can drive time by hand. The
default uses daemon ``threading.Timer`` instances; every tick and every
command takes the controller's lock, and a generation counter drops a tick
that fired in the same instant it was cancelled.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Mapping, Protocol

from trickreplay.navigation import NavigationController, NavigationEvent

logger = logging.getLogger(__name__)

SPEED_DELAYS_S: dict[float, float] = {0.5: 4.0, 1: 2.0, 2: 1.0}
DEFAULT_SPEED = 1


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def threading_timer(delay_s: float, callback: Callable[[], None]) -> TimerHandle:
    """Default TimerFactory: a started daemon ``threading.Timer``."""
    timer = threading.Timer(delay_s, callback)
    timer.daemon = True
    timer.start()
    return timer


class AutoplayState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


StateListener = Callable[[AutoplayState], None]


class AutoplayScheduler:
    """Drives a NavigationController forward at a selectable speed."""

    def __init__(
        self,
        controller: NavigationController,
        speed: float = DEFAULT_SPEED,
        delays: Mapping[float, float] | None = None,
        timer_factory: TimerFactory = threading_timer,
        stop_on_jump: bool = True,
    ) -> None:
        self._controller = controller
        self._delays = dict(delays or SPEED_DELAYS_S)
        self._speed = self._validate_speed(speed)
        self._timer_factory = timer_factory
        self._stop_on_jump = stop_on_jump

        self._state = AutoplayState.STOPPED
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._stepping = False
        self._closed = False
        self._state_listeners: list[StateListener] = []

        controller.add_listener(self._on_navigation)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> AutoplayState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is AutoplayState.RUNNING

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def delay_s(self) -> float:
        return self._delays[self._speed]

    @property
    def pending(self) -> bool:
        """True while a tick is armed."""
        return self._timer is not None

    def add_state_listener(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, speed: float | None = None) -> None:
        with self._controller.lock:
            if self._closed:
                return
            if speed is not None:
                self._speed = self._validate_speed(speed)
            if self.running:
                self._rearm()
                return
            if self._controller.cursor.is_empty:
                logger.debug("Autoplay not started: match has no rounds")
                return
            self._set_state(AutoplayState.RUNNING)
            self._arm()

    def stop(self) -> None:
        with self._controller.lock:
            self._cancel()
            self._set_state(AutoplayState.STOPPED)

    def toggle(self) -> None:
        with self._controller.lock:
            if self.running:
                self.stop()
            else:
                self.start()

    def set_speed(self, speed: float) -> None:
        speed = self._validate_speed(speed)
        with self._controller.lock:
            if speed == self._speed:
                return
            self._speed = speed
            if self.running:
                self._rearm()

    def close(self) -> None:
        """Cancel any pending tick and detach from the controller."""
        with self._controller.lock:
            self.stop()
            self._controller.remove_listener(self._on_navigation)
            self._closed = True

    # ------------------------------------------------------------------
    # Timer plumbing
    # ------------------------------------------------------------------

    def _arm(self) -> None:
        self._generation += 1
        generation = self._generation
        self._timer = self._timer_factory(
            self.delay_s, lambda: self._fire(generation),
        )

    def _cancel(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _rearm(self) -> None:
        self._cancel()
        self._arm()

    def _fire(self, generation: int) -> None:
        with self._controller.lock:
            if generation != self._generation or not self.running:
                return  # cancelled while this tick was in flight
            self._timer = None
            self._stepping = True
            try:
                moved = self._controller.step_forward()
            except Exception:
                # never RUNNING without a pending tick
                logger.exception(
                    "Autoplay tick failed at %s; stopping",
                    self._controller.cursor,
                )
                self._set_state(AutoplayState.STOPPED)
                return
            finally:
                self._stepping = False
            if not moved:
                logger.info(
                    "Autoplay reached end of match at %s",
                    self._controller.cursor,
                )
                self._set_state(AutoplayState.STOPPED)
                return
            self._arm()

    def _on_navigation(self, event: NavigationEvent) -> None:
        if self._stepping or not self.running:
            return
        if event.command.is_jump and self._stop_on_jump:
            self.stop()
        elif event.command.is_jump or event.changed:
            self._rearm()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate_speed(self, speed: float) -> float:
        if speed not in self._delays:
            raise ValueError(
                f"Invalid speed {speed!r}. Must be one of {sorted(self._delays)}."
            )
        return speed

    def _set_state(self, state: AutoplayState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._state_listeners):
            listener(state)
