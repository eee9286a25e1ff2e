"""Tests for the replay cursor and NavigationController."""

import random

import pytest

from factories import dealt_round, make_match, make_round
from trickreplay.navigation import (
    EMPTY,
    Boundaries,
    Cursor,
    NavCommand,
    NavigationController,
)


@pytest.fixture
def nav(two_round_match):
    return NavigationController(two_round_match)


def _assert_valid(nav):
    c = nav.cursor
    rounds = nav.match.rounds
    assert 0 <= c.round_index < len(rounds)
    assert 0 <= c.trick_index <= rounds[c.round_index].last_trick_index


# ------------------------------------------------------------------
# Initial state
# ------------------------------------------------------------------

class TestInitialState:
    def test_starts_at_first_trick(self, nav):
        assert nav.cursor == Cursor(0, 0)

    def test_initial_boundaries(self, nav):
        assert nav.boundaries() == Boundaries(
            has_next_trick=True, has_prev_trick=False,
            has_next_round=True, has_prev_round=False,
        )

    def test_start_position_is_clamped(self, two_round_match):
        nav = NavigationController(two_round_match, start=Cursor(9, 9))
        assert nav.cursor == Cursor(1, 1)

    def test_current_round(self, nav, two_round_match):
        assert nav.current_round is two_round_match.rounds[0]


# ------------------------------------------------------------------
# Stepping
# ------------------------------------------------------------------

class TestStepForward:
    def test_walks_whole_match(self, nav):
        seen = []
        for _ in range(4):
            assert nav.step_forward() is True
            seen.append(nav.cursor)
        assert seen == [Cursor(0, 1), Cursor(0, 2), Cursor(1, 0), Cursor(1, 1)]

    def test_terminal_is_noop(self, nav):
        for _ in range(4):
            nav.step_forward()
        assert nav.step_forward() is False
        assert nav.cursor == Cursor(1, 1)
        assert nav.is_terminal()

    def test_idempotent_at_terminal(self, nav):
        for _ in range(10):
            nav.step_forward()
        assert nav.cursor == Cursor(1, 1)


class TestStepBackward:
    def test_noop_at_start(self, nav):
        assert nav.step_backward() is False
        assert nav.cursor == Cursor(0, 0)

    def test_within_round(self, nav):
        nav.jump_to_trick(2)
        assert nav.step_backward() is True
        assert nav.cursor == Cursor(0, 1)

    def test_rolls_over_to_last_trick_of_previous_round(self, nav):
        nav.jump_to_round(1)
        assert nav.step_backward() is True
        assert nav.cursor == Cursor(0, 2)

    def test_rolls_over_into_round_without_tricks(self):
        match = make_match([make_round([]), dealt_round(2)])
        nav = NavigationController(match, start=Cursor(1, 0))
        nav.step_backward()
        assert nav.cursor == Cursor(0, 0)

    def test_forward_then_back_returns(self, nav):
        for _ in range(3):
            nav.step_forward()
        for _ in range(3):
            nav.step_backward()
        assert nav.cursor == Cursor(0, 0)


# ------------------------------------------------------------------
# Jumps
# ------------------------------------------------------------------

class TestJumps:
    def test_jump_to_round_lands_on_first_trick(self, nav):
        nav.jump_to_trick(2)
        nav.jump_to_round(1)
        assert nav.cursor == Cursor(1, 0)

    def test_jump_to_round_clamps_high(self, nav):
        nav.jump_to_round(5)
        assert nav.cursor == Cursor(1, 0)

    def test_jump_to_round_clamps_low(self, nav):
        nav.jump_to_round(1)
        nav.jump_to_round(-3)
        assert nav.cursor == Cursor(0, 0)

    def test_jump_to_trick_clamps_to_current_round(self, nav):
        nav.jump_to_round(1)
        nav.jump_to_trick(7)
        assert nav.cursor == Cursor(1, 1)

    def test_jump_to_current_position_reports_no_change(self, nav):
        assert nav.jump_to_round(0) is False


# ------------------------------------------------------------------
# Empty match and zero-trick rounds
# ------------------------------------------------------------------

class TestEmptyMatch:
    def test_cursor_is_empty_sentinel(self, empty_match):
        nav = NavigationController(empty_match)
        assert nav.cursor == EMPTY
        assert nav.cursor.is_empty
        assert nav.current_round is None

    def test_every_command_is_noop(self, empty_match):
        nav = NavigationController(empty_match)
        assert nav.step_forward() is False
        assert nav.step_backward() is False
        assert nav.jump_to_round(3) is False
        assert nav.jump_to_trick(3) is False
        assert nav.cursor == EMPTY

    def test_no_boundaries(self, empty_match):
        nav = NavigationController(empty_match)
        assert nav.boundaries() == Boundaries()
        assert nav.is_terminal()


class TestRoundWithoutTricks:
    def test_step_forward_skips_through(self):
        match = make_match([dealt_round(1), make_round([]), dealt_round(1)])
        nav = NavigationController(match)
        nav.step_forward()
        assert nav.cursor == Cursor(1, 0)
        nav.step_forward()
        assert nav.cursor == Cursor(2, 0)


# ------------------------------------------------------------------
# Listeners
# ------------------------------------------------------------------

class TestListeners:
    def test_event_per_command(self, nav):
        events = []
        nav.add_listener(events.append)
        nav.step_forward()
        nav.step_backward()
        nav.step_backward()
        assert [e.command for e in events] == [
            NavCommand.STEP_FORWARD, NavCommand.STEP_BACKWARD, NavCommand.STEP_BACKWARD,
        ]
        assert [e.changed for e in events] == [True, True, False]

    def test_event_carries_before_and_after(self, nav):
        events = []
        nav.add_listener(events.append)
        nav.jump_to_round(1)
        assert events[0].before == Cursor(0, 0)
        assert events[0].after == Cursor(1, 0)
        assert events[0].command.is_jump

    def test_listener_sees_new_cursor(self, nav):
        seen = []
        nav.add_listener(lambda e: seen.append(nav.cursor))
        nav.step_forward()
        assert seen == [Cursor(0, 1)]

    def test_remove_listener(self, nav):
        events = []
        nav.add_listener(events.append)
        nav.remove_listener(events.append)
        nav.step_forward()
        assert events == []


# ------------------------------------------------------------------
# Random command sequences
# ------------------------------------------------------------------

class TestCursorValidity:
    @pytest.mark.parametrize("seed", range(5))
    def test_random_commands_keep_cursor_valid(self, seed):
        rng = random.Random(seed)
        match = make_match([dealt_round(rng.randint(0, 8)) for _ in range(4)])
        nav = NavigationController(match)
        commands = [
            nav.step_forward,
            nav.step_backward,
            lambda: nav.jump_to_round(rng.randint(-3, 8)),
            lambda: nav.jump_to_trick(rng.randint(-3, 12)),
        ]
        for _ in range(200):
            rng.choice(commands)()
            _assert_valid(nav)
