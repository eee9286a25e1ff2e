"""Match record reader — turns a delivered replay payload into a Match.

Usage:
    match = load_match("path/to/game.json")
    print(match.match_id)        # "game-123"
    print(match.player_names)    # ("Alice", "Bob", "Carol", "Dave")
    print(len(match.rounds))     # 7

The payload's top level uses snake_case keys (``player_names``,
``round_history``, ...) while rounds and tricks use the game server's
camelCase keys (``betAmount``, ``winnerName``, ...). Structure is checked
against ``core/match_schema.json``; anything that does not fit raises
MatchRecordError so no replay session is ever built from a bad record.
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema

from trickreplay.core.errors import MatchRecordError
from trickreplay.core.schemas import load_schema
from trickreplay.record import (
    Card,
    CardColor,
    Match,
    Round,
    TeamScore,
    Trick,
    TrickCard,
)

_MATCH_SCHEMA = "match_schema.json"


def _card_from_record(record: dict) -> Card:
    return Card(color=CardColor(record["color"]), value=int(record["value"]))


def _trick_from_record(record: dict) -> Trick:
    plays = tuple(
        TrickCard(player_name=p["playerName"], card=_card_from_record(p["card"]))
        for p in record.get("trick", [])
    )
    return Trick(
        plays=plays,
        winner_name=record.get("winnerName") or "",
        points_awarded=record.get("points", 0),
    )


def _round_from_record(record: dict) -> Round:
    # Older payloads only carry the winning bet object.
    highest_bet = record.get("highestBet") or {}
    score = record.get("roundScore") or {}
    trump = record.get("trump")
    return Round(
        tricks=tuple(_trick_from_record(t) for t in record.get("tricks") or []),
        bet_amount=record.get("betAmount", highest_bet.get("amount", 0)),
        without_trump=record.get(
            "withoutTrump", highest_bet.get("withoutTrump", False)
        ),
        offensive_team=record.get("offensiveTeam", 1),
        offensive_points=record.get("offensivePoints", 0),
        defensive_points=record.get("defensivePoints", 0),
        bet_made=record.get("betMade", False),
        round_score_delta=TeamScore(
            team1=score.get("team1", 0), team2=score.get("team2", 0),
        ),
        trump=CardColor(trump) if trump else None,
    )


def _player_teams(raw: Any, player_names: list[str]) -> tuple[int, ...]:
    """Normalize ``player_teams`` to a tuple parallel to ``player_names``.

    Payloads carry either a list parallel to the roster or a
    ``{name: team}`` mapping. Missing entries alternate 1, 2, 1, 2 by seat.
    """
    if isinstance(raw, dict):
        return tuple(
            raw.get(name, 1 if i % 2 == 0 else 2)
            for i, name in enumerate(player_names)
        )
    raw = list(raw or [])
    if len(raw) != len(player_names):
        raise MatchRecordError(
            f"player_teams has {len(raw)} entries for "
            f"{len(player_names)} players",
            path="player_teams",
        )
    return tuple(raw)


def match_from_dict(data: Any) -> Match:
    """Validate a replay payload and build an immutable Match from it."""
    if data is None:
        raise MatchRecordError("replay data is missing")
    try:
        jsonschema.validate(data, load_schema(_MATCH_SCHEMA))
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) or None
        raise MatchRecordError(e.message, path=path) from e

    player_names = list(data["player_names"])
    team1 = data.get("team1_score", 0)
    team2 = data.get("team2_score", 0)
    winning_team = data.get("winning_team")
    if winning_team is None:
        winning_team = 1 if team1 >= team2 else 2

    return Match(
        match_id=data.get("game_id", ""),
        rounds=tuple(_round_from_record(r) for r in data["round_history"]),
        player_names=tuple(player_names),
        player_teams=_player_teams(data.get("player_teams"), player_names),
        final_score=TeamScore(team1=team1, team2=team2),
        winning_team=winning_team,
        duration_s=data.get("game_duration_seconds"),
        is_bot_game=data.get("is_bot_game", False),
        created_at=data.get("created_at"),
        finished_at=data.get("finished_at"),
    )


def load_match(path: str | Path) -> Match:
    """Read a replay payload from a JSON file.

    Accepts either the bare payload or the ``{"replayData": {...}}``
    envelope the game server emits on ``game_replay_data``.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MatchRecordError(f"invalid JSON in {path.name}: {e}") from e

    if isinstance(data, dict) and "replayData" in data:
        data = data["replayData"]
    match = match_from_dict(data)
    if not match.match_id:
        # Dataclass is frozen; rebuild with the file stem as id.
        match = replace(match, match_id=path.stem)
    return match
