"""Builders for match records used across the test suite."""

from trickreplay.record import (
    Card,
    CardColor,
    Match,
    Round,
    TeamScore,
    Trick,
    TrickCard,
)

PLAYERS = ("Alice", "Bob", "Carol", "Dave")
TEAMS = (1, 2, 1, 2)
COLORS = ["red", "blue", "green", "brown"]


def card(color: str, value: int) -> Card:
    return Card(color=CardColor(color), value=value)


def trick(plays, winner: str | None = None, points: int = 1) -> Trick:
    """Build a trick from ``[(player, color, value), ...]``."""
    trick_cards = tuple(
        TrickCard(player_name=p, card=card(c, v)) for p, c, v in plays
    )
    if winner is None:
        winner = trick_cards[0].player_name if trick_cards else ""
    return Trick(plays=trick_cards, winner_name=winner, points_awarded=points)


def make_round(tricks, **kwargs) -> Round:
    defaults = dict(
        bet_amount=9,
        without_trump=False,
        offensive_team=1,
        offensive_points=10,
        defensive_points=8,
        bet_made=True,
        round_score_delta=TeamScore(team1=10, team2=8),
        trump=CardColor.RED,
    )
    defaults.update(kwargs)
    return Round(tricks=tuple(tricks), **defaults)


def dealt_round(num_tricks: int, players=PLAYERS) -> Round:
    """A round where every player plays one unique card per trick.

    Player i plays color i in every trick, value = trick number.
    """
    tricks = [
        trick([(p, COLORS[i % 4], t) for i, p in enumerate(players)])
        for t in range(num_tricks)
    ]
    return make_round(tricks)


def make_match(rounds, player_names=PLAYERS, player_teams=TEAMS,
               match_id="game-1") -> Match:
    return Match(
        match_id=match_id,
        rounds=tuple(rounds),
        player_names=tuple(player_names),
        player_teams=tuple(player_teams),
        final_score=TeamScore(team1=45, team2=32),
        winning_team=1,
    )


def payload(round_history=None, **overrides) -> dict:
    """A replay payload as delivered by the game server."""
    if round_history is None:
        round_history = [
            {
                "roundNumber": 1,
                "betAmount": 9,
                "withoutTrump": False,
                "offensiveTeam": 1,
                "offensivePoints": 10,
                "defensivePoints": 8,
                "betMade": True,
                "roundScore": {"team1": 10, "team2": 8},
                "trump": "red",
                "tricks": [
                    {
                        "trick": [
                            {"playerName": "Player 1", "card": {"color": "red", "value": 7}},
                            {"playerName": "Player 2", "card": {"color": "blue", "value": 3}},
                            {"playerName": "Player 3", "card": {"color": "red", "value": 2}},
                            {"playerName": "Player 4", "card": {"color": "green", "value": 5}},
                        ],
                        "winnerName": "Player 1",
                        "points": 1,
                    },
                ],
            },
        ]
    data = {
        "game_id": "test-game-123",
        "winning_team": 1,
        "team1_score": 45,
        "team2_score": 32,
        "rounds": len(round_history),
        "player_names": ["Player 1", "Player 2", "Player 3", "Player 4"],
        "player_teams": [1, 2, 1, 2],
        "round_history": round_history,
        "trump_suit": "red",
        "game_duration_seconds": 300,
        "is_bot_game": False,
        "created_at": "2025-01-01T00:00:00Z",
        "finished_at": "2025-01-01T00:05:00Z",
    }
    data.update(overrides)
    return data
