"""Match statistics derived from a recorded match.

Pure functions over Match/Round. Player tallies are keyed by the name the
trick log records, so substitute bots get their own rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from trickreplay.record import Match, Round, TeamScore


@dataclass
class PlayerStats:
    player_name: str
    team: int | None
    tricks_won: int = 0
    trick_points: int = 0
    cards_played: int = 0
    rounds_played: int = 0
    rounds: set[int] = field(default_factory=set, repr=False)


@dataclass(frozen=True)
class RoundSummary:
    round_number: int  # 1-based
    bet_amount: int
    without_trump: bool
    offensive_team: int
    bet_made: bool
    trump: str | None
    num_tricks: int
    score_delta: TeamScore

    @property
    def description(self) -> str:
        trump = "no trump" if self.without_trump else (self.trump or "no trump")
        outcome = "made" if self.bet_made else "set"
        return (
            f"Round {self.round_number}: Team {self.offensive_team} bet "
            f"{self.bet_amount} ({trump}), {outcome}; "
            f"T1 {self.score_delta.team1:+d} / T2 {self.score_delta.team2:+d}"
        )


def player_stats(match: Match) -> dict[str, PlayerStats]:
    """Per-player trick tallies across the whole match.

    Rostered players come first, in roster order, even if they never
    played a card; unknown names follow in order of first appearance.
    """
    stats: dict[str, PlayerStats] = {
        name: PlayerStats(player_name=name, team=match.team_of(name))
        for name in match.player_names
    }

    def _get(name: str) -> PlayerStats:
        if name not in stats:
            stats[name] = PlayerStats(player_name=name, team=match.team_of(name))
        return stats[name]

    for round_index, round_ in enumerate(match.rounds):
        for trick in round_.tricks:
            for play in trick.plays:
                s = _get(play.player_name)
                s.cards_played += 1
                s.rounds.add(round_index)
            if trick.winner_name:
                winner = _get(trick.winner_name)
                winner.tricks_won += 1
                winner.trick_points += trick.points_awarded

    for s in stats.values():
        s.rounds_played = len(s.rounds)
    return stats


def team_round_totals(match: Match) -> list[TeamScore]:
    """Cumulative team scores after each round."""
    totals: list[TeamScore] = []
    t1 = t2 = 0
    for round_ in match.rounds:
        t1 += round_.round_score_delta.team1
        t2 += round_.round_score_delta.team2
        totals.append(TeamScore(team1=t1, team2=t2))
    return totals


def round_summary(round_: Round, round_index: int) -> RoundSummary:
    return RoundSummary(
        round_number=round_index + 1,
        bet_amount=round_.bet_amount,
        without_trump=round_.without_trump,
        offensive_team=round_.offensive_team,
        bet_made=round_.bet_made,
        trump=round_.trump.value if round_.trump else None,
        num_tricks=len(round_.tricks),
        score_delta=round_.round_score_delta,
    )
