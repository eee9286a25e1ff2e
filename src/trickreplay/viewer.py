"""Terminal rendering of replay snapshots with rich.

Only reads ReplaySnapshot and the Match roster; never reconstructs hands
or played-sets itself.
"""

from __future__ import annotations

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from trickreplay.autoplay import AutoplayState
from trickreplay.hands import HandCard
from trickreplay.record import Card, CardColor, Match
from trickreplay.session import ReplaySnapshot
from trickreplay.stats import PlayerStats, round_summary

CARD_STYLES = {
    CardColor.RED: "bold red",
    CardColor.BLUE: "bold blue",
    CardColor.GREEN: "bold green",
    CardColor.BROWN: "bold orange4",
}

TEAM_COLORS = {1: "cyan", 2: "magenta"}


def format_card(card: Card, played: bool = False) -> Text:
    style = CARD_STYLES.get(card.color, "white")
    if played:
        style = "dim strike"
    return Text(f"{card.color.value[0].upper()}{card.value}", style=style)


def format_hand(cards: tuple[HandCard, ...]) -> Text:
    result = Text()
    for i, hc in enumerate(cards):
        if i > 0:
            result.append(" ")
        result.append_text(format_card(hc.card, hc.played))
    return result


def _player_text(name: str, team: int | None) -> Text:
    return Text(name, style=f"bold {TEAM_COLORS.get(team, 'white')}")


def build_header(snap: ReplaySnapshot, match: Match) -> Panel:
    header = Text()
    header.append("REPLAY ", style="bold white")
    header.append(snap.match_id or "-", style="bold yellow")
    header.append(
        f"   T1 {match.final_score.team1}  T2 {match.final_score.team2}"
        f"   Winner: Team {match.winning_team}",
        style="dim",
    )
    if snap.is_empty:
        return Panel(header, border_style="yellow")

    pos = Text()
    pos.append(f"Round {snap.cursor.round_index + 1}/{snap.num_rounds}", style="bold")
    pos.append(
        f"   Trick {min(snap.cursor.trick_index + 1, snap.num_tricks)}/{snap.num_tricks}",
        style="bold",
    )
    pos.append(f"   {round_summary(snap.round, snap.cursor.round_index).description}",
               style="dim")
    return Panel(Group(header, pos), border_style="green")


def build_trick_panel(snap: ReplaySnapshot, match: Match) -> Panel:
    if snap.trick is None:
        return Panel(Text("-- no trick --", style="dim italic"), title="Current Trick")
    table = Table.grid(padding=(0, 2))
    for play in snap.trick.plays:
        row = Text()
        row.append_text(_player_text(play.player_name, match.team_of(play.player_name)))
        row.append("  ")
        row.append_text(format_card(play.card))
        if play.player_name == snap.trick.winner_name:
            row.append("  ★", style="bold yellow")
        table.add_row(row)
    title = "Current Trick"
    if snap.trick.winner_name:
        title += f": won by {snap.trick.winner_name} ({snap.trick.points_awarded} pts)"
    return Panel(table, title=title)


def build_hands_panel(snap: ReplaySnapshot) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("player")
    table.add_column("hand")
    for hand in snap.hands:
        table.add_row(_player_text(hand.player_name, hand.team), format_hand(hand.cards))
    return Panel(table, title="Player Hands (Round Start)")


def build_footer(snap: ReplaySnapshot) -> Text:
    b = snap.boundaries
    footer = Text()
    footer.append("▶ playing" if snap.autoplay is AutoplayState.RUNNING else "⏸ paused",
                  style="bold")
    footer.append(f"  {snap.speed:g}x", style="dim")
    footer.append("  prev" if b.can_step_backward else "  |start", style="dim")
    footer.append("  next" if b.can_step_forward else "  end|", style="dim")
    return footer


def render(snap: ReplaySnapshot, match: Match) -> Group:
    if snap.is_empty:
        return Group(
            build_header(snap, match),
            Text("No replay data available: this game has no recorded rounds.",
                 style="bold yellow"),
        )
    return Group(
        build_header(snap, match),
        build_trick_panel(snap, match),
        build_hands_panel(snap),
        build_footer(snap),
    )


def build_stats_table(stats: dict[str, PlayerStats]) -> Table:
    table = Table(title="Player Stats")
    table.add_column("Player")
    table.add_column("Team", justify="right")
    table.add_column("Tricks", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("Rounds", justify="right")
    for s in stats.values():
        table.add_row(
            _player_text(s.player_name, s.team),
            str(s.team) if s.team else "-",
            str(s.tricks_won),
            str(s.trick_points),
            str(s.rounds_played),
        )
    return table
