"""CLI entry point: python -m trickreplay <match.json>"""

import argparse
import logging
import sys
import threading
from pathlib import Path

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live

from trickreplay.autoplay import AutoplayState
from trickreplay.config import load_config
from trickreplay.core.errors import MatchRecordError
from trickreplay.reader import load_match
from trickreplay.session import ReplaySession
from trickreplay.stats import player_stats, team_round_totals
from trickreplay.viewer import build_stats_table, render


def _speed(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid speed: {value}")


def _run_autoplay(console: Console, session: ReplaySession, speed: float | None) -> None:
    """Play the replay to the end in a live display."""
    done = threading.Event()
    match = session.match

    with Live(render(session.snapshot(), match), console=console,
              refresh_per_second=4) as live:
        def on_snapshot(snap):
            live.update(render(snap, match))
            if snap.autoplay is AutoplayState.STOPPED:
                done.set()

        session.subscribe(on_snapshot)
        session.start_autoplay(speed)
        if not session.autoplay.running:
            done.set()
        try:
            done.wait()
        except KeyboardInterrupt:
            pass


def _print_stats(console: Console, session: ReplaySession) -> None:
    match = session.match
    console.print(build_stats_table(player_stats(match)))
    for i, total in enumerate(team_round_totals(match), 1):
        console.print(f"  after round {i:>2}:  T1 {total.team1:>4}  T2 {total.team2:>4}")


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="trickreplay",
        description="Replay a recorded trick-taking match",
    )
    parser.add_argument("match", type=Path, help="Path to replay JSON file")
    parser.add_argument("-c", "--config", type=Path, default=None,
                        help="Replay YAML config (default: $TRICKREPLAY_CONFIG)")
    parser.add_argument("-r", "--round", type=int, default=1,
                        help="Round to open at, 1-based (clamped)")
    parser.add_argument("-t", "--trick", type=int, default=1,
                        help="Trick to open at, 1-based (clamped)")
    parser.add_argument("--autoplay", action="store_true", default=False,
                        help="Play forward from the start position to the end")
    parser.add_argument("--speed", type=_speed, default=None,
                        help="Autoplay speed: 0.5, 1 or 2")
    parser.add_argument("--stats", action="store_true", default=False,
                        help="Print per-player match statistics")
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Debug logging")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Error: bad config: {exc}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.match.exists():
        print(f"Error: replay file not found: {args.match}", file=sys.stderr)
        sys.exit(1)
    try:
        match = load_match(args.match)
    except MatchRecordError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    console = Console()
    with ReplaySession(match, config) as session:
        session.jump_to_round(args.round - 1)
        session.jump_to_trick(args.trick - 1)

        if args.stats:
            _print_stats(console, session)
            console.print()

        if args.autoplay:
            try:
                _run_autoplay(console, session, args.speed)
            except ValueError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                sys.exit(1)
        else:
            console.print(render(session.snapshot(), match))


if __name__ == "__main__":
    main()
