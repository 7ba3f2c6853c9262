# src/visit_leaderboard/update_data.py
"""
Batch entry point: read the exported visits JSON, build the leaderboard and
write the result file the webpage loads.

    python -m visit_leaderboard.update_data --input data/visits.json --output data/players.json
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

import pandas as pd

from . import config
from .pipeline import build_ranking, failure_result


def load_visits(path: Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def save_result(result: dict[str, Any], path: Path) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(result, indent=2, ensure_ascii=False), encoding="utf-8")
    return output_path


def process_file(
    input_path: Path | None = None,
    output_path: Path | None = None,
    as_of: str | None = None,
    time_range: str = "all",
) -> dict[str, Any]:
    """Read, aggregate and write; unreadable input still produces a (failed) result file."""

    source = Path(input_path) if input_path else Path(config.VISITS_PATH)
    target = Path(output_path) if output_path else Path(config.PLAYERS_PATH)
    now = pd.Timestamp(as_of) if as_of else pd.Timestamp.now()

    try:
        raw_visits = load_visits(source)
    except FileNotFoundError:
        result = failure_result(f"Visits file not found: {source}", now)
    except (OSError, ValueError) as exc:
        result = failure_result(f"Could not read visits from {source}: {exc}", now)
    else:
        result = build_ranking(raw_visits, now, time_range=time_range)

    save_result(result, target)
    return result


def _print_summary(result: dict[str, Any], output_path: Path) -> None:
    if not result["success"]:
        print(f"Error: {result['error']}")
        print(f"Failure result written to {output_path}")
        return

    stats = result["data"]["stats"]
    players = result["data"]["players"]
    print(f"Visits: {stats['totalVisits']} (skipped without a name: {stats['skippedVisits']})")
    print(f"Players: {stats['totalPlayers']}")
    print(f"Top: {stats['topPlayer'] or 'N/A'}")
    print(f"Saved to {output_path}")

    print("\nLeaderboard:")
    for rank, player in enumerate(players, start=1):
        print(
            f"{rank}. {player['name']}: {player['totalVisits']} visits"
            f" | streak {player['streak']} | {player['level']['name']}"
        )


def _as_of_arg(value: str) -> str:
    try:
        stamp = pd.Timestamp(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid --as_of instant {value!r}: {exc}") from exc
    if pd.isna(stamp):
        raise argparse.ArgumentTypeError(f"invalid --as_of instant {value!r}")
    return value


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Build the visit leaderboard from exported visits.")
    parser.add_argument(
        "--input",
        type=Path,
        default=Path(config.VISITS_PATH),
        help=f"Visits JSON exported from the form. Defaults to {config.VISITS_PATH}.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path(config.PLAYERS_PATH),
        help=f"Where to write the leaderboard JSON. Defaults to {config.PLAYERS_PATH}.",
    )
    parser.add_argument(
        "--as_of",
        type=_as_of_arg,
        default=None,
        help="Optional evaluation instant (ISO-8601). Defaults to now.",
    )
    parser.add_argument(
        "--range",
        dest="time_range",
        choices=config.TIME_RANGES,
        default="all",
        help="Only count visits in this period relative to --as_of.",
    )
    args = parser.parse_args(argv)

    result = process_file(args.input, args.output, as_of=args.as_of, time_range=args.time_range)
    _print_summary(result, args.output)
    if not result["success"]:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
