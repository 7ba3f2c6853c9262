# src/visit_leaderboard/pipeline.py
"""
Assemble the leaderboard result consumed by the webpage.

``build_ranking`` is a pure function of (raw visits, evaluation instant,
rules): it does no I/O and never reads the clock, so identical inputs always
give identical output.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

import pandas as pd

from . import config
from .global_stats import rank_players, summarize, week_key, week_numbers
from .models import PersonAggregate
from .normalize import normalize_visits, visits_frame
from .player_stats import build_player
from .rules import RankingRules, default_rules


class VisitDataError(ValueError):
    """The top-level visit payload cannot be processed at all."""


def as_timestamp(now: datetime | pd.Timestamp | str) -> pd.Timestamp:
    stamp = pd.Timestamp(now) if now is not None else pd.NaT
    if pd.isna(stamp):
        raise ValueError(f"An evaluation instant is required, got {now!r}")
    return stamp


def failure_result(message: str, now: datetime | pd.Timestamp | str) -> dict[str, Any]:
    return {
        "success": False,
        "schemaVersion": config.SCHEMA_VERSION,
        "timestamp": as_timestamp(now).isoformat(),
        "error": message,
    }


def filter_frame(frame: pd.DataFrame, time_range: str, now: pd.Timestamp) -> pd.DataFrame:
    """Keep the visits inside ``time_range`` relative to ``now``; undated visits only match "all"."""
    if time_range not in config.TIME_RANGES:
        raise ValueError(
            f"Unknown time range {time_range!r}. Available ranges: {list(config.TIME_RANGES)}"
        )
    if time_range == "all" or frame.empty:
        return frame

    stamps = frame["date_ts"]
    dated = stamps.notna()
    if time_range == "today":
        mask = dated & (stamps.dt.normalize() == pd.Timestamp(now.date()))
    elif time_range == "month":
        mask = dated & (stamps.dt.year == now.year) & (stamps.dt.month == now.month)
    else:
        year, week = week_key(now)
        weeks = week_numbers(stamps[dated])
        in_week = (weeks["year"] == year) & (weeks["week"] == week)
        mask = pd.Series(False, index=frame.index)
        mask.loc[in_week.index] = in_week
    return frame[mask]


def sort_players(players: Sequence[PersonAggregate], by: str = "visits") -> list[PersonAggregate]:
    """
    Re-order ranked players for display. ``"visits"`` keeps the canonical
    ranking; ``"streak"`` and ``"lastVisit"`` sort descending with ties left in
    rank order and players without dates last.
    """
    if by == "visits":
        return list(players)
    if by == "streak":
        return sorted(players, key=lambda player: player.streak, reverse=True)
    if by == "lastVisit":
        return sorted(
            players,
            key=lambda player: (player.last_visit is not None, player.last_visit or ""),
            reverse=True,
        )
    raise ValueError(f"Unknown sort key {by!r}. Available keys: {list(config.SORT_KEYS)}")


def _require_records(raw_visits: Any) -> Sequence[Any]:
    if not isinstance(raw_visits, (list, tuple)):
        raise VisitDataError(
            f"Visit data must be a list of records, got {type(raw_visits).__name__}"
        )
    return raw_visits


def build_ranking(
    raw_visits: Any,
    now: datetime | pd.Timestamp | str,
    rules: RankingRules | None = None,
    time_range: str = "all",
) -> dict[str, Any]:
    """
    Run the whole pipeline and return the tagged result.

    Parameters
    ----------
    raw_visits:
        Records as exported by the visit form; anything other than a list is
        reported as a failed result rather than raised.
    now:
        Evaluation instant used for month/week counts, range filters and the
        result timestamp.
    rules:
        Level and badge tables. Defaults to ``rules.default_rules()``.
    time_range:
        One of ``config.TIME_RANGES``.
    """

    now_ts = as_timestamp(now)
    try:
        records = _require_records(raw_visits)
    except VisitDataError as exc:
        return failure_result(str(exc), now_ts)

    rules = rules if rules is not None else default_rules()

    normalized = normalize_visits(records)
    if normalized.skipped:
        print(f"Skipped {normalized.skipped} visit(s) without a person name.")

    frame = filter_frame(visits_frame(normalized.visits), time_range, now_ts)
    players = [
        build_player(name, group, rules) for name, group in frame.groupby("person", sort=False)
    ]
    ranked = rank_players(players)
    stats = summarize(frame, ranked, now_ts, skipped=normalized.skipped)

    if time_range == "all":
        visits = list(records)
    else:
        visits = [records[int(index)] for index in frame["source_index"]]

    return {
        "success": True,
        "schemaVersion": config.SCHEMA_VERSION,
        "timestamp": now_ts.isoformat(),
        "data": {
            "visits": visits,
            "players": [player.to_dict() for player in ranked],
            "stats": stats.to_dict(),
        },
    }
