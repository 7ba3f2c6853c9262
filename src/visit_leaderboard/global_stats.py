# src/visit_leaderboard/global_stats.py
"""Cross-person rollups: the canonical ranking, spend leaders and calendar counts."""

from __future__ import annotations

from typing import Any, Callable, Iterable

import numpy as np
import pandas as pd

from .models import GlobalSummary, PersonAggregate
from .parsing import round_money


def rank_players(players: Iterable[PersonAggregate]) -> list[PersonAggregate]:
    """Most visits first; equal counts keep first-appearance order."""
    return sorted(players, key=lambda player: player.total_visits, reverse=True)


def week_numbers(stamps: pd.Series) -> pd.DataFrame:
    """
    ``year`` and ``week`` for each timestamp, where
    ``week = ceil((day_of_year + weekday_of_jan_1) / 7)`` and weekdays count
    from Sunday = 0.
    """
    years = stamps.dt.year
    jan_first = stamps.dt.normalize() - pd.to_timedelta(stamps.dt.dayofyear - 1, unit="D")
    jan_first_weekday = (jan_first.dt.dayofweek + 1) % 7
    weeks = np.ceil((stamps.dt.dayofyear + jan_first_weekday) / 7).astype(int)
    return pd.DataFrame({"year": years.astype(int), "week": weeks}, index=stamps.index)


def week_key(moment: pd.Timestamp) -> tuple[int, int]:
    row = week_numbers(pd.Series([moment])).iloc[0]
    return int(row["year"]), int(row["week"])


def weekly_record(stamps: pd.Series) -> dict[str, int] | None:
    """Busiest (year, week) bucket; ties go to the earliest week."""
    if stamps.empty:
        return None
    counts = week_numbers(stamps).groupby(["year", "week"]).size()
    year, week = counts.idxmax()
    return {"year": int(year), "week": int(week), "visits": int(counts.max())}


def monthly_visit_count(stamps: pd.Series, now: pd.Timestamp) -> int:
    return int(((stamps.dt.year == now.year) & (stamps.dt.month == now.month)).sum())


def weekly_visit_count(stamps: pd.Series, now: pd.Timestamp) -> int:
    if stamps.empty:
        return 0
    year, week = week_key(now)
    weeks = week_numbers(stamps)
    return int(((weeks["year"] == year) & (weeks["week"] == week)).sum())


def top_by(
    ranked: list[PersonAggregate], metric: Callable[[PersonAggregate], float]
) -> PersonAggregate | None:
    """Linear scan for the maximum; ties go to the higher-ranked person."""
    best: PersonAggregate | None = None
    for player in ranked:
        if best is None or metric(player) > metric(best):
            best = player
    return best


def _leader(
    ranked: list[PersonAggregate],
    metric: Callable[[PersonAggregate], float],
    field: str,
) -> dict[str, Any] | None:
    best = top_by(ranked, metric)
    if best is None or metric(best) <= 0:
        return None
    return {"name": best.name, field: metric(best)}


def summarize(
    frame: pd.DataFrame,
    ranked: list[PersonAggregate],
    now: pd.Timestamp,
    skipped: int = 0,
) -> GlobalSummary:
    """Global figures for the visits in ``frame`` (see ``normalize.visits_frame``)."""

    total_visits = len(frame)
    total_spent = round_money(frame["amount"].astype(float).sum()) if total_visits else 0.0
    stamps = frame["date_ts"].dropna()
    dates = frame["date"].dropna()

    by_spent = sorted(ranked, key=lambda player: player.total_spent, reverse=True)
    by_average = sorted(ranked, key=lambda player: player.average_spend, reverse=True)

    return GlobalSummary(
        total_visits=total_visits,
        total_players=len(ranked),
        total_spent=total_spent,
        average_spend=round_money(total_spent / total_visits) if total_visits else 0.0,
        most_visits=tuple(player.name for player in ranked),
        most_spent=tuple(player.name for player in by_spent),
        highest_average_spend=tuple(player.name for player in by_average),
        monthly_visits=monthly_visit_count(stamps, now),
        weekly_visits=weekly_visit_count(stamps, now),
        weekly_record=weekly_record(stamps),
        top_player=ranked[0].name if ranked else None,
        top_spender=_leader(ranked, lambda player: player.total_spent, "totalSpent"),
        top_average_spender=_leader(ranked, lambda player: player.average_spend, "averageSpend"),
        best_streak=_leader(ranked, lambda player: player.streak, "streak"),
        start_date=str(dates.min()) if not dates.empty else None,
        skipped_visits=skipped,
        undated_visits=total_visits - len(stamps),
        last_update=now.isoformat(),
    )
