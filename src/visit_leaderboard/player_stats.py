# src/visit_leaderboard/player_stats.py
"""
Per-person statistics: streak, spend, time-of-day habits, favourite places,
level and badges.

Each helper works on plain lists so it can be reused by the presentation
layer; ``build_player`` applies them to one person's slice of the visits frame.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

import pandas as pd

from .models import CanonicalVisit, PersonAggregate
from .parsing import hour_of, round_money
from .rules import RankingRules, classify_level, evaluate_badges, level_progress

TIME_WINDOWS: tuple[tuple[str, tuple[int, ...]], ...] = (
    ("morning", (6, 7, 8, 9, 10, 11)),
    ("lunch", (12, 13, 14)),
    ("afternoon", (15, 16, 17, 18)),
    ("evening", (19, 20, 21, 22)),
    ("night", (23, 0, 1, 2, 3, 4, 5)),
)


def compute_streak(dates: Iterable[str | None]) -> int:
    """Consecutive calendar days ending at the most recent visit date."""
    stamps = pd.to_datetime(
        pd.Series(list(dates), dtype="object"), format="%Y-%m-%d", errors="coerce"
    ).dropna()
    days = stamps.drop_duplicates().sort_values(ascending=False).reset_index(drop=True)
    if days.empty:
        return 0

    gaps = (days.shift() - days).dt.days.iloc[1:]
    breaks = gaps.ne(1).to_numpy()
    if not breaks.any():
        return len(days)
    return int(breaks.argmax()) + 1


def favorite_time_of_day(times: Iterable[str | None]) -> str | None:
    """Busiest time window; ties go to the earlier window in ``TIME_WINDOWS``."""
    hours = [hour_of(value) for value in times if value]
    if not hours:
        return None

    counts = [(label, sum(1 for hour in hours if hour in window)) for label, window in TIME_WINDOWS]
    best_count = max(count for _, count in counts)
    return next(label for label, count in counts if count == best_count)


def count_in_hours(times: Iterable[str | None], hours: frozenset[int]) -> int:
    return sum(1 for value in times if value and hour_of(value) in hours)


def top_locations(locations: Iterable[str | None], limit: int = 3) -> list[tuple[str, int]]:
    """Most visited places; equal counts keep first-seen order."""
    counts = Counter(location for location in locations if location)
    return counts.most_common(limit)


def monthly_average(dates: Iterable[str | None], total_visits: int) -> float:
    """
    Dated visits divided by the number of calendar months they span, both
    endpoint months included. With fewer than two dated visits the raw total
    is returned.
    """
    dated = [value for value in dates if value]
    if len(dated) < 2:
        return float(total_visits)

    first, last = min(dated), max(dated)
    first_year, first_month = int(first[:4]), int(first[5:7])
    last_year, last_month = int(last[:4]), int(last[5:7])
    months = (last_year - first_year) * 12 + (last_month - first_month) + 1
    return round(len(dated) / months, 1)


def avatar_url(name: str, rules: RankingRules) -> str:
    file_name = rules.avatar_files.get(name, rules.default_avatar)
    return f"{rules.avatars_path}{file_name}"


def recent_visits(visits: Iterable[CanonicalVisit], limit: int) -> list[CanonicalVisit]:
    """Newest first; undated visits sink to the end."""
    ordered = sorted(
        visits,
        key=lambda visit: (
            visit.date is not None,
            visit.date or "",
            visit.time or "",
            visit.source_index,
        ),
        reverse=True,
    )
    return ordered[:limit]


def build_player(name: str, group: pd.DataFrame, rules: RankingRules) -> PersonAggregate:
    """Aggregate one person's rows from ``normalize.visits_frame``."""

    total = len(group)
    amounts = group["amount"].astype(float)
    total_spent = round_money(amounts.sum())

    dates = group["date"].dropna().tolist()
    times = group["time"].dropna().tolist()
    locations = group["location"].dropna().tolist()

    streak = compute_streak(dates)
    early = count_in_hours(times, rules.early_hours)
    late = count_in_hours(times, rules.late_hours)

    level = classify_level(total, rules.levels)
    next_level, progress = level_progress(total, level, rules.levels)
    badges = evaluate_badges(
        {
            "total_visits": total,
            "streak": streak,
            "early_visits": early,
            "late_visits": late,
            "total_spent": total_spent,
        },
        rules.badges,
    )

    return PersonAggregate(
        name=name,
        total_visits=total,
        total_spent=total_spent,
        average_spend=round_money(total_spent / total),
        max_spend=round_money(amounts.max()),
        streak=streak,
        level=level,
        badges=badges,
        top_locations=tuple(top_locations(locations, rules.top_locations_limit)),
        first_visit=min(dates) if dates else None,
        last_visit=max(dates) if dates else None,
        monthly_average=monthly_average(dates, total),
        favorite_time=favorite_time_of_day(times),
        locations_count=len(set(locations)),
        notes_count=int(group["note"].notna().sum()),
        early_visits=early,
        late_visits=late,
        avatar=avatar_url(name, rules),
        next_level=next_level,
        level_progress=progress,
        recent_visits=tuple(recent_visits(group["visit"].tolist(), rules.recent_visits_limit)),
    )
