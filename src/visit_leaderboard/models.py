# src/visit_leaderboard/models.py
"""Value types produced by the leaderboard pipeline and their JSON forms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .rules import BadgeRule, Level


@dataclass(frozen=True)
class CanonicalVisit:
    """One visit after field-name normalization and value parsing."""

    person: str
    date: str | None
    time: str | None
    location: str | None
    amount: float
    note: str | None
    source_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "person": self.person,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "amount": self.amount,
            "note": self.note,
        }


@dataclass(frozen=True)
class PersonAggregate:
    name: str
    total_visits: int
    total_spent: float
    average_spend: float
    max_spend: float
    streak: int
    level: Level
    badges: tuple[BadgeRule, ...]
    top_locations: tuple[tuple[str, int], ...]
    first_visit: str | None
    last_visit: str | None
    monthly_average: float
    favorite_time: str | None
    locations_count: int
    notes_count: int
    early_visits: int
    late_visits: int
    avatar: str
    next_level: Level | None
    level_progress: float
    recent_visits: tuple[CanonicalVisit, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "totalVisits": self.total_visits,
            "totalSpent": self.total_spent,
            "averageSpend": self.average_spend,
            "maxSpend": self.max_spend,
            "streak": self.streak,
            "level": self.level.to_dict(),
            "badges": [badge.to_dict() for badge in self.badges],
            "topLocations": [{"name": name, "count": count} for name, count in self.top_locations],
            "firstVisit": self.first_visit,
            "lastVisit": self.last_visit,
            "monthlyAverage": self.monthly_average,
            "favoriteTime": self.favorite_time,
            "locationsCount": self.locations_count,
            "notesCount": self.notes_count,
            "earlyVisits": self.early_visits,
            "lateVisits": self.late_visits,
            "avatar": self.avatar,
            "nextLevel": (
                {"name": self.next_level.name, "min": self.next_level.min}
                if self.next_level
                else None
            ),
            "levelProgress": self.level_progress,
            "recentVisits": [visit.to_dict() for visit in self.recent_visits],
        }


@dataclass(frozen=True)
class GlobalSummary:
    total_visits: int
    total_players: int
    total_spent: float
    average_spend: float
    most_visits: tuple[str, ...]
    most_spent: tuple[str, ...]
    highest_average_spend: tuple[str, ...]
    monthly_visits: int
    weekly_visits: int
    weekly_record: dict[str, int] | None
    top_player: str | None
    top_spender: dict[str, Any] | None
    top_average_spender: dict[str, Any] | None
    best_streak: dict[str, Any] | None
    start_date: str | None
    skipped_visits: int
    undated_visits: int
    last_update: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalVisits": self.total_visits,
            "totalPlayers": self.total_players,
            "totalSpent": self.total_spent,
            "averageSpend": self.average_spend,
            "rankings": {
                "mostVisits": list(self.most_visits),
                "mostSpent": list(self.most_spent),
                "highestAverageSpend": list(self.highest_average_spend),
            },
            "monthlyVisits": self.monthly_visits,
            "weeklyVisits": self.weekly_visits,
            "weeklyRecord": self.weekly_record,
            "topPlayer": self.top_player,
            "topSpender": self.top_spender,
            "topAverageSpender": self.top_average_spender,
            "bestStreak": self.best_streak,
            "startDate": self.start_date,
            "skippedVisits": self.skipped_visits,
            "undatedVisits": self.undated_visits,
            "lastUpdate": self.last_update,
        }
