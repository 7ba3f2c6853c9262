# src/visit_leaderboard/rules.py
"""
Level and badge tables, passed into the pipeline as one explicit value.

``default_rules()`` builds the tables shipped in ``config``; tests and callers
that want different thresholds build their own with ``rules_from_tables``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from . import config

BADGE_METRICS = ("total_visits", "streak", "early_visits", "late_visits", "total_spent")


@dataclass(frozen=True)
class LevelBand:
    min: int
    max: int | None
    name: str
    color: str


@dataclass(frozen=True)
class Level:
    number: int
    name: str
    color: str
    min: int
    max: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "name": self.name,
            "color": self.color,
            "min": self.min,
            "max": self.max,
        }


BASELINE_LEVEL = Level(number=1, name="Principiante", color="#808080", min=0, max=None)


@dataclass(frozen=True)
class BadgeRule:
    key: str
    name: str
    metric: str
    threshold: float
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "metric": self.metric,
            "threshold": self.threshold,
            "color": self.color,
        }


@dataclass(frozen=True)
class RankingRules:
    levels: tuple[LevelBand, ...]
    badges: tuple[BadgeRule, ...]
    early_hours: frozenset[int] = frozenset(config.EARLY_BIRD_HOURS)
    late_hours: frozenset[int] = frozenset(config.NIGHT_OWL_HOURS)
    top_locations_limit: int = config.TOP_LOCATIONS_LIMIT
    recent_visits_limit: int = config.RECENT_VISITS_LIMIT
    avatars_path: str = config.AVATARS_PATH
    default_avatar: str = config.DEFAULT_AVATAR
    avatar_files: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        mins = [band.min for band in self.levels]
        if mins != sorted(mins):
            raise ValueError(f"Level bands must be ordered by ascending min, got {mins}")
        unknown = sorted({badge.metric for badge in self.badges} - set(BADGE_METRICS))
        if unknown:
            raise ValueError(
                f"Unknown badge metrics: {unknown}. Available metrics: {list(BADGE_METRICS)}"
            )
        if self.top_locations_limit < 0 or self.recent_visits_limit < 0:
            raise ValueError("Display limits must be non-negative.")


def rules_from_tables(
    levels: Iterable[Mapping[str, Any]],
    badges: Mapping[str, Mapping[str, Any]],
    **overrides: Any,
) -> RankingRules:
    """Build rules from the plain dict tables used in ``config``."""

    bands = tuple(
        LevelBand(
            min=int(row["min"]),
            max=None if row.get("max") is None else int(row["max"]),
            name=str(row["name"]),
            color=str(row.get("color", "#808080")),
        )
        for row in levels
    )
    badge_rules = tuple(
        BadgeRule(
            key=key,
            name=str(row["name"]),
            metric=str(row["metric"]),
            threshold=row["threshold"],
            color=str(row.get("color", "#808080")),
        )
        for key, row in badges.items()
    )
    return RankingRules(levels=bands, badges=badge_rules, **overrides)


def default_rules() -> RankingRules:
    return rules_from_tables(config.LEVELS, config.BADGES, avatar_files=dict(config.AVATAR_FILES))


def _level_at(levels: tuple[LevelBand, ...], index: int) -> Level:
    band = levels[index]
    return Level(number=index + 1, name=band.name, color=band.color, min=band.min, max=band.max)


def classify_level(total_visits: int, levels: tuple[LevelBand, ...]) -> Level:
    """Return the band with the highest ``min`` not above ``total_visits``."""
    for index in range(len(levels) - 1, -1, -1):
        if total_visits >= levels[index].min:
            return _level_at(levels, index)
    return BASELINE_LEVEL


def level_progress(
    total_visits: int, level: Level, levels: tuple[LevelBand, ...]
) -> tuple[Level | None, float]:
    """Next level (``None`` at the top) and percent progress through the current band."""

    index = level.number - 1
    in_table = level is not BASELINE_LEVEL and 0 <= index < len(levels)
    if not in_table:
        next_level = _level_at(levels, 0) if levels and levels[0].min > total_visits else None
    elif index + 1 < len(levels):
        next_level = _level_at(levels, index + 1)
    else:
        next_level = None

    if next_level is None:
        return None, 100.0

    span = (level.max if level.max is not None else next_level.min) - level.min
    if span <= 0:
        return next_level, 100.0
    percent = min((total_visits - level.min) / span * 100, 100.0)
    return next_level, round(max(percent, 0.0), 1)


def evaluate_badges(
    metrics: Mapping[str, float], badges: tuple[BadgeRule, ...]
) -> tuple[BadgeRule, ...]:
    """Every badge whose metric meets its threshold; badges do not exclude each other."""
    return tuple(badge for badge in badges if metrics.get(badge.metric, 0) >= badge.threshold)
