"""Convenience exports for the visit leaderboard pipeline."""

from .parsing import coerce_amount, format_date, parse_amount, parse_date
from .pipeline import build_ranking, sort_players
from .rules import default_rules, rules_from_tables

__all__ = [
    "build_ranking",
    "coerce_amount",
    "default_rules",
    "format_date",
    "parse_amount",
    "parse_date",
    "rules_from_tables",
    "sort_players",
]
