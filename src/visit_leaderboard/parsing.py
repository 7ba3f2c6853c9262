# src/visit_leaderboard/parsing.py
"""
Parsers for the locale-formatted values found in raw visit exports.

Dates arrive as ``D/M/YYYY``, ``D-M-YYYY``, ``YYYY-M-D`` or as a form
timestamp such as ``08/01/2026 11.51.35``; amounts arrive as free text
(``"10,50€"``). Every parser returns either the canonical value or an
:class:`Unparseable` marker so callers can tell "explicitly zero" from
"unknown" before coercing to a default.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any

import numpy as np

from . import config


@dataclass(frozen=True)
class Unparseable:
    """Marker returned when a raw value matches none of the recognized shapes."""

    raw: Any
    reason: str


_DMY_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DMY_DASH_RE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_YMD_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_TIME_RE = re.compile(r"^(\d{1,2})[.:](\d{1,2})(?:[.:](\d{1,2}))?$")

_AMOUNT_STRIP_RE = re.compile(r"[^\d,.\-]")
_LEADING_NUMBER_RE = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")

_CENT = Decimal("0.01")


def parse_date(value: Any) -> str | Unparseable:
    """Return ``YYYY-MM-DD`` for a recognized date (or timestamp) string."""
    if value is None:
        return Unparseable(value, "missing")
    if isinstance(value, datetime):
        return _checked_date(value.date(), value)
    if isinstance(value, date):
        return _checked_date(value, value)

    text = str(value).strip()
    if not text:
        return Unparseable(value, "empty")

    parts = text.split()
    if len(parts) == 2 and not isinstance(parse_time(parts[1]), Unparseable):
        text = parts[0]
    elif len(parts) != 1:
        return Unparseable(value, "unrecognized date format")

    match = _DMY_SLASH_RE.match(text) or _DMY_DASH_RE.match(text)
    if match:
        day, month, year = (int(group) for group in match.groups())
    else:
        match = _YMD_RE.match(text)
        if not match:
            return Unparseable(value, "unrecognized date format")
        year, month, day = (int(group) for group in match.groups())

    try:
        parsed = date(year, month, day)
    except ValueError:
        return Unparseable(value, "impossible calendar date")
    return _checked_date(parsed, value)


def _checked_date(parsed: date, raw: Any) -> str | Unparseable:
    if not config.MIN_YEAR <= parsed.year <= config.MAX_YEAR:
        return Unparseable(raw, "year out of range")
    return parsed.isoformat()


def format_date(value: Any) -> str:
    """Like :func:`parse_date` but hands back the input unchanged when unrecognized."""
    parsed = parse_date(value)
    if isinstance(parsed, Unparseable):
        return "" if value is None else str(value)
    return parsed


def parse_time(value: Any) -> str | Unparseable:
    """
    Return ``HH:MM`` from ``H:M[:S]`` or ``H.M[.S]``.

    A leading date separated by whitespace is ignored, so the time part of a
    form timestamp can be passed in whole.
    """
    if value is None:
        return Unparseable(value, "missing")
    if isinstance(value, datetime):
        return f"{value.hour:02d}:{value.minute:02d}"

    parts = str(value).strip().split()
    if not parts:
        return Unparseable(value, "empty")

    match = _TIME_RE.match(parts[-1].replace(".", ":"))
    if not match:
        return Unparseable(value, "unrecognized time format")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return Unparseable(value, "time out of range")
    return f"{hour:02d}:{minute:02d}"


def hour_of(time_text: str) -> int:
    return int(time_text.split(":", 1)[0])


def round_money(amount: float) -> float:
    """Round half-up to cents (``2.675 -> 2.68``)."""
    exact = Decimal(repr(float(amount)))
    context = Context(prec=max(28, exact.adjusted() + 3))
    return float(exact.quantize(_CENT, rounding=ROUND_HALF_UP, context=context))


def parse_amount(value: Any) -> float | Unparseable:
    """
    Parse a free-form currency amount.

    Everything except digits, ``,``, ``.`` and ``-`` is dropped, commas become
    decimal points, and the leading number is read. Negative, non-finite or
    implausibly large (above ``config.MAX_AMOUNT``) results are rejected.
    """
    if value is None or isinstance(value, bool):
        return Unparseable(value, "missing")

    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            text = _AMOUNT_STRIP_RE.sub("", str(value)).replace(",", ".")
            match = _LEADING_NUMBER_RE.match(text)
            if not match:
                return Unparseable(value, "no numeric content")
            number = float(match.group())
    except (OverflowError, ValueError):
        return Unparseable(value, "not a representable number")

    if not np.isfinite(number):
        return Unparseable(value, "not finite")
    if number < 0:
        return Unparseable(value, "negative amount")
    if number > config.MAX_AMOUNT:
        return Unparseable(value, "amount above cap")
    # abs() folds "-0" into 0.0
    return round_money(abs(number))


def coerce_amount(value: Any) -> float:
    parsed = parse_amount(value)
    return 0.0 if isinstance(parsed, Unparseable) else parsed
