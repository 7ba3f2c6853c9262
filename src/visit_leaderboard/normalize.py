# src/visit_leaderboard/normalize.py
"""
Map raw visit records (spreadsheet/form exports with Italian, English and
mixed-case headers) onto :class:`CanonicalVisit` and group them by person.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import pandas as pd

from .models import CanonicalVisit
from .parsing import Unparseable, coerce_amount, parse_date, parse_time

# Candidate keys per canonical field, tried in order; first non-empty wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "person": ("Nome", "nome", "name", "Name"),
    "date": ("Data", "data", "date", "Date"),
    "timestamp": ("Informazioni cronologiche", "timestamp", "Timestamp"),
    "time": ("Orario", "orario", "time", "Time"),
    "location": ("Luogo", "luogo", "location", "Location"),
    "amount": (
        "Quanto hai speso?",
        "Quanto hai speso",
        "quanto hai speso",
        "Spesa",
        "spesa",
        "spend",
        "importo",
        "Importo",
        "amount",
    ),
    "note": ("Note", "note", "notes", "Notes"),
}

VISIT_COLUMNS = ["person", "date", "time", "location", "amount", "note", "source_index"]


@dataclass(frozen=True)
class NormalizedVisits:
    visits: list[CanonicalVisit]
    skipped: int


def first_present(record: Mapping[str, Any], keys: Iterable[str]) -> Any | None:
    """Value of the first key holding something other than ``None``/blank text."""
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        return value
    return None


def _text(value: Any | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _resolve_time(raw_time: Any | None, *stamps: Any | None) -> str | Unparseable:
    if raw_time is not None:
        parsed = parse_time(raw_time)
        if not isinstance(parsed, Unparseable):
            return parsed
    # fall back to "date time" stamps; a bare date carries no time
    for stamp in stamps:
        if stamp is None or len(str(stamp).split()) != 2:
            continue
        parsed = parse_time(stamp)
        if not isinstance(parsed, Unparseable):
            return parsed
    return Unparseable(raw_time, "missing")


def normalize_visit(record: Any, index: int = 0) -> CanonicalVisit | None:
    """Canonical form of one raw record, or ``None`` when no person can be resolved."""
    if not isinstance(record, Mapping):
        return None

    person = _text(first_present(record, FIELD_ALIASES["person"]))
    if person is None:
        return None

    raw_date = first_present(record, FIELD_ALIASES["date"])
    raw_timestamp = first_present(record, FIELD_ALIASES["timestamp"])

    parsed_date = parse_date(raw_date)
    if isinstance(parsed_date, Unparseable) and raw_timestamp is not None:
        parsed_date = parse_date(raw_timestamp)
    parsed_time = _resolve_time(
        first_present(record, FIELD_ALIASES["time"]), raw_timestamp, raw_date
    )

    return CanonicalVisit(
        person=person,
        date=None if isinstance(parsed_date, Unparseable) else parsed_date,
        time=None if isinstance(parsed_time, Unparseable) else parsed_time,
        location=_text(first_present(record, FIELD_ALIASES["location"])),
        amount=coerce_amount(first_present(record, FIELD_ALIASES["amount"])),
        note=_text(first_present(record, FIELD_ALIASES["note"])),
        source_index=index,
    )


def normalize_visits(records: Iterable[Any]) -> NormalizedVisits:
    visits: list[CanonicalVisit] = []
    skipped = 0
    for index, record in enumerate(records):
        visit = normalize_visit(record, index)
        if visit is None:
            skipped += 1
            continue
        visits.append(visit)
    return NormalizedVisits(visits=visits, skipped=skipped)


def visits_frame(visits: Iterable[CanonicalVisit]) -> pd.DataFrame:
    """
    One row per canonical visit, in input order.

    Group with ``groupby("person", sort=False)`` so people come out in order of
    first appearance; the ``visit`` column keeps the dataclass for each row.
    """
    rows = [
        {
            "person": visit.person,
            "date": visit.date,
            "time": visit.time,
            "location": visit.location,
            "amount": visit.amount,
            "note": visit.note,
            "source_index": visit.source_index,
            "visit": visit,
        }
        for visit in visits
    ]
    frame = pd.DataFrame(rows, columns=VISIT_COLUMNS + ["visit"])
    frame["date_ts"] = pd.to_datetime(frame["date"], format="%Y-%m-%d", errors="coerce")
    return frame
