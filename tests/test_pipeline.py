from __future__ import annotations

import json

import pytest

from visit_leaderboard.pipeline import build_ranking, sort_players
from visit_leaderboard.rules import rules_from_tables

NOW = "2024-02-15T12:00:00"


def _visits() -> list[dict]:
    return [
        {"Nome": "Ann", "data": "01/01/2024", "Luogo": "A", "spesa": "10,50€"},
        {"Nome": "Bob", "data": "14/02/2024", "Luogo": "B", "spesa": "4"},
        {"Nome": "Ann", "data": "02/01/2024", "Luogo": "A"},
        {"Luogo": "nowhere"},
        {"Nome": "Bob", "data": "15/02/2024", "Orario": "23.10"},
        {"Nome": "Bob", "data": "10/02/2024"},
    ]


def test_two_visit_scenario() -> None:
    result = build_ranking(
        [
            {"Nome": "Ann", "data": "01/01/2024", "Luogo": "A"},
            {"Nome": "Ann", "data": "02/01/2024", "Luogo": "A"},
        ],
        NOW,
    )

    assert result["success"] is True
    (ann,) = result["data"]["players"]
    assert ann["name"] == "Ann"
    assert ann["totalVisits"] == 2
    assert ann["streak"] == 2
    assert ann["firstVisit"] == "2024-01-01"
    assert ann["lastVisit"] == "2024-01-02"
    assert ann["topLocations"] == [{"name": "A", "count": 2}]


def test_empty_input_is_a_successful_empty_result() -> None:
    result = build_ranking([], NOW)

    assert result["success"] is True
    assert result["data"]["players"] == []
    assert result["data"]["stats"]["totalVisits"] == 0
    assert result["data"]["stats"]["totalPlayers"] == 0
    assert result["data"]["stats"]["topPlayer"] is None


@pytest.mark.parametrize("amount", ["1" + "0" * 30, 10**400, 1e30])
def test_oversized_amounts_count_as_zero_spend(amount: object) -> None:
    result = build_ranking([{"Nome": "Ann", "spesa": amount, "data": "14/02/2024"}], NOW)

    assert result["success"] is True
    ann = result["data"]["players"][0]
    assert ann["totalSpent"] == 0
    assert result["data"]["stats"]["topSpender"] is None


@pytest.mark.parametrize("time_range", ["all", "week", "month"])
def test_out_of_range_years_are_undated_visits(time_range: str) -> None:
    records = [{"Nome": "Ann", "data": "01/01/0202"}, {"Nome": "Ann", "data": "14/02/2024"}]
    result = build_ranking(records, NOW, time_range=time_range)

    assert result["success"] is True
    ann = result["data"]["players"][0]
    assert ann["firstVisit"] == ann["lastVisit"] == "2024-02-14"
    assert ann["streak"] == 1
    if time_range == "all":
        assert ann["totalVisits"] == 2
        assert result["data"]["stats"]["undatedVisits"] == 1
    else:
        assert ann["totalVisits"] == 1


@pytest.mark.parametrize("payload", [{"Nome": "Ann"}, "visits", None, 42])
def test_malformed_input_is_a_failed_result(payload: object) -> None:
    result = build_ranking(payload, NOW)

    assert result["success"] is False
    assert result["error"]
    assert "data" not in result
    assert result["timestamp"] == "2024-02-15T12:00:00"


def test_visit_counts_add_up_to_named_records() -> None:
    result = build_ranking(_visits(), NOW)
    players = result["data"]["players"]

    assert sum(player["totalVisits"] for player in players) == 5
    assert all(player["totalVisits"] >= 1 for player in players)
    assert [player["name"] for player in players] == ["Bob", "Ann"]
    assert result["data"]["stats"]["skippedVisits"] == 1
    assert len(result["data"]["visits"]) == 6


def test_result_is_json_serializable_and_deterministic() -> None:
    first = build_ranking(_visits(), NOW)
    second = build_ranking(_visits(), NOW)

    assert json.dumps(first) == json.dumps(second)
    assert first["schemaVersion"] == 1
    assert first["data"]["stats"]["lastUpdate"] == "2024-02-15T12:00:00"


def test_month_range_filters_visits_and_players() -> None:
    result = build_ranking(_visits(), NOW, time_range="month")

    players = result["data"]["players"]
    assert [player["name"] for player in players] == ["Bob"]
    assert players[0]["totalVisits"] == 3
    assert [visit["data"] for visit in result["data"]["visits"]] == [
        "14/02/2024",
        "15/02/2024",
        "10/02/2024",
    ]


def test_today_and_week_ranges() -> None:
    today = build_ranking(_visits(), NOW, time_range="today")
    week = build_ranking(_visits(), NOW, time_range="week")

    assert today["data"]["stats"]["totalVisits"] == 1
    assert week["data"]["stats"]["totalVisits"] == 2


def test_unknown_range_is_a_caller_error() -> None:
    with pytest.raises(ValueError):
        build_ranking(_visits(), NOW, time_range="year")


def test_custom_rules_are_used() -> None:
    rules = rules_from_tables(
        [{"min": 0, "max": 1, "name": "New"}, {"min": 2, "max": None, "name": "Known"}],
        {"PAIR": {"name": "Pair", "metric": "total_visits", "threshold": 2}},
    )
    result = build_ranking(_visits(), NOW, rules=rules)
    bob = result["data"]["players"][0]

    assert bob["level"]["name"] == "Known"
    assert [badge["key"] for badge in bob["badges"]] == ["PAIR"]


def test_sort_players_for_display() -> None:
    from visit_leaderboard.global_stats import rank_players
    from visit_leaderboard.normalize import normalize_visits, visits_frame
    from visit_leaderboard.player_stats import build_player
    from visit_leaderboard.rules import default_rules

    frame = visits_frame(
        normalize_visits(
            _visits() + [{"Nome": "Cleo"}, {"Nome": "Dan", "data": "20/01/2024"}]
        ).visits
    )
    ranked = rank_players(
        build_player(name, group, default_rules())
        for name, group in frame.groupby("person", sort=False)
    )

    assert [p.name for p in sort_players(ranked)] == ["Bob", "Ann", "Cleo", "Dan"]
    assert [p.name for p in sort_players(ranked, "streak")] == ["Bob", "Ann", "Dan", "Cleo"]
    assert [p.name for p in sort_players(ranked, "lastVisit")] == ["Bob", "Dan", "Ann", "Cleo"]
    with pytest.raises(ValueError):
        sort_players(ranked, "name")
