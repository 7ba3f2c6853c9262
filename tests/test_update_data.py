from __future__ import annotations

import json
from pathlib import Path

import pytest

from visit_leaderboard.update_data import main, process_file


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_main_writes_leaderboard(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write(
        tmp_path / "visits.json",
        [
            {"Nome": "Fabio", "Informazioni cronologiche": "08/01/2026 11.51.35", "Luogo": "Centro"},
            {"Nome": "Fabio", "data": "07/01/2026", "Luogo": "Centro"},
            {"Nome": "Ale", "data": "07/01/2026"},
        ],
    )
    target = tmp_path / "out" / "players.json"

    main(["--input", str(source), "--output", str(target), "--as_of", "2026-01-08T20:00:00"])

    result = json.loads(target.read_text(encoding="utf-8"))
    assert result["success"] is True
    fabio = result["data"]["players"][0]
    assert fabio["name"] == "Fabio"
    assert fabio["streak"] == 2
    assert fabio["favoriteTime"] == "morning"
    assert result["data"]["stats"]["monthlyVisits"] == 3
    assert "1. Fabio: 2 visits" in capsys.readouterr().out


def test_non_list_payload_exits_with_failure(tmp_path: Path) -> None:
    source = _write(tmp_path / "visits.json", {"Nome": "Fabio"})
    target = tmp_path / "players.json"

    with pytest.raises(SystemExit) as excinfo:
        main(["--input", str(source), "--output", str(target), "--as_of", "2026-01-08"])

    assert excinfo.value.code == 1
    result = json.loads(target.read_text(encoding="utf-8"))
    assert result["success"] is False
    assert "list" in result["error"]
    assert "data" not in result


def test_invalid_json_produces_failed_result(tmp_path: Path) -> None:
    source = tmp_path / "visits.json"
    source.write_text("[{not json", encoding="utf-8")

    result = process_file(source, tmp_path / "players.json", as_of="2026-01-08")
    assert result["success"] is False
    assert str(source) in result["error"]


def test_missing_file_produces_failed_result(tmp_path: Path) -> None:
    result = process_file(tmp_path / "absent.json", tmp_path / "players.json", as_of="2026-01-08")
    assert result["success"] is False
    assert "not found" in result["error"]
    assert (tmp_path / "players.json").exists()


def test_invalid_as_of_is_a_usage_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write(tmp_path / "visits.json", [{"Nome": "Fabio", "data": "07/01/2026"}])
    target = tmp_path / "players.json"

    with pytest.raises(SystemExit) as excinfo:
        main(["--input", str(source), "--output", str(target), "--as_of", "not-a-date"])

    assert excinfo.value.code == 2
    assert "--as_of" in capsys.readouterr().err
    assert not target.exists()
