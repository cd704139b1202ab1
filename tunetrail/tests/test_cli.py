from __future__ import annotations

import json
from pathlib import Path

import pytest

from tunetrail.attempts import AttemptLog
from tunetrail.cli import bootstrap_directories, main
from tunetrail.config import (
    DATA_ENV_VAR,
    LEVEL_ENV_VAR,
    SOLUTIONS_ENV_VAR,
    Directories,
    load_catalog,
    resolve_directories,
)
from tunetrail.levels import DEFAULT_CATALOG


@pytest.fixture(autouse=True)
def isolated_data_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_root = tmp_path / "data"
    monkeypatch.setenv(DATA_ENV_VAR, str(data_root))
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)
    monkeypatch.delenv(SOLUTIONS_ENV_VAR, raising=False)
    return data_root


def test_resolve_directories_returns_package_defaults(isolated_data_root: Path):
    directories = resolve_directories()

    assert isinstance(directories, Directories)
    assert directories.solutions_root.exists()
    assert directories.level_root is None
    assert directories.attempt_log == isolated_data_root / "attempts.csv"
    assert load_catalog(directories) is DEFAULT_CATALOG


def test_resolve_directories_honours_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    level_dir = tmp_path / "levels"
    solutions_dir = tmp_path / "solutions"
    level_dir.mkdir()
    solutions_dir.mkdir()
    (level_dir / "only.json").write_text(
        json.dumps({"level": 9, "game": 1, "start": [0, 0], "goal": [0, 1], "max_moves": 1}),
        encoding="utf-8",
    )

    monkeypatch.setenv(LEVEL_ENV_VAR, str(level_dir))
    monkeypatch.setenv(SOLUTIONS_ENV_VAR, str(solutions_dir))

    directories = resolve_directories()

    assert directories.level_root == level_dir
    assert directories.solutions_root == solutions_dir
    assert load_catalog(directories).keys() == [(9, 1)]


def test_resolve_directories_errors_on_missing_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(LEVEL_ENV_VAR, str(tmp_path / "missing_levels"))

    with pytest.raises(FileNotFoundError):
        resolve_directories()

    directories = resolve_directories(check_exists=False)
    assert directories.level_root == tmp_path / "missing_levels"


def test_bootstrap_prints_message(capsys: pytest.CaptureFixture[str]):
    directories = bootstrap_directories()
    output = capsys.readouterr().out

    assert "TuneTrail bootstrap" in output
    assert str(directories.data_root) in output
    assert str(directories.solutions_root) in output


def test_cli_lists_levels(capsys: pytest.CaptureFixture[str]):
    exit_code = main(["--list-levels"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Available levels" in output
    assert "level 4 game 3" in output


def test_cli_play_winning_program_records_attempt(isolated_data_root: Path, capsys):
    exit_code = main(["play", "1", "1", "STEP", "UP", "UP", "STEP", "STEP", "STEP", "UP", "UP", "--record", "--kid", "5"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "Great job!" in output
    records = AttemptLog(isolated_data_root / "attempts.csv").records()
    assert len(records) == 1
    assert records[0].kid_id == 5
    assert records[0].success
    assert records[0].moves == 8


def test_cli_play_failure_without_record(isolated_data_root: Path, capsys):
    exit_code = main(["play", "1", "1", "up"])
    output = capsys.readouterr().out

    assert exit_code == 1
    assert "Not yet (wall)" in output
    assert not (isolated_data_root / "attempts.csv").exists()


def test_cli_play_unknown_maze(capsys):
    exit_code = main(["play", "9", "9", "STEP"])

    assert exit_code == 2
    assert "No maze defined for level 9, game 9" in capsys.readouterr().err


def test_cli_play_unknown_command(capsys):
    exit_code = main(["play", "1", "1", "JUMP"])

    assert exit_code == 2
    assert "Unknown command" in capsys.readouterr().err


def test_cli_report(isolated_data_root: Path, capsys):
    main(["play", "1", "1", "UP", "--record", "--kid", "1"])
    main(["play", "1", "2", "UP", "UP", "STEP", "STEP", "UP", "STEP", "STEP", "UP", "--record", "--kid", "1"])
    main(["play", "2", "1", "LEFT", "LEFT", "DOWN", "DOWN", "LEFT", "LEFT", "--record", "--kid", "2"])
    capsys.readouterr()

    assert main(["report", "--kid", "1"]) == 0
    assert capsys.readouterr().out == (
        "TuneTrail progress for Kid #1\n"
        "Level 1: 50% success\n"
    )

    assert main(["report", "--all"]) == 0
    output = capsys.readouterr().out
    assert output.startswith("TuneTrail progress for all kids\n")
    assert "Level 2: 100% success" in output


def test_cli_report_without_log(capsys):
    assert main(["report", "--kid", "3"]) == 0
    assert "No progress recorded yet." in capsys.readouterr().out


def test_cli_validate_all_solutions(capsys):
    exit_code = main(["validate"])
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "12/12 solutions valid" in output


def test_cli_validate_reports_failures(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys):
    (tmp_path / "bad.json").write_text(
        json.dumps({"level": 1, "game": 1, "program": ["UP"]}),
        encoding="utf-8",
    )
    monkeypatch.setenv(SOLUTIONS_ENV_VAR, str(tmp_path))

    exit_code = main(["validate"])

    assert exit_code == 1
    assert "bad: FAILED" in capsys.readouterr().out


def test_cli_validate_reports_unreadable_solutions(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys):
    (tmp_path / "no_game.json").write_text(json.dumps({"level": 1, "program": []}), encoding="utf-8")
    (tmp_path / "not_json.json").write_text("{oops", encoding="utf-8")
    (tmp_path / "unknown_maze.json").write_text(
        json.dumps({"level": 9, "game": 9, "program": ["STEP"]}),
        encoding="utf-8",
    )
    (tmp_path / "bad_command.json").write_text(
        json.dumps({"level": 1, "game": 1, "program": ["JUMP"]}),
        encoding="utf-8",
    )
    monkeypatch.setenv(SOLUTIONS_ENV_VAR, str(tmp_path))

    exit_code = main(["validate"])
    output = capsys.readouterr().out

    assert exit_code == 1
    assert "no_game: FAILED (missing field 'game')" in output
    assert "not_json: FAILED (" in output
    assert "unknown_maze: FAILED (No maze defined for level 9, game 9)" in output
    assert "bad_command: FAILED (Unknown command: JUMP)" in output
    assert "0/4 solutions valid" in output


def test_cli_validate_missing_name(capsys):
    exit_code = main(["validate", "level_1_game_1", "does_not_exist"])
    output = capsys.readouterr().out

    assert exit_code == 1
    assert "level_1_game_1: ok" in output
    assert "does_not_exist: FAILED (no solution file" in output
    assert "1/2 solutions valid" in output


def test_cli_record_requires_kid(isolated_data_root: Path, capsys):
    exit_code = main(["play", "1", "1", "STEP", "--record"])

    assert exit_code == 2
    assert "--kid" in capsys.readouterr().err
    assert not (isolated_data_root / "attempts.csv").exists()


def test_cli_report_requires_kid_or_all(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["report"])

    assert excinfo.value.code == 2
    with pytest.raises(SystemExit):
        main(["report", "--kid", "1", "--all"])
