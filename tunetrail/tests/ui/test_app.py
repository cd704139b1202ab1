from __future__ import annotations

from pathlib import Path

import pytest

from tunetrail.attempts import AttemptLog, AttemptRecord
from tunetrail.config import DATA_ENV_VAR, LEVEL_ENV_VAR, SOLUTIONS_ENV_VAR
from tunetrail.levels import DEFAULT_CATALOG
from tunetrail.ui.main import STEP_DELAY, TuneTrailApp, main


@pytest.fixture
def app(pygame_module, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TuneTrailApp:
    monkeypatch.setenv(DATA_ENV_VAR, str(tmp_path))
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)
    monkeypatch.delenv(SOLUTIONS_ENV_VAR, raising=False)
    return TuneTrailApp(attempt_log=AttemptLog(tmp_path / "attempts.csv"), kid_id=2)


def click(pygame, pos):
    return pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=pos)


def key(pygame, code):
    return pygame.event.Event(pygame.KEYDOWN, key=code)


def test_home_lists_every_game(app):
    assert app.mode == "home"
    assert [pair for _, pair in app.home_buttons] == DEFAULT_CATALOG.keys()
    app.draw()


def test_play_loop_steps_with_delay_and_records(pygame_module, app):
    pygame = pygame_module
    rect, _ = app.home_buttons[0]
    app.handle_event(click(pygame, rect.center))

    assert app.mode == "play"
    assert (app.view.level, app.view.game) == (1, 1)

    for code in (pygame.K_RIGHT, pygame.K_UP, pygame.K_UP, pygame.K_RIGHT,
                 pygame.K_RIGHT, pygame.K_RIGHT, pygame.K_UP, pygame.K_UP):
        app.handle_event(key(pygame, code))
    app.update(0.0)
    app.handle_event(key(pygame, pygame.K_RETURN))
    assert app.view.running

    app.update(0.1)
    assert app.view.moves == 0
    app.update(STEP_DELAY)
    assert app.view.moves == 1

    now = STEP_DELAY
    while app.view.running:
        now += STEP_DELAY
        app.update(now)
        app.draw()

    assert app.view.last_outcome.success
    records = app.attempt_log.records()
    assert len(records) == 1
    assert records[0].kid_id == 2

    app.handle_event(key(pygame, pygame.K_SPACE))
    assert app.view.last_outcome is None
    assert len(app.view.program) == 0

    app.handle_event(key(pygame, pygame.K_ESCAPE))
    assert app.mode == "home"
    assert app.view is None


def test_escape_is_ignored_while_running(pygame_module, app):
    pygame = pygame_module
    app.open_game(2, 1)
    app.handle_event(key(pygame, pygame.K_LEFT))
    app.handle_event(key(pygame, pygame.K_RETURN))

    app.handle_event(key(pygame, pygame.K_ESCAPE))

    assert app.mode == "play"


def test_report_mode(pygame_module, app):
    pygame = pygame_module
    app.handle_event(click(pygame, app.report_button.center))
    assert app.mode == "report"
    app.draw()

    app.handle_event(click(pygame, (1, 1)))
    assert app.mode == "home"


def test_home_title_names_the_active_kid(app):
    assert app.home_title() == "Welcome to TuneTrail, Kid #2!"


def test_report_rates_are_read_when_the_report_opens(pygame_module, app, monkeypatch: pytest.MonkeyPatch):
    app.attempt_log.append(AttemptRecord(1, 2, 1, 1, True, 8, 100))
    app.attempt_log.append(AttemptRecord(2, 2, 1, 2, False, 3, 100))
    app.attempt_log.append(AttemptRecord(3, 7, 2, 1, True, 6, 100))

    app.open_report()
    assert app.mode == "report"
    assert app.report_rates == {1: 0.5}

    reads = []
    monkeypatch.setattr(app.attempt_log, "records", lambda: reads.append(1) or [])
    app.draw()
    app.draw()
    assert reads == []


def test_launcher_requires_kid(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 2
    assert "--kid" in capsys.readouterr().err
