"""Interactive TuneTrail window using pygame."""

from __future__ import annotations

import argparse
import time
from typing import Dict, List, Optional, Sequence, Tuple

import pygame

from ..attempts import AttemptLog
from ..config import Directories, load_catalog, open_attempt_log, resolve_directories
from ..levels import LevelCatalog
from . import layout
from .toolkit import TuneTrailUI

STEP_DELAY = 0.3
HOME_BUTTON_SIZE: Tuple[int, int] = (96, 40)


class TuneTrailApp:
    """Window with a level picker, the game view and the parent report."""

    def __init__(
        self,
        *,
        kid_id: int,
        directories: Optional[Directories] = None,
        catalog: Optional[LevelCatalog] = None,
        attempt_log: Optional[AttemptLog] = None,
        screen_size: Tuple[int, int] = (520, 640),
    ) -> None:
        pygame.init()
        pygame.display.set_caption("TuneTrail")
        self.screen = pygame.display.set_mode(screen_size)
        self.clock = pygame.time.Clock()
        default_font = pygame.font.get_default_font()
        self.font = pygame.font.Font(default_font, 16)
        self.title_font = pygame.font.Font(default_font, 24)

        self.directories = directories or resolve_directories()
        self.catalog = catalog or load_catalog(self.directories)
        self.attempt_log = attempt_log or open_attempt_log(self.directories)
        self.kid_id = kid_id

        self.mode: str = "home"
        self.view: Optional[TuneTrailUI] = None
        self.home_buttons: List[Tuple[pygame.Rect, Tuple[int, int]]] = []
        self.report_button = pygame.Rect(0, 0, 0, 0)
        self.next_step_at = 0.0
        self.report_rates: Dict[int, float] = {}
        self._build_home_buttons()

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------
    def _build_home_buttons(self) -> None:
        self.home_buttons = []
        margin = layout.BOARD_OUTER_PADDING * 2
        y = 80
        for level in self.catalog.levels():
            x = margin + 100
            for game in self.catalog.games(level):
                rect = pygame.Rect(x, y, *HOME_BUTTON_SIZE)
                self.home_buttons.append((rect, (level, game)))
                x += HOME_BUTTON_SIZE[0] + layout.BUTTON_SPACING
            y += HOME_BUTTON_SIZE[1] + layout.SECTION_SPACING * 2
        self.report_button = pygame.Rect(margin, y + 20, 220, HOME_BUTTON_SIZE[1])

    def open_game(self, level: int, game: int) -> None:
        config = self.catalog.lookup(level, game)
        self.view = TuneTrailUI(
            config,
            level=level,
            game=game,
            surface=pygame.Surface(layout.compute_geometry().window),
            attempt_log=self.attempt_log,
            kid_id=self.kid_id,
        )
        pygame.display.set_caption(f"TuneTrail - Level {level} Game {game}")
        self.mode = "play"

    def open_report(self) -> None:
        self.report_rates = self.attempt_log.success_rates(self.kid_id)
        self.mode = "report"

    def home_title(self) -> str:
        return f"Welcome to TuneTrail, Kid #{self.kid_id}!"

    def go_home(self) -> None:
        if self.view is not None and self.view.running:
            return
        self.view = None
        self.mode = "home"
        pygame.display.set_caption("TuneTrail")

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def draw(self) -> None:
        self.screen.fill(layout.BACKGROUND_COLOR)
        if self.mode == "play" and self.view is not None:
            self.screen.blit(self.view.render(), (0, 0))
        elif self.mode == "report":
            self._draw_report()
        else:
            self._draw_home()
        pygame.display.flip()

    def _draw_button(self, rect: pygame.Rect, text: str) -> None:
        pygame.draw.rect(self.screen, layout.BUTTON_COLOR, rect, border_radius=8)
        label = self.font.render(text, True, layout.BUTTON_TEXT_COLOR)
        self.screen.blit(label, label.get_rect(center=rect.center))

    def _draw_home(self) -> None:
        title = self.title_font.render(self.home_title(), True, layout.TEXT_COLOR)
        self.screen.blit(title, (layout.BOARD_OUTER_PADDING * 2, 24))
        seen_levels = set()
        for rect, (level, game) in self.home_buttons:
            if level not in seen_levels:
                seen_levels.add(level)
                label = self.font.render(f"Level {level}", True, layout.TEXT_COLOR)
                self.screen.blit(label, (layout.BOARD_OUTER_PADDING * 2, rect.y + 10))
            self._draw_button(rect, f"Game {game}")
        self._draw_button(self.report_button, "Parent progress report")

    def _draw_report(self) -> None:
        rates = self.report_rates
        x = layout.BOARD_OUTER_PADDING * 2
        title = self.title_font.render(f"Report for Kid #{self.kid_id}", True, layout.TEXT_COLOR)
        self.screen.blit(title, (x, 24))
        if not rates:
            label = self.font.render("No progress recorded yet.", True, layout.TEXT_COLOR)
            self.screen.blit(label, (x, 80))
            return
        chart_top = 80
        chart_height = 260
        bar_width = 48
        baseline = chart_top + chart_height
        pygame.draw.line(
            self.screen,
            layout.GRID_LINE_COLOR,
            (x, baseline),
            (x + len(rates) * (bar_width * 2), baseline),
            2,
        )
        for index, level in enumerate(sorted(rates)):
            rate = rates[level]
            height = int(chart_height * rate)
            bar = pygame.Rect(x + index * bar_width * 2 + bar_width // 2, baseline - height, bar_width, height)
            pygame.draw.rect(self.screen, layout.BAR_COLOR, bar)
            label = self.font.render(f"L{level}", True, layout.TEXT_COLOR)
            self.screen.blit(label, label.get_rect(midtop=(bar.centerx, baseline + 6)))
            text = self.font.render(f"Level {level}: {int(rate * 100)}% success", True, layout.TEXT_COLOR)
            self.screen.blit(text, (x, baseline + 40 + index * 24))

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            raise SystemExit
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            self.go_home()
            return
        if self.mode == "home":
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                for rect, (level, game) in self.home_buttons:
                    if rect.collidepoint(event.pos):
                        self.open_game(level, game)
                        return
                if self.report_button.collidepoint(event.pos):
                    self.open_report()
            return
        if self.mode == "report":
            if event.type == pygame.MOUSEBUTTONDOWN:
                self.go_home()
            return
        if self.view is None:
            return
        if self.view.last_outcome is not None and event.type in (pygame.MOUSEBUTTONDOWN, pygame.KEYDOWN):
            self.view.acknowledge()
            return
        self.view.process_events([event])

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def update(self, now: float) -> None:
        if self.view is None or not self.view.running:
            self.next_step_at = now + STEP_DELAY
            return
        if now >= self.next_step_at:
            self.view.advance()
            self.next_step_at = now + STEP_DELAY

    def run(self) -> None:
        while True:
            for event in pygame.event.get():
                try:
                    self.handle_event(event)
                except SystemExit:
                    pygame.quit()
                    return
            self.update(time.perf_counter())
            self.draw()
            self.clock.tick(60)


def run(kid_id: int) -> None:
    """Entry point helper that instantiates and runs the UI."""

    app = TuneTrailApp(kid_id=kid_id)
    app.run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="TuneTrail UI launcher")
    parser.add_argument("--kid", type=int, required=True, help="Kid id attached to recorded attempts.")
    args = parser.parse_args(list(argv) if argv is not None else None)
    run(kid_id=args.kid)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    main()
