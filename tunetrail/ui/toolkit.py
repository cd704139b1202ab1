"""Small pygame driven game view that can run headless.

Rendering stays deterministic so the view can be exercised in automated tests
using the SDL ``dummy`` video driver.
"""

from __future__ import annotations

import os
import time
from typing import Callable, Iterable, Optional, Tuple

from ..attempts import AttemptLog, record_from_outcome
from ..game import GRID_SIZE, Command, MazeConfig, MazeRun, Program, RunFrame, RunOutcome
from . import layout


# Pygame is imported lazily in ``ensure_pygame`` so test environments can
# control the SDL configuration before the first import.
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
        _PYGAME.font.init()
    return _PYGAME


KEY_COMMANDS = {
    "right": Command.STEP,
    "left": Command.LEFT,
    "up": Command.UP,
    "down": Command.DOWN,
}


class TuneTrailUI:
    """Game view for one maze: board, command palette, program strip, buttons."""

    def __init__(
        self,
        config: MazeConfig,
        *,
        level: int,
        game: int,
        cell_size: int = layout.CELL_SIZE,
        surface=None,
        use_display: bool = False,
        attempt_log: Optional[AttemptLog] = None,
        kid_id: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if attempt_log is not None and kid_id is None:
            raise ValueError("kid_id is required when attempts are recorded")
        pygame = ensure_pygame()
        self.config = config
        self.level = level
        self.game = game
        self.kid_id = kid_id
        self.attempt_log = attempt_log
        self.clock = clock
        self.geometry = layout.compute_geometry(cell_size)
        self.surface = surface or pygame.Surface(self.geometry.window)
        self.screen = None
        if use_display:
            self.screen = pygame.display.set_mode(self.geometry.window)
        self.program = Program()
        self.run: Optional[MazeRun] = None
        self.last_outcome: Optional[RunOutcome] = None
        self._run_started = 0.0
        # Default font keeps rendering deterministic across environments.
        self.font = pygame.font.Font(pygame.font.get_default_font(), 14)

    # ------------------------------------------------------------------
    # State
    @property
    def running(self) -> bool:
        return self.run is not None

    @property
    def position(self) -> Tuple[int, int]:
        if self.run is not None:
            return self.run.position
        return self.config.start

    @property
    def moves(self) -> int:
        return self.run.moves if self.run is not None else 0

    @property
    def collected(self):
        return self.run.collected if self.run is not None else frozenset()

    # ------------------------------------------------------------------
    # Input handling
    def process_events(self, events: Iterable[object]) -> None:
        pygame = ensure_pygame()
        for event in events:
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._handle_click(event.pos)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

    def _handle_click(self, pos: Tuple[int, int]) -> None:
        hit = layout.hit_test(self.geometry, pos)
        if hit is None:
            return
        kind, value = hit
        if kind == "command":
            self.program.append(value)
        elif value == "start":
            self.start_run()
        elif value == "undo":
            self.program.undo()
        elif value == "reset":
            self.reset()

    def _handle_key(self, key: int) -> None:
        pygame = ensure_pygame()
        name = pygame.key.name(key)
        if name in KEY_COMMANDS:
            self.program.append(KEY_COMMANDS[name])
        elif name == "backspace":
            self.program.undo()
        elif name in ("return", "space"):
            self.start_run()

    # ------------------------------------------------------------------
    # Running
    def start_run(self) -> bool:
        if self.running or not len(self.program):
            return False
        self.last_outcome = None
        self.program.running = True
        self.run = MazeRun(self.config, self.program.commands)
        self._run_started = self.clock()
        return True

    def advance(self) -> Optional[RunFrame]:
        """Execute one command of the active run; finishes the run when done."""

        if self.run is None:
            return None
        frame = self.run.step()
        if self.run.finished:
            self._finish()
        return frame

    def run_all(self) -> Optional[RunOutcome]:
        while self.running:
            self.advance()
        return self.last_outcome

    def _finish(self) -> None:
        if self.run is None:
            return
        outcome = self.run.outcome()
        elapsed_ms = int((self.clock() - self._run_started) * 1000)
        self.last_outcome = outcome
        self.run = None
        self.program.running = False
        if self.attempt_log is not None:
            self.attempt_log.append(
                record_from_outcome(
                    outcome,
                    kid_id=self.kid_id,
                    level=self.level,
                    game=self.game,
                    elapsed_ms=elapsed_ms,
                )
            )

    def acknowledge(self) -> None:
        """Dismiss the outcome: success clears the program, failure keeps it."""

        if self.last_outcome is None:
            return
        if self.last_outcome.success:
            self.program.clear()
        self.last_outcome = None

    def reset(self) -> None:
        if self.running:
            return
        self.last_outcome = None
        self.program.clear()

    # ------------------------------------------------------------------
    # Rendering helpers
    def render(self):
        pygame = ensure_pygame()
        self.surface.fill(layout.BACKGROUND_COLOR)
        self._draw_board()
        self._draw_status()
        self._draw_palette()
        self._draw_strip()
        self._draw_buttons()
        if self.screen:
            self.screen.blit(self.surface, (0, 0))
            pygame.display.flip()
        return self.surface

    def _shown_state(self):
        if self.run is None and self.last_outcome is not None:
            return (
                self.last_outcome.position,
                self.last_outcome.moves_executed,
                self.last_outcome.notes_collected,
            )
        return self.position, self.moves, self.collected

    def _draw_board(self) -> None:
        pygame = ensure_pygame()
        pygame.draw.rect(self.surface, layout.BOARD_BACKGROUND_COLOR, pygame.Rect(*self.geometry.board))
        position, _, collected = self._shown_state()
        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                cell = (row, col)
                rect = pygame.Rect(*self.geometry.cell_rect(cell))
                if cell in self.config.walls:
                    color = layout.WALL_COLOR
                elif cell == self.config.goal:
                    color = layout.GOAL_COLOR
                else:
                    color = layout.OPEN_CELL_COLOR
                self.surface.fill(color, rect)
                pygame.draw.rect(self.surface, layout.GRID_LINE_COLOR, rect, 1)
                if cell in self.config.notes and cell not in collected:
                    radius = max(3, self.geometry.cell_size // 6)
                    pygame.draw.circle(self.surface, layout.NOTE_COLOR, rect.center, radius)
        player_rect = pygame.Rect(*self.geometry.cell_rect(position))
        pygame.draw.circle(
            self.surface,
            layout.PLAYER_COLOR,
            player_rect.center,
            max(4, self.geometry.cell_size // 3),
        )

    def _draw_status(self) -> None:
        _, moves, collected = self._shown_state()
        max_moves = self.config.max_moves
        if moves > max_moves:
            color = layout.ERROR_COLOR
        elif moves >= max_moves - 1:
            color = layout.WARNING_COLOR
        else:
            color = layout.TEXT_COLOR
        notes_left = len(self.config.notes) - len(collected)
        text = f"Level {self.level} - Game {self.game}   Moves: {moves} / {max_moves}   Notes left: {notes_left}"
        if self.last_outcome is not None:
            if self.last_outcome.success:
                text = "Great job! Attempt saved."
                color = layout.SUCCESS_COLOR
            else:
                text = "Not yet - use Undo or Reset to change your program."
                color = layout.ERROR_COLOR
        x, y, _, _ = self.geometry.status
        self.surface.blit(self.font.render(text, True, color), (x, y))

    def _draw_palette(self) -> None:
        pygame = ensure_pygame()
        for command, rect_value in self.geometry.palette.items():
            rect = pygame.Rect(*rect_value)
            color = layout.COMMAND_COLORS[command]
            if self.running:
                color = layout.BUTTON_DISABLED_COLOR
            pygame.draw.rect(self.surface, color, rect, border_radius=12)
            self._draw_centered(command.name, rect, layout.BUTTON_TEXT_COLOR)

    def _draw_strip(self) -> None:
        pygame = ensure_pygame()
        strip = pygame.Rect(*self.geometry.strip)
        pygame.draw.rect(self.surface, layout.STRIP_BACKGROUND_COLOR, strip, border_radius=10)
        commands = self.program.commands
        if not commands:
            self._draw_centered("Add commands in the order you want to run them", strip, layout.TEXT_COLOR)
            return
        capacity = self.geometry.strip_capacity()
        shown = commands if len(commands) <= capacity else commands[: capacity - 1]
        x = strip.x + layout.PROGRAM_TILE_SPACING
        y = strip.y + layout.PROGRAM_TILE_SPACING
        for command in shown:
            tile = pygame.Rect(x, y, layout.PROGRAM_TILE_SIZE, layout.PROGRAM_TILE_SIZE)
            pygame.draw.rect(self.surface, layout.COMMAND_COLORS[command], tile, border_radius=8)
            self._draw_centered(command.symbol, tile, layout.BUTTON_TEXT_COLOR)
            x += layout.PROGRAM_TILE_SIZE + layout.PROGRAM_TILE_SPACING
        if len(shown) < len(commands):
            tile = pygame.Rect(x, y, layout.PROGRAM_TILE_SIZE, layout.PROGRAM_TILE_SIZE)
            self._draw_centered(f"+{len(commands) - len(shown)}", tile, layout.TEXT_COLOR)

    def _draw_buttons(self) -> None:
        pygame = ensure_pygame()
        labels = {"reset": "Reset", "undo": "Undo last", "start": "Start"}
        for name, rect_value in self.geometry.buttons.items():
            rect = pygame.Rect(*rect_value)
            enabled = not self.running and (name != "start" or len(self.program) > 0)
            color = layout.BUTTON_COLOR if enabled else layout.BUTTON_DISABLED_COLOR
            pygame.draw.rect(self.surface, color, rect, border_radius=8)
            self._draw_centered(labels[name], rect, layout.BUTTON_TEXT_COLOR)

    def _draw_centered(self, text: str, rect, color) -> None:
        label = self.font.render(text, True, color)
        label_rect = label.get_rect()
        label_rect.center = rect.center
        self.surface.blit(label, label_rect)


__all__ = ["TuneTrailUI", "ensure_pygame"]
