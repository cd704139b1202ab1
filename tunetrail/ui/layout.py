"""Layout constants for the TuneTrail UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ..game import GRID_SIZE, Command

Rect = Tuple[int, int, int, int]

# Tile metrics
CELL_SIZE: int = 48
BOARD_OUTER_PADDING: int = 16
SECTION_SPACING: int = 12

# Palette and program strip metrics
PALETTE_TILE_SIZE: int = 56
PALETTE_SPACING: int = 12
PROGRAM_TILE_SIZE: int = 32
PROGRAM_TILE_SPACING: int = 4
BUTTON_HEIGHT: int = 36
BUTTON_SPACING: int = 12
STATUS_HEIGHT: int = 24

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Tuple[int, int, int] = (225, 245, 254)
BOARD_BACKGROUND_COLOR: Tuple[int, int, int] = (176, 190, 197)
OPEN_CELL_COLOR: Tuple[int, int, int] = (245, 245, 245)
WALL_COLOR: Tuple[int, int, int] = (69, 90, 100)
GRID_LINE_COLOR: Tuple[int, int, int] = (158, 158, 158)
GOAL_COLOR: Tuple[int, int, int] = (255, 213, 79)
NOTE_COLOR: Tuple[int, int, int] = (121, 85, 72)
PLAYER_COLOR: Tuple[int, int, int] = (229, 57, 53)
STRIP_BACKGROUND_COLOR: Tuple[int, int, int] = (224, 224, 224)
BUTTON_COLOR: Tuple[int, int, int] = (98, 0, 238)
BUTTON_DISABLED_COLOR: Tuple[int, int, int] = (189, 189, 189)
TEXT_COLOR: Tuple[int, int, int] = (33, 33, 33)
BUTTON_TEXT_COLOR: Tuple[int, int, int] = (255, 255, 255)
WARNING_COLOR: Tuple[int, int, int] = (255, 160, 0)
ERROR_COLOR: Tuple[int, int, int] = (211, 47, 47)
SUCCESS_COLOR: Tuple[int, int, int] = (46, 125, 50)
BAR_COLOR: Tuple[int, int, int] = (66, 165, 245)

COMMAND_COLORS: Dict[Command, Tuple[int, int, int]] = {
    Command.STEP: (66, 165, 245),
    Command.UP: (171, 71, 188),
    Command.DOWN: (255, 167, 38),
    Command.LEFT: (102, 187, 106),
}

PALETTE_ORDER = (Command.STEP, Command.UP, Command.DOWN, Command.LEFT)
BUTTONS = ("reset", "undo", "start")


@dataclass(frozen=True)
class GameGeometry:
    """Pixel rectangles for the regions of the game view."""

    board: Rect
    cell_size: int
    palette: Dict[Command, Rect]
    strip: Rect
    buttons: Dict[str, Rect]
    status: Rect
    window: Tuple[int, int]

    def cell_rect(self, cell: Tuple[int, int]) -> Rect:
        row, col = cell
        x, y, _, _ = self.board
        return (x + col * self.cell_size, y + row * self.cell_size, self.cell_size, self.cell_size)

    def cell_center(self, cell: Tuple[int, int]) -> Tuple[int, int]:
        x, y, w, h = self.cell_rect(cell)
        return x + w // 2, y + h // 2

    def strip_capacity(self) -> int:
        return max(1, (self.strip[2] - PROGRAM_TILE_SPACING) // (PROGRAM_TILE_SIZE + PROGRAM_TILE_SPACING))


def _contains(rect: Rect, pos: Tuple[int, int]) -> bool:
    x, y, w, h = rect
    return x <= pos[0] < x + w and y <= pos[1] < y + h


def hit_test(geometry: GameGeometry, pos: Tuple[int, int]):
    """Return ``("command", Command)``, ``("button", name)`` or ``None``."""

    for command, rect in geometry.palette.items():
        if _contains(rect, pos):
            return "command", command
    for name, rect in geometry.buttons.items():
        if _contains(rect, pos):
            return "button", name
    return None


def compute_geometry(cell_size: int = CELL_SIZE) -> GameGeometry:
    """Compute the rectangles for rendering the game view."""

    board_size = GRID_SIZE * cell_size
    palette_width = len(PALETTE_ORDER) * PALETTE_TILE_SIZE + (len(PALETTE_ORDER) - 1) * PALETTE_SPACING
    content_width = max(board_size, palette_width)

    x = BOARD_OUTER_PADDING
    y = BOARD_OUTER_PADDING
    board = (x + (content_width - board_size) // 2, y, board_size, board_size)
    y += board_size + SECTION_SPACING

    status = (x, y, content_width, STATUS_HEIGHT)
    y += STATUS_HEIGHT + SECTION_SPACING

    palette: Dict[Command, Rect] = {}
    tile_x = x + (content_width - palette_width) // 2
    for command in PALETTE_ORDER:
        palette[command] = (tile_x, y, PALETTE_TILE_SIZE, PALETTE_TILE_SIZE)
        tile_x += PALETTE_TILE_SIZE + PALETTE_SPACING
    y += PALETTE_TILE_SIZE + SECTION_SPACING

    strip_height = PROGRAM_TILE_SIZE + 2 * PROGRAM_TILE_SPACING
    strip = (x, y, content_width, strip_height)
    y += strip_height + SECTION_SPACING

    buttons: Dict[str, Rect] = {}
    button_width = (content_width - (len(BUTTONS) - 1) * BUTTON_SPACING) // len(BUTTONS)
    button_x = x
    for name in BUTTONS:
        buttons[name] = (button_x, y, button_width, BUTTON_HEIGHT)
        button_x += button_width + BUTTON_SPACING
    y += BUTTON_HEIGHT

    window = (content_width + 2 * BOARD_OUTER_PADDING, y + BOARD_OUTER_PADDING)
    return GameGeometry(
        board=board,
        cell_size=cell_size,
        palette=palette,
        strip=strip,
        buttons=buttons,
        status=status,
        window=window,
    )
