"""Core game logic for the TuneTrail maze."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple


GRID_SIZE = 5

Cell = Tuple[int, int]


def inside_grid(cell: Cell) -> bool:
    row, col = cell
    return 0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE


class Command(Enum):
    """Movement instructions a program is built from."""

    STEP = (0, 1)
    LEFT = (0, -1)
    UP = (-1, 0)
    DOWN = (1, 0)

    @property
    def delta(self) -> Tuple[int, int]:
        return self.value

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @staticmethod
    def from_name(name: str) -> "Command":
        name = name.strip().upper()
        try:
            return Command[name]
        except KeyError as exc:
            raise ValueError(f"Unknown command: {name}") from exc

    def apply(self, cell: Cell) -> Cell:
        return cell[0] + self.value[0], cell[1] + self.value[1]


_SYMBOLS = {
    Command.STEP: "→",
    Command.LEFT: "←",
    Command.UP: "↑",
    Command.DOWN: "↓",
}


class Failure(Enum):
    """Why a run did not succeed."""

    WALL = "wall"
    OUT_OF_BOUNDS = "out_of_bounds"
    MOVE_BUDGET = "move_budget"
    MISSED_NOTES = "missed_notes"
    NOT_AT_GOAL = "not_at_goal"


@dataclass(frozen=True)
class MazeConfig:
    """Immutable definition of one playable level/game variant."""

    start: Cell
    goal: Cell
    walls: FrozenSet[Cell]
    notes: FrozenSet[Cell]
    max_moves: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", tuple(self.start))
        object.__setattr__(self, "goal", tuple(self.goal))
        object.__setattr__(self, "walls", frozenset(tuple(c) for c in self.walls))
        object.__setattr__(self, "notes", frozenset(tuple(c) for c in self.notes))
        cells = [self.start, self.goal, *self.walls, *self.notes]
        outside = [cell for cell in cells if not inside_grid(cell)]
        if outside:
            raise ValueError(f"Cells outside the {GRID_SIZE}x{GRID_SIZE} grid: {outside}")
        if self.start in self.walls:
            raise ValueError(f"Start {self.start} is a wall")
        if self.goal in self.walls:
            raise ValueError(f"Goal {self.goal} is a wall")
        blocked_notes = sorted(self.notes & self.walls)
        if blocked_notes:
            raise ValueError(f"Notes placed on walls: {blocked_notes}")
        if int(self.max_moves) <= 0:
            raise ValueError(f"max_moves must be positive, got {self.max_moves}")

    @property
    def open_cells(self) -> FrozenSet[Cell]:
        return frozenset(
            (row, col)
            for row in range(GRID_SIZE)
            for col in range(GRID_SIZE)
            if (row, col) not in self.walls
        )

    def is_open(self, cell: Cell) -> bool:
        return inside_grid(cell) and cell not in self.walls


@dataclass(frozen=True)
class RunOutcome:
    """Result of executing one program against a maze."""

    final_row: int
    final_col: int
    moves_executed: int
    notes_collected: FrozenSet[Cell]
    success: bool
    failure: Optional[Failure] = None

    @property
    def position(self) -> Cell:
        return self.final_row, self.final_col


@dataclass
class RunFrame:
    """One executed command, as recorded on the run timeline."""

    index: int
    command: Command
    start: Cell
    end: Cell
    moves: int
    note: Optional[Cell] = None
    failure: Optional[Failure] = None

    @property
    def blocked(self) -> bool:
        return self.failure in (Failure.WALL, Failure.OUT_OF_BOUNDS)


class Program:
    """Ordered command list a child edits before pressing start."""

    def __init__(self, commands: Iterable[Command] = ()) -> None:
        self._commands: List[Command] = list(commands)
        self.running = False

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self):
        return iter(self._commands)

    @property
    def commands(self) -> Tuple[Command, ...]:
        return tuple(self._commands)

    def append(self, command: Command) -> bool:
        if self.running:
            return False
        self._commands.append(command)
        return True

    def undo(self) -> bool:
        if self.running or not self._commands:
            return False
        self._commands.pop()
        return True

    def clear(self) -> bool:
        if self.running:
            return False
        self._commands.clear()
        return True


@dataclass
class RunState:
    """Mutable runtime state of a maze run."""

    position: Cell
    index: int = 0
    moves: int = 0
    collected: set = field(default_factory=set)
    failure: Optional[Failure] = None
    stopped: bool = False


class MazeRun:
    """Step-wise interpreter for a program on a single maze."""

    def __init__(self, config: MazeConfig, commands: Sequence[Command]):
        self.config = config
        self.commands: Tuple[Command, ...] = tuple(commands)
        self.reset()

    def reset(self) -> None:
        self.state = RunState(position=self.config.start)
        self.timeline: List[RunFrame] = []

    @property
    def position(self) -> Cell:
        return self.state.position

    @property
    def moves(self) -> int:
        return self.state.moves

    @property
    def collected(self) -> FrozenSet[Cell]:
        return frozenset(self.state.collected)

    @property
    def finished(self) -> bool:
        return self.state.stopped or self.state.index >= len(self.commands)

    def step(self) -> Optional[RunFrame]:
        """Execute the next command, or return ``None`` once the run is over."""

        if self.finished:
            return None
        state = self.state
        command = self.commands[state.index]
        frame = RunFrame(
            index=state.index,
            command=command,
            start=state.position,
            end=state.position,
            moves=state.moves,
        )
        state.index += 1

        candidate = command.apply(state.position)
        if not inside_grid(candidate):
            frame.failure = Failure.OUT_OF_BOUNDS
        elif candidate in self.config.walls:
            frame.failure = Failure.WALL
        if frame.failure is not None:
            state.failure = frame.failure
            state.stopped = True
            self.timeline.append(frame)
            return frame

        state.position = candidate
        state.moves += 1
        frame.end = candidate
        frame.moves = state.moves
        if candidate in self.config.notes and candidate not in state.collected:
            state.collected.add(candidate)
            frame.note = candidate

        if state.moves > self.config.max_moves:
            frame.failure = Failure.MOVE_BUDGET
            state.failure = Failure.MOVE_BUDGET
            state.stopped = True

        self.timeline.append(frame)
        return frame

    def run_to_end(self) -> RunOutcome:
        while self.step() is not None:
            pass
        return self.outcome()

    def outcome(self) -> RunOutcome:
        state = self.state
        failure = state.failure
        if failure is None and state.moves > self.config.max_moves:
            failure = Failure.MOVE_BUDGET
        if failure is None and state.collected != set(self.config.notes):
            failure = Failure.MISSED_NOTES
        if failure is None and state.position != self.config.goal:
            failure = Failure.NOT_AT_GOAL
        row, col = state.position
        return RunOutcome(
            final_row=row,
            final_col=col,
            moves_executed=state.moves,
            notes_collected=frozenset(state.collected),
            success=failure is None,
            failure=failure,
        )


def execute(config: MazeConfig, commands: Sequence[Command]) -> RunOutcome:
    """Run ``commands`` against ``config`` and return the deterministic outcome."""

    return MazeRun(config, commands).run_to_end()


def parse_program(names: Iterable[str]) -> List[Command]:
    return [Command.from_name(name) for name in names]
