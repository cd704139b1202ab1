"""Built-in maze catalog plus loaders for level and solution files.

The grid is 5x5 with ``(0, 0)`` at the top-left; cells are ``(row, col)``.
Mazes are authored by listing their walkable cells; walls are everything else.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from .game import GRID_SIZE, Cell, MazeConfig, execute, parse_program


Key = Tuple[int, int]

ALL_CELLS: FrozenSet[Cell] = frozenset(
    (row, col) for row in range(GRID_SIZE) for col in range(GRID_SIZE)
)


class NotFoundError(LookupError):
    """Raised when no maze is defined for a ``(level, game)`` pair."""

    def __init__(self, level: object, game: object):
        super().__init__(f"No maze defined for level {level}, game {game}")
        self.level = level
        self.game = game


def walls_from_open(open_cells: Iterable[Cell]) -> FrozenSet[Cell]:
    return ALL_CELLS - frozenset(tuple(cell) for cell in open_cells)


def _maze(
    start: Cell,
    goal: Cell,
    open_cells: Iterable[Cell],
    notes: Iterable[Cell],
    max_moves: int,
) -> MazeConfig:
    return MazeConfig(
        start=start,
        goal=goal,
        walls=walls_from_open(open_cells),
        notes=frozenset(notes),
        max_moves=max_moves,
    )


# Level 1 teaches plain movement, level 2 forces LEFT and DOWN, level 3 adds
# tight snakes and level 4 combines everything.
_BUILTIN: Dict[Key, MazeConfig] = {
    (1, 1): _maze(
        (4, 0), (0, 4),
        [(4, 0), (4, 1), (3, 1), (2, 1), (2, 2), (2, 3), (2, 4), (1, 4), (0, 4)],
        [(2, 2), (1, 4)],
        12,
    ),
    (1, 2): _maze(
        (4, 0), (0, 4),
        [(4, 0), (3, 0), (2, 0), (2, 1), (2, 2), (1, 2), (1, 3), (1, 4), (0, 4)],
        [(3, 0), (1, 3)],
        11,
    ),
    (1, 3): _maze(
        (4, 0), (0, 4),
        [(4, 0), (4, 1), (4, 2), (3, 2), (2, 2), (2, 3), (2, 4), (1, 4), (0, 4)],
        [(4, 1), (2, 3)],
        10,
    ),
    (2, 1): _maze(
        (2, 4), (4, 0),
        [(2, 4), (2, 3), (2, 2), (3, 2), (4, 2), (4, 1), (4, 0)],
        [(2, 2), (4, 1)],
        9,
    ),
    (2, 2): _maze(
        (1, 4), (3, 0),
        [(1, 4), (1, 3), (2, 3), (3, 3), (3, 2), (3, 1), (3, 0)],
        [(1, 3), (3, 2)],
        10,
    ),
    (2, 3): _maze(
        (0, 4), (4, 0),
        [(0, 4), (1, 4), (2, 4), (2, 3), (2, 2), (2, 1), (2, 0), (3, 0), (4, 0)],
        [(2, 3), (2, 1)],
        11,
    ),
    (3, 1): _maze(
        (4, 0), (0, 4),
        [(4, 0), (3, 0), (2, 0), (1, 0), (1, 1), (1, 2), (0, 2), (0, 3), (0, 4)],
        [(1, 1), (0, 3)],
        12,
    ),
    (3, 2): _maze(
        (4, 0), (0, 4),
        [(4, 0), (4, 1), (3, 1), (3, 2), (3, 3), (2, 3), (1, 3), (0, 3), (0, 4)],
        [(3, 2), (1, 3)],
        11,
    ),
    (3, 3): _maze(
        (4, 0), (0, 4),
        [(4, 0), (4, 1), (4, 2), (4, 3), (3, 3), (2, 3), (1, 3), (0, 3), (0, 4)],
        [(4, 2), (2, 3)],
        10,
    ),
    (4, 1): _maze(
        (4, 0), (0, 4),
        [
            (4, 0), (3, 0), (2, 0), (2, 1), (2, 2), (2, 3), (2, 4),
            (1, 4), (0, 4), (0, 3), (1, 3),
        ],
        [(2, 1), (2, 3), (1, 3)],
        14,
    ),
    (4, 2): _maze(
        (4, 0), (0, 4),
        [(4, 0), (4, 1), (4, 2), (3, 2), (2, 2), (1, 2), (1, 3), (1, 4), (0, 4)],
        [(4, 1), (1, 3), (2, 2)],
        13,
    ),
    (4, 3): _maze(
        (3, 4), (1, 0),
        [(3, 4), (3, 3), (3, 2), (3, 1), (3, 0), (2, 0), (1, 0), (1, 1), (1, 2)],
        [(3, 2), (1, 1)],
        12,
    ),
}


class LevelCatalog:
    """Read-only table of mazes keyed by ``(level, game)``."""

    def __init__(self, entries: Mapping[Key, MazeConfig]):
        self._entries: Dict[Key, MazeConfig] = dict(entries)

    def lookup(self, level: int, game: int) -> MazeConfig:
        try:
            return self._entries[(level, game)]
        except (KeyError, TypeError) as exc:
            raise NotFoundError(level, game) from exc

    def keys(self) -> List[Key]:
        return sorted(self._entries)

    def levels(self) -> List[int]:
        return sorted({level for level, _ in self._entries})

    def games(self, level: int) -> List[int]:
        return sorted(game for lvl, game in self._entries if lvl == level)

    def items(self) -> Iterator[Tuple[Key, MazeConfig]]:
        for key in self.keys():
            yield key, self._entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


DEFAULT_CATALOG = LevelCatalog(_BUILTIN)


def lookup(level: int, game: int) -> MazeConfig:
    """Return the built-in maze for ``(level, game)``."""

    return DEFAULT_CATALOG.lookup(level, game)


def _cells(raw: Iterable[Iterable[int]]) -> List[Cell]:
    return [tuple(int(v) for v in cell) for cell in raw]


class LevelLoader:
    """Load maze definitions stored as JSON."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def names(self) -> List[str]:
        return sorted(path.stem for path in self.root.glob("*.json"))

    def load(self, name: str) -> Tuple[Key, MazeConfig]:
        path = self.root / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        data = json.loads(path.read_text(encoding="utf-8"))
        return self._parse_level(data)

    def load_catalog(self) -> LevelCatalog:
        entries: Dict[Key, MazeConfig] = {}
        for name in self.names():
            key, config = self.load(name)
            if key in entries:
                raise ValueError(f"Duplicate maze for level {key[0]}, game {key[1]} in {name}")
            entries[key] = config
        return LevelCatalog(entries)

    def _parse_level(self, data: Dict) -> Tuple[Key, MazeConfig]:
        try:
            key = (int(data["level"]), int(data["game"]))
            start = tuple(int(v) for v in data["start"])
            goal = tuple(int(v) for v in data["goal"])
            max_moves = int(data["max_moves"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid level definition: {exc}") from exc
        if "open" in data:
            walls = walls_from_open(_cells(data["open"]))
        else:
            walls = frozenset(_cells(data.get("walls", [])))
        config = MazeConfig(
            start=start,
            goal=goal,
            walls=walls,
            notes=frozenset(_cells(data.get("notes", []))),
            max_moves=max_moves,
        )
        return key, config


class SolutionValidator:
    """Check that a stored program produces the expected run outcome."""

    def __init__(self, catalog: LevelCatalog, solutions_root: Path):
        self.catalog = catalog
        self.solutions_root = Path(solutions_root)

    def names(self) -> List[str]:
        return sorted(path.stem for path in self.solutions_root.glob("*.json"))

    def load_solution(self, name: str) -> Dict:
        path = self.solutions_root / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        return json.loads(path.read_text(encoding="utf-8"))

    def validate(self, name: str, solution: Optional[Dict] = None) -> bool:
        data = solution if solution is not None else self.load_solution(name)
        config = self.catalog.lookup(int(data["level"]), int(data["game"]))
        outcome = execute(config, parse_program(data.get("program", [])))
        if outcome.success != bool(data.get("expected_success", True)):
            return False
        expected_moves = data.get("expected_moves")
        if expected_moves is not None and outcome.moves_executed != int(expected_moves):
            return False
        return True
