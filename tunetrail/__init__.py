"""TuneTrail package."""

from .attempts import AttemptLog, AttemptRecord, MalformedRecordError, aggregate
from .game import Command, MazeConfig, MazeRun, Program, RunOutcome, execute
from .levels import DEFAULT_CATALOG, LevelCatalog, NotFoundError, lookup
from .ui import TuneTrailUI

__all__ = [
    "AttemptLog",
    "AttemptRecord",
    "Command",
    "DEFAULT_CATALOG",
    "LevelCatalog",
    "MalformedRecordError",
    "MazeConfig",
    "MazeRun",
    "NotFoundError",
    "Program",
    "RunOutcome",
    "TuneTrailUI",
    "aggregate",
    "execute",
    "lookup",
]
