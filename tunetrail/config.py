"""Resource and data directories resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .attempts import LOG_FILENAME, AttemptLog
from .levels import DEFAULT_CATALOG, LevelCatalog, LevelLoader

DATA_ENV_VAR = "TUNETRAIL_DATA_ROOT"
LEVEL_ENV_VAR = "TUNETRAIL_LEVEL_ROOT"
SOLUTIONS_ENV_VAR = "TUNETRAIL_SOLUTIONS_ROOT"


@dataclass(frozen=True)
class Directories:
    """Bundle with the resolved directories the game reads and writes."""

    data_root: Path
    solutions_root: Path
    level_root: Optional[Path] = None

    @property
    def attempt_log(self) -> Path:
        return self.data_root / LOG_FILENAME


def _default_data_root() -> Path:
    return Path.home() / ".tunetrail"


def _default_solutions_root() -> Path:
    return Path(__file__).resolve().parent / "solutions"


def _read_directory(env_var: str, fallback: Optional[Path]) -> Optional[Path]:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return fallback


def resolve_directories(check_exists: bool = True) -> Directories:
    """Resolve directories using environment variables.

    Parameters
    ----------
    check_exists:
        When *True*, raise :class:`FileNotFoundError` if the solutions directory
        or an explicitly configured level directory is missing. The data
        directory is created lazily when the first attempt is written.
    """

    data_root = _read_directory(DATA_ENV_VAR, _default_data_root())
    solutions_root = _read_directory(SOLUTIONS_ENV_VAR, _default_solutions_root())
    level_root = _read_directory(LEVEL_ENV_VAR, None)

    if check_exists:
        required = [solutions_root] + ([level_root] if level_root is not None else [])
        missing = [path for path in required if not path.exists()]
        if missing:
            missing_str = ", ".join(str(path) for path in missing)
            raise FileNotFoundError(
                f"Required TuneTrail directories do not exist: {missing_str}"
            )

    return Directories(
        data_root=data_root,
        solutions_root=solutions_root,
        level_root=level_root,
    )


def load_catalog(directories: Directories) -> LevelCatalog:
    if directories.level_root is None:
        return DEFAULT_CATALOG
    return LevelLoader(directories.level_root).load_catalog()


def open_attempt_log(directories: Directories) -> AttemptLog:
    return AttemptLog(directories.attempt_log)
