"""Attempt records, the append-only attempt log and per-level statistics."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .game import RunOutcome

logger = logging.getLogger(__name__)

LOG_FILENAME = "attempts.csv"
# timestamp,kidId,level,game,success,moves,timeMs
FIELD_COUNT = 7


class MalformedRecordError(ValueError):
    """Raised when an attempt record cannot be interpreted."""


@dataclass(frozen=True)
class AttemptRecord:
    """Persisted summary of one completed run."""

    timestamp: int
    kid_id: int
    level: int
    game: int
    success: bool
    moves: int
    elapsed_ms: int

    def to_line(self) -> str:
        success = "true" if self.success else "false"
        return (
            f"{self.timestamp},{self.kid_id},{self.level},{self.game},"
            f"{success},{self.moves},{self.elapsed_ms}"
        )

    @classmethod
    def from_line(cls, line: str) -> "AttemptRecord":
        parts = [part.strip() for part in line.strip().split(",")]
        if len(parts) < FIELD_COUNT:
            raise MalformedRecordError(f"Expected {FIELD_COUNT} fields, got {len(parts)}: {line!r}")
        try:
            return cls(
                timestamp=int(parts[0]),
                kid_id=int(parts[1]),
                level=int(parts[2]),
                game=int(parts[3]),
                success=parts[4].lower() == "true",
                moves=int(parts[5]),
                elapsed_ms=int(parts[6]),
            )
        except ValueError as exc:
            raise MalformedRecordError(f"Unreadable attempt line {line!r}") from exc


@dataclass(frozen=True)
class LevelStats:
    level: int
    attempts: int
    successes: int

    @property
    def success_rate(self) -> float:
        if self.attempts <= 0:
            return 0.0
        return self.successes / self.attempts


def record_from_outcome(
    outcome: RunOutcome,
    *,
    kid_id: int,
    level: int,
    game: int,
    elapsed_ms: int,
    timestamp: Optional[int] = None,
) -> AttemptRecord:
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return AttemptRecord(
        timestamp=int(timestamp),
        kid_id=int(kid_id),
        level=int(level),
        game=int(game),
        success=bool(outcome.success),
        moves=outcome.moves_executed,
        elapsed_ms=max(0, int(elapsed_ms)),
    )


def _record_level(record: AttemptRecord) -> int:
    level = record.level
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    if isinstance(level, str):
        try:
            return int(level.strip())
        except ValueError as exc:
            raise MalformedRecordError(f"Level is not an integer: {level!r}") from exc
    raise MalformedRecordError(f"Level is not an integer: {level!r}")


def _record_success(record: AttemptRecord) -> bool:
    success = record.success
    if isinstance(success, bool):
        return success
    if isinstance(success, str):
        return success.strip().lower() == "true"
    raise MalformedRecordError(f"Success flag is not a boolean: {success!r}")


def level_stats(records: Iterable[AttemptRecord]) -> Dict[int, LevelStats]:
    """Group records by level, skipping any whose level or success flag is unreadable."""

    totals: Dict[int, int] = {}
    successes: Dict[int, int] = {}
    for record in records:
        try:
            level = _record_level(record)
            success = _record_success(record)
        except MalformedRecordError as exc:
            logger.debug("Skipping attempt record: %s", exc)
            continue
        totals[level] = totals.get(level, 0) + 1
        if success:
            successes[level] = successes.get(level, 0) + 1
    return {
        level: LevelStats(level=level, attempts=total, successes=successes.get(level, 0))
        for level, total in sorted(totals.items())
        if total > 0
    }


def aggregate(records: Iterable[AttemptRecord]) -> Dict[int, float]:
    """Return ``{level: success_rate}`` for every level with at least one attempt."""

    return {level: stats.success_rate for level, stats in level_stats(records).items()}


def for_kid(records: Iterable[AttemptRecord], kid_id: int) -> Iterator[AttemptRecord]:
    for record in records:
        if record.kid_id == kid_id:
            yield record


def format_report(rates: Mapping[int, float], kid_id: Optional[int]) -> str:
    """Plain-text progress summary suitable for sharing."""

    if kid_id is None:
        lines = ["TuneTrail progress for all kids"]
    else:
        lines = [f"TuneTrail progress for Kid #{kid_id}"]
    if not rates:
        lines.append("No progress recorded yet.")
    else:
        for level in sorted(rates):
            percent = int(rates[level] * 100)
            lines.append(f"Level {level}: {percent}% success")
    return "\n".join(lines) + "\n"


class AttemptLog:
    """Append-only CSV file holding one line per completed run."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def exists(self) -> bool:
        return self.path.exists()

    def append(self, record: AttemptRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(record.to_line() + "\n")
        logger.info(
            "Recorded attempt kid=%s level=%s game=%s success=%s",
            record.kid_id,
            record.level,
            record.game,
            record.success,
        )

    def read_lines(self) -> List[str]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8")
        return [line for line in text.splitlines() if line.strip()]

    def records(self) -> List[AttemptRecord]:
        """Snapshot of all readable records; malformed lines are dropped."""

        records: List[AttemptRecord] = []
        for number, line in enumerate(self.read_lines(), start=1):
            try:
                records.append(AttemptRecord.from_line(line))
            except MalformedRecordError as exc:
                logger.debug("Dropping line %d of %s: %s", number, self.path, exc)
        return records

    def success_rates(self, kid_id: Optional[int] = None) -> Dict[int, float]:
        records: Iterable[AttemptRecord] = self.records()
        if kid_id is not None:
            records = list(for_kid(records, kid_id))
        return aggregate(records)
