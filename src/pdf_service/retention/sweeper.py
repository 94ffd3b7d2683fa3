import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

logger = logging.getLogger(__name__)


class EntryOutcome(str, Enum):
    DELETED = "deleted"
    RETAINED = "retained"
    VANISHED = "vanished"
    FAILED = "failed"


@dataclass
class SweepReport:
    deleted: list[Path] = field(default_factory=list)
    retained: int = 0
    vanished: int = 0
    failed: list[tuple[Path, str]] = field(default_factory=list)
    skipped_dirs: list[Path] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    def record(self, path: Path, outcome: EntryOutcome, error: str | None = None) -> None:
        if outcome is EntryOutcome.DELETED:
            self.deleted.append(path)
        elif outcome is EntryOutcome.RETAINED:
            self.retained += 1
        elif outcome is EntryOutcome.VANISHED:
            self.vanished += 1
        else:
            self.failed.append((path, error or "unknown error"))


class RetentionSweeper:
    """Deletes direct entries of the managed directories older than the retention window.

    A file qualifies when its age is strictly greater than the window; a file
    exactly at the boundary is kept. Nothing is locked: entries removed by a
    concurrent sweep or a user delete are reported as vanished, and any other
    per-entry error is logged and reported without aborting the sweep.
    """

    def __init__(self, directories: Iterable[str | Path], *, clock: Callable[[], float] = time.time) -> None:
        self._directories = [Path(d) for d in directories]
        self._clock = clock

    @property
    def directories(self) -> list[Path]:
        return list(self._directories)

    def sweep(self, retention_minutes: float) -> SweepReport:
        if retention_minutes < 0:
            raise ValueError("retention_minutes must not be negative")
        retention_ms = retention_minutes * 60 * 1000
        now = self._clock()
        report = SweepReport()

        for directory in self._directories:
            try:
                entries = list(os.scandir(directory))
            except FileNotFoundError:
                report.skipped_dirs.append(directory)
                continue
            except OSError as e:
                logger.warning("Cannot list %s: %s", directory, e)
                report.skipped_dirs.append(directory)
                continue

            for entry in entries:
                path = Path(entry.path)
                outcome, error = self._sweep_entry(entry, now, retention_ms)
                report.record(path, outcome, error)

        if report.deleted_count:
            logger.info("Cleanup complete: %d files deleted", report.deleted_count)
        else:
            logger.info("Cleanup complete: no old files to delete")
        return report

    def _sweep_entry(self, entry: os.DirEntry, now: float, retention_ms: float) -> tuple[EntryOutcome, str | None]:
        try:
            if entry.is_dir(follow_symlinks=False):
                return EntryOutcome.RETAINED, None
            age_ms = (now - entry.stat(follow_symlinks=False).st_mtime) * 1000
            if age_ms <= retention_ms:
                return EntryOutcome.RETAINED, None
            os.unlink(entry.path)
        except FileNotFoundError:
            return EntryOutcome.VANISHED, None
        except OSError as e:
            logger.warning("Error processing file %s: %s", entry.name, e)
            return EntryOutcome.FAILED, str(e)
        logger.info("Deleted old file: %s", entry.name)
        return EntryOutcome.DELETED, None
