# src/sitesmith/changes.py
"""Skip inputs whose output is already up to date."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from .logs import get_logger
from .stream import FileRecord


@dataclass(frozen=True)
class ChangeRecord:
    source_path: Path
    dest_path: Path
    dest_mtime_ns: int | None  # None when no output exists yet

    @property
    def is_stale(self) -> bool:
        if self.dest_mtime_ns is None:
            return True
        return self.source_path.stat().st_mtime_ns > self.dest_mtime_ns


class ChangeTracker:
    """Compare each source against its would-be output under `dest_dir`.

    Nothing is persisted: timestamps on disk are the only state, so every
    invocation recomputes its ChangeRecords.
    """

    def __init__(self, dest_dir: Path) -> None:
        self.dest_dir = dest_dir

    def check(self, record: FileRecord) -> ChangeRecord:
        target = self.dest_dir / record.relative
        try:
            mtime: int | None = target.stat().st_mtime_ns
        except FileNotFoundError:
            mtime = None
        return ChangeRecord(record.path, target, mtime)

    def __call__(self, records: Iterable[FileRecord]) -> Iterator[FileRecord]:
        logger = get_logger()
        for record in records:
            change = self.check(record)
            if change.is_stale:
                yield record
            else:
                logger.trace("[CHANGED] up to date: %s", record.relative)
