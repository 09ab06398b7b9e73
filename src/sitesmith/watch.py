# src/sitesmith/watch.py
"""Poll the source tree and re-run the transforms bound to changed files."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .logs import get_logger
from .types import PathConfig, SiteConfig, Transform
from .utils import glob_files, matches_glob, plural

ChangeKind = Literal["created", "modified", "deleted"]

# (watch glob relative to the source root, transform name)
Binding = tuple[str, str]


@dataclass(frozen=True, order=True)
class ChangeEvent:
    path: Path
    kind: ChangeKind


def make_bindings(paths: PathConfig) -> list[Binding]:
    return [(glob, name) for name, globs in paths.watch.items() for glob in globs]


def snapshot(
    root: Path, patterns: Sequence[str], *, ignore: Sequence[Path] = ()
) -> dict[Path, int]:
    """Return {file: mtime_ns} for every file under `root` matching a pattern.

    Files inside any `ignore` directory (e.g. the build output) are skipped.
    """
    mtimes: dict[Path, int] = {}
    for pattern in patterns:
        for path in glob_files(root, pattern):
            if path in mtimes or any(path.is_relative_to(d) for d in ignore):
                continue
            try:
                mtimes[path] = path.stat().st_mtime_ns
            except FileNotFoundError:
                continue  # removed between glob and stat
    return mtimes


def poll_changes(
    root: Path,
    patterns: Sequence[str],
    *,
    interval: float,
    ignore: Sequence[Path] = (),
    stop: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[list[ChangeEvent]]:
    """Yield one sorted batch of events per poll that saw any change.

    Patterns are re-expanded on every tick so new files are picked up.
    """
    logger = get_logger()
    mtimes = snapshot(root, patterns, ignore=ignore)
    logger.trace("[WATCH] tracking %d file(s) under %s", len(mtimes), root)

    while stop is None or not stop.is_set():
        sleep(interval)
        current = snapshot(root, patterns, ignore=ignore)

        events: list[ChangeEvent] = []
        for path, mtime in current.items():
            old = mtimes.get(path)
            if old is None:
                events.append(ChangeEvent(path, "created"))
            elif mtime != old:
                events.append(ChangeEvent(path, "modified"))
        events.extend(ChangeEvent(path, "deleted") for path in mtimes.keys() - current)

        mtimes = current
        if events:
            yield sorted(events)


class Watcher:
    def __init__(
        self,
        config: SiteConfig,
        transforms: Mapping[str, Transform],
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.transforms = transforms
        self.bindings = make_bindings(config["paths"])
        self._sleep = sleep
        self._stop = threading.Event()

    def affected(self, events: Sequence[ChangeEvent]) -> list[str]:
        """Names of the transforms bound to any of `events`, in binding order."""
        root = self.config["paths"].src_root
        rels = [e.path.relative_to(root) for e in events if e.path.is_relative_to(root)]
        names: list[str] = []
        for glob, name in self.bindings:
            if name in names or name not in self.transforms:
                continue
            if any(matches_glob(rel, glob) for rel in rels):
                names.append(name)
        return names

    def dispatch(self, events: Sequence[ChangeEvent]) -> list[str]:
        """Re-run each affected transform once; failures don't stop the watch."""
        logger = get_logger()
        names = self.affected(events)
        logger.info(
            "🔁 Detected %d change%s → rebuilding: %s",
            len(events),
            plural(events),
            ", ".join(names) or "nothing",
        )
        for event in events:
            logger.debug("   %s %s", event.kind, event.path)

        for name in names:
            try:
                self.transforms[name](self.config)
            except Exception as e:  # noqa: BLE001
                logger.error("Rebuild of %r failed: %s", name, e)  # noqa: TRY400
        return names

    def run(self) -> None:
        logger = get_logger()
        paths = self.config["paths"]
        interval = self.config["watch_interval"]
        logger.info(
            "👀 Watching %s (interval=%.2fs)... Press Ctrl+C to stop.",
            paths.src_root,
            interval,
        )
        batches = poll_changes(
            paths.src_root,
            [glob for glob, _ in self.bindings],
            interval=interval,
            ignore=[paths.dest_root],
            stop=self._stop,
            sleep=self._sleep,
        )
        for batch in batches:
            self.dispatch(batch)

    def stop(self) -> None:
        self._stop.set()
