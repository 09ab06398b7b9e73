# src/sitesmith/stream.py
"""File-record streams: the plumbing every transform chain is built from.

A chain is a list of steps; each step takes an iterable of FileRecord and
yields FileRecords. Steps are composed with `run_chain()`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from .logs import get_logger
from .sourcemap import SourceMap
from .types import Environment
from .utils import get_glob_root, glob_files, has_glob_chars, matches_glob

Step = Callable[[Iterable["FileRecord"]], Iterator["FileRecord"]]


@dataclass(frozen=True)
class FileRecord:
    path: Path  # absolute; source path until a step renames it
    base: Path  # `relative` is computed against this
    contents: bytes
    source_map: SourceMap | None = None

    @property
    def relative(self) -> Path:
        try:
            return self.path.relative_to(self.base)
        except ValueError:
            return Path(self.path.name)

    @property
    def text(self) -> str:
        return self.contents.decode("utf-8")

    def with_text(self, text: str) -> FileRecord:
        return replace(self, contents=text.encode("utf-8"))


# --------------------------------------------------------------------------- #
# sources
# --------------------------------------------------------------------------- #


def src(
    root: Path,
    patterns: Sequence[str],
    *,
    exclude: Sequence[str] = (),
) -> Iterator[FileRecord]:
    """Yield a record per file under `root` matching any of `patterns`.

    Each record's base is the non-glob prefix of the pattern that matched it,
    so `pages/*.html` yields `index.html` relative paths.
    """
    logger = get_logger()
    seen: set[Path] = set()
    for pattern in patterns:
        base = (
            root / get_glob_root(pattern)
            if has_glob_chars(pattern)
            else (root / pattern).parent
        )
        matches = glob_files(root, pattern)
        if not matches:
            logger.trace("[SRC] no matches for %r under %s", pattern, root)
        for path in matches:
            if path in seen:
                continue
            rel = path.relative_to(root)
            if any(matches_glob(rel, ex) for ex in exclude):
                logger.trace("[SRC] excluded %s", rel)
                continue
            seen.add(path)
            yield FileRecord(path=path, base=base, contents=path.read_bytes())


def src_files(paths: Iterable[Path]) -> Iterator[FileRecord]:
    """Yield records for explicit file paths (e.g. configured libraries)."""
    logger = get_logger()
    for path in paths:
        resolved = path.resolve()
        if not resolved.is_file():
            logger.warning("Library file not found: %s", path)
            continue
        yield FileRecord(
            path=resolved, base=resolved.parent, contents=resolved.read_bytes()
        )


# --------------------------------------------------------------------------- #
# step combinators
# --------------------------------------------------------------------------- #


def passthrough(records: Iterable[FileRecord]) -> Iterator[FileRecord]:
    yield from records


def gated(env: Environment, when: Environment, step: Step) -> Step:
    """Return `step` when `env` is `when`, otherwise a pass-through step."""
    return step if env is when else passthrough


def per_file(fn: Callable[[FileRecord], FileRecord | None]) -> Step:
    """Lift a record → record function into a step. Returning None drops it."""

    def step(records: Iterable[FileRecord]) -> Iterator[FileRecord]:
        for record in records:
            result = fn(record)
            if result is not None:
                yield result

    return step


def run_chain(records: Iterable[FileRecord], steps: Sequence[Step]) -> list[FileRecord]:
    stream: Iterable[FileRecord] = records
    for step in steps:
        stream = step(stream)
    return list(stream)


# --------------------------------------------------------------------------- #
# common steps
# --------------------------------------------------------------------------- #


def init_source_maps(records: Iterable[FileRecord]) -> Iterator[FileRecord]:
    """Attach an identity source map to each record."""
    for record in records:
        smap = SourceMap.identity(
            record.path.name, record.relative.as_posix(), record.text
        )
        yield replace(record, source_map=smap)


def write_source_maps(*, block: bool) -> Step:
    """Append each record's map as an inline sourceMappingURL comment."""

    def step(records: Iterable[FileRecord]) -> Iterator[FileRecord]:
        for record in records:
            if record.source_map is None:
                yield record
                continue
            comment = record.source_map.inline_comment(block=block)
            yield replace(record.with_text(record.text + comment), source_map=None)

    return step


def concat(name: str, *, separator: str = "\n") -> Step:
    """Join all records into one named record, in stream order.

    The result lives beside the first input. Source maps, when present on
    the inputs, are merged with the right line/column offsets.
    """

    def step(records: Iterable[FileRecord]) -> Iterator[FileRecord]:
        items = list(records)
        if not items:
            return
        texts = [r.text for r in items]
        smap = None
        if any(r.source_map is not None for r in items):
            smap = SourceMap.concatenate(
                name, [(r.text, r.source_map) for r in items], separator
            )
        first = items[0]
        yield FileRecord(
            path=first.base / name,
            base=first.base,
            contents=separator.join(texts).encode("utf-8"),
            source_map=smap,
        )

    return step


def dest(out_dir: Path) -> Step:
    """Write each record under `out_dir`, keeping its relative path.

    Yields the records re-pointed at their written location.
    """

    def step(records: Iterable[FileRecord]) -> Iterator[FileRecord]:
        logger = get_logger()
        for record in records:
            target = out_dir / record.relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(record.contents)
            logger.debug("📄 %s → %s", record.relative, target)
            yield replace(record, path=target, base=out_dir)

    return step


def map_text(fn: Callable[[str], str]) -> Step:
    """Lift a text → text function into a step."""
    return per_file(lambda record: record.with_text(fn(record.text)))
