# src/sitesmith/styles.py
"""Stylesheet bundle: concat → sass-glob → sass → media/rem/prefix/minify."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

import sass

from .constants import SASS_ENTRY, STYLE_BUNDLE
from .css_tools import (
    autoprefix,
    expand_glob_imports,
    group_media_queries,
    minify_css,
    px_to_rem,
)
from .logs import get_logger
from .meta import PROGRAM_SCRIPT
from .sourcemap import SourceMap
from .stream import (
    FileRecord,
    Step,
    concat,
    dest,
    gated,
    init_source_maps,
    map_text,
    per_file,
    run_chain,
    src,
    src_files,
    write_source_maps,
)
from .types import Environment, SiteConfig


def _compile_mapped(
    record: FileRecord, include_paths: Sequence[Path], base_dir: Path
) -> tuple[str, SourceMap]:
    """Compile from a temporary entry file so libsass emits a source map.

    The map's entry source is then composed with the record's concat map,
    so generated lines point at the original stylesheets.
    """
    assert record.source_map is not None  # noqa: S101
    base = base_dir.resolve()
    with tempfile.TemporaryDirectory(prefix=f"{PROGRAM_SCRIPT}-sass-") as tmp:
        tmp_dir = Path(tmp).resolve()
        entry = tmp_dir / SASS_ENTRY
        entry.write_text(record.text, encoding="utf-8")
        css, raw_map = sass.compile(
            filename=str(entry),
            include_paths=[str(p) for p in include_paths],
            output_style="expanded",
            source_map_filename=str(tmp_dir / f"{SASS_ENTRY}.map"),
            source_map_contents=True,
            omit_source_map_url=True,
        )

    smap = SourceMap.from_dict(json.loads(raw_map))
    smap.file = record.path.name
    entry_index = None
    for i, source in enumerate(smap.sources):
        resolved = (tmp_dir / source).resolve()
        if resolved == entry:
            entry_index = i
        else:
            smap.sources[i] = Path(os.path.relpath(resolved, base)).as_posix()

    if entry_index is None:
        get_logger().trace("[SASS] entry missing from map sources: %s", smap.sources)
        return css, smap
    return css, smap.compose(entry_index, record.source_map)


def compile_sass(include_paths: Sequence[Path], base_dir: Path) -> Step:
    """Compile to CSS; a compile error drops the bundle for this run only.

    Records carrying a source map get a fresh one from the compiler.
    """

    def apply(record: FileRecord) -> FileRecord | None:
        try:
            if record.source_map is not None:
                css, smap = _compile_mapped(record, include_paths, base_dir)
                return replace(record.with_text(css), source_map=smap)
            css = sass.compile(
                string=record.text,
                include_paths=[str(p) for p in include_paths],
                output_style="expanded",
            )
        except sass.CompileError as e:
            get_logger().error("Sass compilation failed (%s):\n%s", record.relative, e)
            return None
        return record.with_text(css)

    return per_file(apply)


def style_steps(
    env: Environment, base_dir: Path, include_paths: Sequence[Path]
) -> list[Step]:
    dev, prod = Environment.DEVELOPMENT, Environment.PRODUCTION
    return [
        gated(env, dev, init_source_maps),
        concat(STYLE_BUNDLE),
        map_text(lambda text: expand_glob_imports(text, base_dir)),
        compile_sass(include_paths, base_dir),
        gated(env, prod, map_text(group_media_queries)),
        map_text(px_to_rem),
        gated(env, prod, map_text(autoprefix)),
        gated(env, prod, map_text(minify_css)),
        gated(env, dev, write_source_maps(block=True)),
    ]


def build_styles(config: SiteConfig) -> list[Path]:
    paths = config["paths"]
    entry = list(src(paths.src_root, paths.source["css"]))
    if not entry:
        get_logger().debug("No entry stylesheet under %s", paths.src_root)
        return []

    records = [*src_files(paths.style_libs), *entry]
    base_dir = entry[-1].path.parent
    include_paths = list(dict.fromkeys(r.path.parent for r in records))
    steps = [
        *style_steps(config["env"], base_dir, include_paths),
        dest(paths.build["css"]),
    ]
    return [r.path for r in run_chain(records, steps)]
