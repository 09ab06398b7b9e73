# src/sitesmith/scripts.py
"""Script bundle: concat → (production) transpile → minify."""

from __future__ import annotations

from pathlib import Path

import dukpy
from calmjs.parse import es5
from calmjs.parse.exceptions import ECMASyntaxError
from calmjs.parse.unparsers.es5 import minify_print

from .constants import SCRIPT_BUNDLE, SCRIPT_SEPARATOR
from .logs import get_logger
from .stream import (
    FileRecord,
    Step,
    concat,
    dest,
    gated,
    init_source_maps,
    per_file,
    run_chain,
    src,
    src_files,
    write_source_maps,
)
from .types import Environment, SiteConfig

BABEL_PRESETS = ["es2015"]


def _transpile(record: FileRecord) -> FileRecord | None:
    try:
        result = dukpy.babel_compile(record.text, presets=BABEL_PRESETS)
    except dukpy.JSRuntimeError as e:
        get_logger().error("Babel failed on %s:\n%s", record.relative, e)
        return None
    return record.with_text(result["code"])


def _minify(record: FileRecord) -> FileRecord | None:
    """Strip whitespace and comments and shorten local names.

    Top-level names stay as written so other scripts on the page can
    still reach them.
    """
    try:
        tree = es5(record.text)
    except ECMASyntaxError as e:
        get_logger().error("Minify failed on %s: %s", record.relative, e)
        return None
    js = minify_print(tree, obfuscate=True, obfuscate_globals=False)
    return record.with_text(js)


def script_steps(env: Environment) -> list[Step]:
    dev, prod = Environment.DEVELOPMENT, Environment.PRODUCTION
    return [
        gated(env, dev, init_source_maps),
        # explicit terminator guards sources that lack a trailing semicolon
        concat(SCRIPT_BUNDLE, separator=SCRIPT_SEPARATOR),
        gated(env, prod, per_file(_transpile)),
        gated(env, prod, per_file(_minify)),
        gated(env, dev, write_source_maps(block=False)),
    ]


def build_scripts(config: SiteConfig) -> list[Path]:
    paths = config["paths"]
    entry = list(src(paths.src_root, paths.source["js"]))
    if not entry:
        get_logger().debug("No entry script under %s", paths.src_root)
        return []

    records = [*src_files(paths.script_libs), *entry]
    steps = [*script_steps(config["env"]), dest(paths.build["js"])]
    return [r.path for r in run_chain(records, steps)]
