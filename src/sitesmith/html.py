# src/sitesmith/html.py
"""HTML pages: partial inclusion, minification, asset-path flattening."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import minify_html

from .constants import ASSET_PREFIX_AUTHORED, ASSET_PREFIX_BUILT
from .logs import get_logger
from .stream import FileRecord, Step, dest, gated, per_file, run_chain, src
from .types import Environment, SiteConfig


class IncludeCycleError(RuntimeError):
    """An include chain leads back to a file that is still being expanded."""


def _include_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(
        rf"{re.escape(prefix)}include\(\s*(['\"])(?P<path>.+?)\1"
        r"\s*(?:,\s*(?P<context>\{.*?\}))?\s*\)",
        re.DOTALL,
    )


def _lookup(context: Mapping[str, Any], dotted: str) -> Any:
    value: Any = context
    for key in dotted.split("."):
        if not isinstance(value, Mapping) or key not in value:
            raise KeyError(dotted)
        value = value[key]
    return value


def substitute_variables(text: str, context: Mapping[str, Any], prefix: str) -> str:
    """Replace `@@name` / `@@a.b` tokens that resolve in `context`."""
    if not context:
        return text

    def repl(match: re.Match[str]) -> str:
        name = match.group(1)
        try:
            value = _lookup(context, name)
        except KeyError:
            return match.group(0)
        return value if isinstance(value, str) else json.dumps(value)

    token = rf"{re.escape(prefix)}(?!include\()([A-Za-z_][\w.]*\w|[A-Za-z_])"
    return re.sub(token, repl, text)


def resolve_includes(
    text: str,
    path: Path,
    *,
    prefix: str,
    context: Mapping[str, Any] | None = None,
    _stack: Sequence[Path] = (),
) -> str:
    """Inline every include directive in `text`, recursively.

    Include paths are relative to the file containing the directive.
    Raises IncludeCycleError when a partial (transitively) includes itself
    and FileNotFoundError when a partial is missing.
    """
    stack = (*_stack, path.resolve())
    pattern = _include_pattern(prefix)

    def repl(match: re.Match[str]) -> str:
        target = (path.parent / match.group("path")).resolve()
        if target in stack:
            chain = " → ".join(p.name for p in (*stack, target))
            xmsg = f"Circular include detected: {chain}"
            raise IncludeCycleError(xmsg)
        if not target.is_file():
            xmsg = f"Included file not found: {match.group('path')} (from {path})"
            raise FileNotFoundError(xmsg)

        local: dict[str, Any] = dict(context or {})
        if match.group("context"):
            try:
                local.update(json.loads(match.group("context")))
            except json.JSONDecodeError as e:
                xmsg = f"Invalid include context in {path.name}: {e.msg}"
                raise ValueError(xmsg) from e

        partial = substitute_variables(
            target.read_text(encoding="utf-8"), local, prefix
        )
        return resolve_includes(
            partial, target, prefix=prefix, context=local, _stack=stack
        )

    return pattern.sub(repl, text)


# --------------------------------------------------------------------------- #
# steps
# --------------------------------------------------------------------------- #


def include_partials(prefix: str) -> Step:
    def apply(record: FileRecord) -> FileRecord | None:
        try:
            html = resolve_includes(record.text, record.path, prefix=prefix)
        except (FileNotFoundError, ValueError) as e:
            get_logger().error("Skipping %s: %s", record.relative, e)
            return None
        return record.with_text(html)

    return per_file(apply)


def _minify(record: FileRecord) -> FileRecord:
    html = minify_html.minify(
        record.text,
        keep_comments=False,
        keep_closing_tags=True,
        keep_html_and_head_opening_tags=True,
    )
    return record.with_text(html)


def _rewrite_asset_paths(record: FileRecord) -> FileRecord:
    return record.with_text(
        record.text.replace(ASSET_PREFIX_AUTHORED, ASSET_PREFIX_BUILT)
    )


def html_steps(env: Environment, prefix: str) -> list[Step]:
    return [
        include_partials(prefix),
        gated(env, Environment.PRODUCTION, per_file(_minify)),
        # output is always flattened to the destination root
        per_file(_rewrite_asset_paths),
    ]


def build_html(config: SiteConfig) -> list[Path]:
    paths = config["paths"]
    records = src(paths.src_root, paths.source["html"])
    steps = [
        *html_steps(config["env"], config["include_prefix"]),
        dest(paths.build["html"]),
    ]
    return [r.path for r in run_chain(records, steps)]
