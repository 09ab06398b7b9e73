# src/sitesmith/css_tools.py
"""Stylesheet post-processing on compiled CSS text."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import csscompressor
import tinycss2
from tinycss2.ast import DimensionToken, NumberToken

from .constants import REM_MIN_PIXEL_VALUE, REM_PRECISION, REM_ROOT_VALUE
from .logs import get_logger
from .utils import glob_files, has_glob_chars

# Fixed, hand-kept table: only these properties get vendor-prefixed twins.
# Not a browserslist-driven prefixer; flexbox, transform and transition are
# unprefixed in every browser the output targets and are left alone.
PROPERTY_PREFIXES: dict[str, tuple[str, ...]] = {
    "appearance": ("-webkit-", "-moz-"),
    "user-select": ("-webkit-", "-moz-"),
    "backdrop-filter": ("-webkit-",),
    "text-size-adjust": ("-webkit-", "-moz-"),
    "hyphens": ("-webkit-",),
    "box-decoration-break": ("-webkit-",),
    "mask": ("-webkit-",),
    "mask-image": ("-webkit-",),
    "mask-size": ("-webkit-",),
    "mask-position": ("-webkit-",),
    "mask-repeat": ("-webkit-",),
    "print-color-adjust": ("-webkit-",),
    "tab-size": ("-moz-",),
}

VALUE_PREFIXES: dict[tuple[str, str], tuple[str, ...]] = {
    ("position", "sticky"): ("-webkit-sticky",),
}

# at-rules whose block holds declarations rather than nested rules
DECLARATION_AT_RULES = {"font-face", "page", "counter-style", "property", "viewport"}

_GLOB_IMPORT = re.compile(r"""@import\s+(['"])(?P<pattern>[^'"]+)\1\s*;""")
_SASS_EXTS = {".scss", ".sass", ".css"}


# --------------------------------------------------------------------------- #
# pre-compile
# --------------------------------------------------------------------------- #


def expand_glob_imports(text: str, base_dir: Path) -> str:
    """Turn `@import "partials/**/*.scss";` into one import per match.

    Matches are sorted and relative to `base_dir`. An unmatched glob
    expands to nothing.
    """

    def repl(match: re.Match[str]) -> str:
        pattern = match.group("pattern")
        if not has_glob_chars(pattern):
            return match.group(0)
        files = [f for f in glob_files(base_dir, pattern) if f.suffix in _SASS_EXTS]
        get_logger().trace("[SASS-GLOB] %s → %d file(s)", pattern, len(files))
        return "\n".join(
            f'@import "{f.relative_to(base_dir).as_posix()}";' for f in files
        )

    return _GLOB_IMPORT.sub(repl, text)


# --------------------------------------------------------------------------- #
# px → rem
# --------------------------------------------------------------------------- #


def _to_fixed(number: float, precision: int) -> float:
    # floor to precision+1 digits, then round half up on the last one
    multiplier = 10 ** (precision + 1)
    whole = math.floor(number * multiplier)
    return math.floor(whole / 10 + 0.5) * 10 / multiplier


def format_number(value: float, precision: int = REM_PRECISION) -> str:
    return f"{value:.{precision}f}".rstrip("0").rstrip(".") or "0"


def _px_token(
    token: DimensionToken, root_value: float, precision: int, min_pixel_value: float
) -> Any:
    if token.value < min_pixel_value:
        return token
    rem = _to_fixed(token.value / root_value, precision)
    text = format_number(rem, precision)
    if text == "0":
        return NumberToken(token.source_line, token.source_column, 0, 0, "0")
    int_value = int(rem) if rem.is_integer() else None
    return DimensionToken(
        token.source_line, token.source_column, rem, int_value, text, "rem"
    )


def _convert_px(
    tokens: Iterable[Any], root_value: float, precision: int, min_pixel_value: float
) -> list[Any]:
    converted: list[Any] = []
    for token in tokens:
        if token.type == "dimension" and token.lower_unit == "px":
            converted.append(_px_token(token, root_value, precision, min_pixel_value))
            continue
        if token.type in ("() block", "[] block", "{} block"):
            token.content = _convert_px(
                token.content, root_value, precision, min_pixel_value
            )
        elif token.type == "function":
            token.arguments = _convert_px(
                token.arguments, root_value, precision, min_pixel_value
            )
        converted.append(token)
    return converted


def px_to_rem(
    css: str,
    *,
    root_value: float = REM_ROOT_VALUE,
    precision: int = REM_PRECISION,
    min_pixel_value: float = REM_MIN_PIXEL_VALUE,
) -> str:
    """Convert px lengths in every property to rem.

    Values below `min_pixel_value` (including negatives) stay in px.
    Selectors and at-rule preludes such as media queries are not touched.
    """
    nodes = tinycss2.parse_stylesheet(css)
    for node in nodes:
        content = getattr(node, "content", None)
        if node.type in ("qualified-rule", "at-rule") and content is not None:
            node.content = _convert_px(content, root_value, precision, min_pixel_value)
    return tinycss2.serialize(nodes)


# --------------------------------------------------------------------------- #
# media queries
# --------------------------------------------------------------------------- #


def group_media_queries(css: str) -> str:
    """Merge @media blocks with identical queries into one block each.

    Plain rules keep their order; merged media blocks follow them in the
    order their query first appeared.
    """
    logger = get_logger()
    plain: list[str] = []
    groups: dict[str, list[str]] = {}

    for node in tinycss2.parse_stylesheet(css, skip_whitespace=True):
        if node.type == "error":
            logger.warning("CSS parse issue while grouping media: %s", node.message)
            continue
        if (
            node.type == "at-rule"
            and node.lower_at_keyword == "media"
            and node.content is not None
        ):
            query = tinycss2.serialize(node.prelude).strip()
            groups.setdefault(query, []).append(
                tinycss2.serialize(node.content).strip()
            )
            continue
        plain.append(node.serialize())

    blocks = [
        "@media {} {{\n{}\n}}".format(query, "\n".join(bodies))
        for query, bodies in groups.items()
    ]
    return "\n".join(plain + blocks) + "\n"


# --------------------------------------------------------------------------- #
# vendor prefixes
# --------------------------------------------------------------------------- #


def _prefix_declarations(tokens: list[Any]) -> str:
    items = tinycss2.parse_declaration_list(
        tokens, skip_comments=True, skip_whitespace=True
    )
    present = {d.lower_name for d in items if d.type == "declaration"}
    out: list[str] = []
    for item in items:
        if item.type == "error":
            continue
        if item.type != "declaration":
            out.append(item.serialize())
            continue
        value = tinycss2.serialize(item.value).strip()
        important = "!important" if item.important else ""
        for prefix in PROPERTY_PREFIXES.get(item.lower_name, ()):
            if prefix + item.lower_name not in present:
                out.append(f"{prefix}{item.name}:{value}{important}")
        for prefixed in VALUE_PREFIXES.get((item.lower_name, value.lower()), ()):
            out.append(f"{item.name}:{prefixed}{important}")
        out.append(f"{item.name}:{value}{important}")
    return ";".join(out)


def _prefix_node(node: Any) -> str:
    if node.type == "qualified-rule":
        selector = tinycss2.serialize(node.prelude).strip()
        return f"{selector}{{{_prefix_declarations(node.content)}}}"

    if node.type == "at-rule" and node.content is not None:
        prelude = tinycss2.serialize(node.prelude).strip()
        head = f"@{node.at_keyword} {prelude}".rstrip()
        if node.lower_at_keyword in DECLARATION_AT_RULES:
            return f"{head}{{{_prefix_declarations(node.content)}}}"
        rules = tinycss2.parse_rule_list(
            node.content, skip_comments=True, skip_whitespace=True
        )
        inner = "".join(_prefix_node(rule) for rule in rules if rule.type != "error")
        return f"{head}{{{inner}}}"

    return node.serialize()


def autoprefix(css: str) -> str:
    """Add vendor-prefixed twins for the properties in PROPERTY_PREFIXES.

    The output is re-serialized without comments.
    """
    nodes = tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True)
    return "\n".join(_prefix_node(node) for node in nodes if node.type != "error")


# --------------------------------------------------------------------------- #
# minification
# --------------------------------------------------------------------------- #


def minify_css(css: str) -> str:
    """Strip comments and whitespace and drop empty rules.

    z-index values pass through unchanged.
    """
    return csscompressor.compress(css, preserve_exclamation_comments=False)
