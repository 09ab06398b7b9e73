# src/sitesmith/utils.py


import itertools
import json
import os
import re
import sys
from contextlib import suppress
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, TextIO, cast

# --- output -------------------------------------------------------------------


def should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    # Respect explicit overrides
    if "NO_COLOR" in os.environ:
        return False
    if os.getenv("FORCE_COLOR", "").lower() in {"1", "true", "yes"}:
        return True

    # Auto-detect: use color if output is a TTY
    return sys.stdout.isatty()


def safe_log(msg: str) -> None:
    """Emergency logger that never fails."""
    stream = cast("TextIO", sys.__stderr__)
    try:
        print(msg, file=stream)
    except Exception:  # noqa: BLE001
        # last resort: never crash while reporting a crash
        with suppress(Exception):
            stream.write(f"[INTERNAL] {msg}\n")


def plural(obj: Any) -> str:
    """Return 's' if obj represents a plural count.

    Accepts ints, floats, and any object implementing __len__().
    Returns '' for singular or zero.
    """
    count: int | float
    try:
        count = len(obj)
    except TypeError:
        # fallback for numbers or uncountable types
        count = obj if isinstance(obj, (int, float)) else 0
    return "s" if count != 1 else ""


# --- config files ---------------------------------------------------------------


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    """Load JSONC (JSON with comments and trailing commas)."""
    if not path.exists():
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)

    if not path.is_file():
        xmsg = f"Expected a file: {path}"
        raise ValueError(xmsg)

    text = path.read_text(encoding="utf-8")

    # Remove // and # comments (but not URLs like "http://")
    text = re.sub(r'(?<!["\'])\s*(?<!:)//.*|(?<!["\'])\s*#.*', "", text)

    # Remove block comments /* ... */
    text = re.sub(r"/\*.*?\*/", "", text, flags=re.DOTALL)

    # Remove trailing commas before } or ]
    text = re.sub(r",(?=\s*[}\]])", "", text)

    text = text.strip()

    if not text:
        # Empty or only comments → interpret as "no config"
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = (
            f"Invalid JSONC syntax in {path}:"
            f" {e.msg} (line {e.lineno}, column {e.colno})"
        )
        raise ValueError(xmsg) from e

    # Guard against scalar roots (invalid config structure)
    if not isinstance(data, (dict, list)):
        xmsg = f"Invalid JSONC root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004

    return cast("dict[str, Any] | list[Any]", data)


def remove_path_in_error_message(inner_msg: str, path: Path) -> str:
    """Remove redundant file path mentions (and nearby filler)
    from error messages.

    Example:
        "Invalid JSONC syntax in /abs/path/config.jsonc: Expecting value"
        → "Invalid JSONC syntax: Expecting value"

    """
    full_path = str(path)
    filename = path.name

    candidates = [
        f"in {full_path}",
        f"in '{full_path}'",
        f'in "{full_path}"',
        f"in {filename}",
        f"in '{filename}'",
        f'in "{filename}"',
        full_path,
        filename,
    ]

    clean_msg = inner_msg
    for pattern in candidates:
        clean_msg = clean_msg.replace(pattern, "").strip(": ").strip()

    # Normalize leftover spaces and colons
    clean_msg = re.sub(r"\s{2,}", " ", clean_msg)
    clean_msg = re.sub(r"\s*:\s*", ": ", clean_msg)

    return clean_msg


# --- globs ----------------------------------------------------------------------


def has_glob_chars(s: str) -> bool:
    return any(c in s for c in "*?[]{}")


def get_glob_root(pattern: str) -> Path:
    """Return the non-glob portion of a path like 'src/**/*.txt'."""
    if not pattern:
        return Path()

    parts: list[str] = []
    for part in Path(pattern.replace("\\", "/")).parts:
        if re.search(r"[*?\[\]{}]", part):
            break
        parts.append(part)
    return Path(*parts) if parts else Path()


def expand_braces(pattern: str) -> list[str]:
    """Expand shell-style alternatives: 'a.{jpg,png}' → ['a.jpg', 'a.png']."""
    match = re.search(r"\{([^{}]*)\}", pattern)
    if not match:
        return [pattern]

    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        for candidate in expand_braces(head + option + tail):
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


def matches_glob(rel: Path | str, pattern: str) -> bool:
    """Match a root-relative path against a glob with `**` and braces.

    `**/` may also match zero directories, the way Path.glob() treats it.
    """
    rel_str = str(rel).replace("\\", "/")
    for pat in expand_braces(pattern.replace("\\", "/")):
        parts = pat.split("**/")
        for joins in itertools.product(("**/", ""), repeat=len(parts) - 1):
            candidate = parts[0] + "".join(j + p for j, p in zip(joins, parts[1:]))
            if fnmatch(rel_str, candidate):
                return True
    return False


def glob_files(root: Path, pattern: str) -> list[Path]:
    """Return the sorted files under `root` matching `pattern` (braces allowed).

    A pattern without glob characters is treated as a literal path.
    Missing roots and unmatched patterns yield an empty list.
    """
    if not root.exists():
        return []

    found: set[Path] = set()
    for pat in expand_braces(pattern):
        if has_glob_chars(pat):
            matches = root.glob(pat)
        else:
            matches = iter([root / pat])
        found.update(p for p in matches if p.is_file())
    return sorted(found)
