# src/sitesmith/config.py
"""Find, load, validate and resolve the optional `.sitesmith.jsonc` file.

Every setting follows the same precedence: CLI flag → environment
variable → config file → default.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from difflib import get_close_matches
from pathlib import Path
from typing import Any, cast

from .constants import (
    DEFAULT_DEST_DIR,
    DEFAULT_ENV_BUILD_ENV,
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_ENV_WATCH_INTERVAL,
    DEFAULT_ENVIRONMENT,
    DEFAULT_HOST,
    DEFAULT_INCLUDE_PREFIX,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_SRC_DIR,
    DEFAULT_STRICT_CONFIG,
    DEFAULT_WATCH_INTERVAL,
)
from .logs import LEVEL_ORDER, get_logger, set_log_level
from .meta import PROGRAM_ENV, PROGRAM_SCRIPT
from .paths import make_path_config
from .types import Environment, MetaSiteConfig, RootConfigInput, SiteConfig
from .utils import load_jsonc, plural, remove_path_in_error_message

MAX_PORT = 65535

# accepted value types per key; bool is never accepted where int is
CONFIG_SCHEMA: dict[str, tuple[type, ...]] = {
    "env": (str,),
    "src": (str,),
    "dest": (str,),
    "style_libs": (list,),
    "script_libs": (list,),
    "host": (str,),
    "port": (int,),
    "watch_interval": (int, float),
    "log_level": (str,),
    "include_prefix": (str,),
    "strict_config": (bool,),
}

# sanity check
assert set(CONFIG_SCHEMA) == set(RootConfigInput.__annotations__), (  # noqa: S101
    "CONFIG_SCHEMA out of sync with RootConfigInput"
)


@dataclass
class ValidationSummary:
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    strict: bool = DEFAULT_STRICT_CONFIG


# --------------------------------------------------------------------------- #
# precedence helpers
# --------------------------------------------------------------------------- #


def determine_log_level(
    args: argparse.Namespace,
    config_log_level: str | None = None,
) -> str:
    """Resolve log level from CLI → env → config → default."""
    if getattr(args, "log_level", None):
        return cast("str", args.log_level)

    env_log_level = os.getenv(f"{PROGRAM_ENV}_LOG_LEVEL") or os.getenv(
        DEFAULT_ENV_LOG_LEVEL
    )
    if env_log_level:
        return env_log_level

    if config_log_level:
        return config_log_level

    return DEFAULT_LOG_LEVEL


def determine_environment(
    args: argparse.Namespace,
    config_env: str | None = None,
) -> Environment:
    """Resolve the build environment from CLI → env → config → default.

    `SITESMITH_ENV` wins over the conventional `NODE_ENV`.
    """
    raw = (
        getattr(args, "env", None)
        or os.getenv(f"{PROGRAM_ENV}_ENV")
        or os.getenv(DEFAULT_ENV_BUILD_ENV)
        or config_env
        or DEFAULT_ENVIRONMENT
    )
    return Environment.parse(raw)


def determine_watch_interval(
    args: argparse.Namespace,
    config_interval: float | None = None,
) -> float:
    logger = get_logger()
    interval: float = DEFAULT_WATCH_INTERVAL

    env_watch = os.getenv(DEFAULT_ENV_WATCH_INTERVAL)
    if getattr(args, "watch_interval", None) is not None:
        interval = args.watch_interval
    elif env_watch is not None:
        try:
            interval = float(env_watch)
        except ValueError:
            logger.warning(
                "Invalid %s=%r, using default.", DEFAULT_ENV_WATCH_INTERVAL, env_watch
            )
    elif config_interval is not None:
        interval = float(config_interval)

    if interval <= 0:
        xmsg = f"Watch interval must be positive, got {interval}"
        raise ValueError(xmsg)
    return interval


# --------------------------------------------------------------------------- #
# find / load
# --------------------------------------------------------------------------- #


def find_config(args: argparse.Namespace, cwd: Path) -> Path | None:
    """Locate a configuration file.

    Search order:
      1. Explicit path from CLI (--config)
      2. .{PROGRAM_SCRIPT}.jsonc, then .{PROGRAM_SCRIPT}.json in `cwd`

    Returns None when no config was found; running without one is normal.
    """
    logger = get_logger()

    # --- 1. Explicit config path ---
    if getattr(args, "config", None):
        config = Path(args.config).expanduser().resolve()
        if not config.exists():
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ValueError(xmsg)
        return config

    # --- 2. Default candidate files ---
    candidates = [cwd / f".{PROGRAM_SCRIPT}.jsonc", cwd / f".{PROGRAM_SCRIPT}.json"]
    found = [p for p in candidates if p.exists()]

    if not found:
        logger.debug("No config file found in %s", cwd)
        return None

    if len(found) > 1:
        names = ", ".join(p.name for p in found)
        logger.warning(
            "Multiple config files detected (%s); using %s.", names, found[0].name
        )
    return found[0]


def load_config(config_path: Path) -> dict[str, Any] | None:
    """Load the raw config object. Empty files (or only comments) give None."""
    try:
        data = load_jsonc(config_path)
    except ValueError as e:
        clean_msg = remove_path_in_error_message(str(e), config_path)
        xmsg = (
            f"Error while loading configuration file '{config_path.name}': {clean_msg}"
        )
        raise ValueError(xmsg) from e

    if data is None or data == {}:
        return None
    if not isinstance(data, dict):
        xmsg = (
            f"Configuration file '{config_path.name}' must contain an object,"
            f" not {type(data).__name__}"
        )
        raise TypeError(xmsg)
    return data


# --------------------------------------------------------------------------- #
# validation
# --------------------------------------------------------------------------- #


def _check_value(key: str, value: Any) -> str | None:
    """Return an error message for a bad value, or None."""
    expected = CONFIG_SCHEMA[key]
    is_bool = isinstance(value, bool)
    if not isinstance(value, expected) or (is_bool and bool not in expected):
        names = " or ".join(t.__name__ for t in expected)
        return f"`{key}` must be {names}, not {type(value).__name__}"

    if key in ("style_libs", "script_libs"):
        bad = [v for v in value if not isinstance(v, str)]
        if bad:
            return f"`{key}` must be a list of strings"
    elif key == "log_level" and value.lower() not in LEVEL_ORDER:
        return f"`log_level` must be one of {', '.join(LEVEL_ORDER)}, not {value!r}"
    elif key == "env":
        try:
            Environment.parse(value)
        except ValueError as e:
            return str(e)
    elif key == "port" and not 0 <= value <= MAX_PORT:
        return f"`port` must be between 0 and {MAX_PORT}, not {value}"
    elif key == "watch_interval" and value <= 0:
        return f"`watch_interval` must be positive, not {value}"
    elif key == "include_prefix" and not value:
        return "`include_prefix` must not be empty"
    return None


def validate_config(
    raw_config: dict[str, Any], *, strict: bool | None = None
) -> ValidationSummary:
    """Check keys and value types.

    Unknown keys are warnings, or errors when strict. Strictness comes from
    the `strict` argument, else the file's own `strict_config` key.
    """
    summary = ValidationSummary()
    if strict is not None:
        summary.strict = strict
    elif isinstance(raw_config.get("strict_config"), bool):
        summary.strict = raw_config["strict_config"]

    for key, value in raw_config.items():
        if key not in CONFIG_SCHEMA:
            msg = f"Unknown key `{key}`"
            close = get_close_matches(key, CONFIG_SCHEMA, n=1, cutoff=0.6)
            if close:
                msg += f" (did you mean `{close[0]}`?)"
            (summary.errors if summary.strict else summary.warnings).append(msg)
            continue
        error = _check_value(key, value)
        if error:
            summary.errors.append(error)

    summary.valid = not summary.errors
    return summary


def _log_validation_summary(summary: ValidationSummary, config_path: Path) -> None:
    logger = get_logger()
    mode = "strict mode" if summary.strict else "lenient mode"

    if not summary.valid:
        logger.error(
            "Failed to validate configuration file %s (%s): %d error%s.",
            config_path.name,
            mode,
            len(summary.errors),
            plural(summary.errors),
        )
        logger.error("\nErrors:\n  • " + "\n  • ".join(summary.errors))
    elif summary.warnings:
        logger.warning(
            "Validated configuration file %s (%s) with warnings.",
            config_path.name,
            mode,
        )
    else:
        logger.debug("Validated %s (%s) successfully.", config_path.name, mode)

    if summary.warnings:
        logger.warning(
            "\nWarnings (non-fatal):\n  • " + "\n  • ".join(summary.warnings)
        )


def load_and_validate_config(
    args: argparse.Namespace,
) -> tuple[Path, RootConfigInput] | None:
    """Find, load and validate the user's configuration.

    Also settles the log level (CLI → env → config → default) as early as
    possible so the rest of startup logs at the right verbosity.
    """
    set_log_level(determine_log_level(args))

    cwd = Path.cwd().resolve()
    config_path = find_config(args, cwd)
    if config_path is None:
        return None

    raw_config = load_config(config_path)
    if raw_config is None:
        return None

    raw_log_level = raw_config.get("log_level")
    if isinstance(raw_log_level, str) and raw_log_level.lower() in LEVEL_ORDER:
        set_log_level(determine_log_level(args, raw_log_level.lower()))

    summary = validate_config(raw_config)
    _log_validation_summary(summary, config_path)
    if not summary.valid:
        xmsg = f"Configuration file {config_path.name} contains validation errors."
        exception = ValueError(xmsg)
        exception.silent = True  # type: ignore[attr-defined]
        exception.data = summary  # type: ignore[attr-defined]
        raise exception

    return config_path, cast("RootConfigInput", raw_config)


# --------------------------------------------------------------------------- #
# resolution
# --------------------------------------------------------------------------- #


def _resolve_dir(
    cli_value: str | None,
    config_value: str | None,
    default: str,
    *,
    config_dir: Path,
    cwd: Path,
) -> Path:
    # CLI paths are relative to cwd, config paths to the config file
    if cli_value:
        return (cwd / cli_value).resolve()
    return (config_dir / (config_value or default)).resolve()


def resolve_config(
    root_cfg: RootConfigInput | None,
    args: argparse.Namespace,
    config_dir: Path,
    cwd: Path,
    *,
    config_path: Path | None = None,
) -> SiteConfig:
    """Merge CLI args, environment, config file and defaults into a SiteConfig."""
    logger = get_logger()
    cfg: RootConfigInput = root_cfg or {}

    env = determine_environment(args, cfg.get("env"))
    log_level = determine_log_level(args, cfg.get("log_level"))
    set_log_level(log_level)

    src_root = _resolve_dir(
        getattr(args, "src", None),
        cfg.get("src"),
        DEFAULT_SRC_DIR,
        config_dir=config_dir,
        cwd=cwd,
    )
    dest_root = _resolve_dir(
        getattr(args, "dest", None),
        cfg.get("dest"),
        DEFAULT_DEST_DIR,
        config_dir=config_dir,
        cwd=cwd,
    )
    paths = make_path_config(
        src_root,
        dest_root,
        style_libs=[(config_dir / p).resolve() for p in cfg.get("style_libs", [])],
        script_libs=[(config_dir / p).resolve() for p in cfg.get("script_libs", [])],
    )

    port = getattr(args, "port", None)
    if port is None:
        port = cfg.get("port", DEFAULT_PORT)

    meta: MetaSiteConfig = {"cli_root": cwd, "config_root": config_dir}
    if config_path is not None:
        meta["config_path"] = config_path

    resolved: SiteConfig = {
        "env": env,
        "paths": paths,
        "host": getattr(args, "host", None) or cfg.get("host", DEFAULT_HOST),
        "port": port,
        "watch_interval": determine_watch_interval(args, cfg.get("watch_interval")),
        "log_level": log_level,
        "include_prefix": cfg.get("include_prefix", DEFAULT_INCLUDE_PREFIX),
        "__meta__": meta,
    }
    logger.trace("[CONFIG] resolved: %s", resolved)
    return resolved
