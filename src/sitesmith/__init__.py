# src/sitesmith/__init__.py

"""Sitesmith: a static-site asset pipeline.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use and custom integrations.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()              → CLI entrypoint
    - run()               → clean → build → watch + serve
    - build_all()         → Build every asset group once
    - resolve_config()    → Merge CLI args, env and config file
    - get_metadata()      → Retrieve version / commit info
"""

from .actions import get_metadata, run_selftest
from .changes import ChangeRecord, ChangeTracker
from .cli import main
from .config import (
    ValidationSummary,
    determine_environment,
    determine_log_level,
    determine_watch_interval,
    find_config,
    load_and_validate_config,
    load_config,
    resolve_config,
    validate_config,
)
from .constants import (
    DEFAULT_DEST_DIR,
    DEFAULT_ENVIRONMENT,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_SRC_DIR,
    DEFAULT_WATCH_INTERVAL,
)
from .css_tools import (
    autoprefix,
    expand_glob_imports,
    group_media_queries,
    minify_css,
    px_to_rem,
)
from .fonts import build_fonts
from .html import IncludeCycleError, build_html, resolve_includes
from .images import build_favicons, build_images, optimize_images, render_favicons
from .logs import LEVEL_ORDER, get_logger, set_log_level
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .paths import make_path_config
from .runtime import Runtime, current_runtime
from .scripts import build_scripts
from .server import DevServer
from .sourcemap import SourceMap
from .stream import FileRecord, Step, gated, run_chain
from .styles import build_styles
from .svg import build_sprite, optimize_svg
from .tasks import (
    TRANSFORMS,
    BuildReport,
    CleanError,
    build_all,
    clean,
    observe,
    run,
)
from .types import Environment, PathConfig, SiteConfig, Transform
from .watch import ChangeEvent, Watcher, poll_changes


__all__ = [  # noqa: RUF022
    # --- CLI / Actions ---
    "get_metadata",
    "main",
    "run_selftest",
    #
    # --- Task graph ---
    "BuildReport",
    "CleanError",
    "TRANSFORMS",
    "build_all",
    "clean",
    "observe",
    "run",
    #
    # --- Transforms ---
    "IncludeCycleError",
    "build_favicons",
    "build_fonts",
    "build_html",
    "build_images",
    "build_scripts",
    "build_sprite",
    "build_styles",
    "optimize_images",
    "optimize_svg",
    "render_favicons",
    "resolve_includes",
    #
    # --- CSS tools ---
    "autoprefix",
    "expand_glob_imports",
    "group_media_queries",
    "minify_css",
    "px_to_rem",
    #
    # --- Streams / incremental ---
    "ChangeRecord",
    "ChangeTracker",
    "FileRecord",
    "SourceMap",
    "Step",
    "gated",
    "run_chain",
    #
    # --- Watch / serve ---
    "ChangeEvent",
    "DevServer",
    "Watcher",
    "poll_changes",
    #
    # --- Config Handling ---
    "ValidationSummary",
    "determine_environment",
    "determine_log_level",
    "determine_watch_interval",
    "find_config",
    "load_and_validate_config",
    "load_config",
    "make_path_config",
    "resolve_config",
    "validate_config",
    #
    # --- Constants / Metadata / Runtime ---
    "DEFAULT_DEST_DIR",
    "DEFAULT_ENVIRONMENT",
    "DEFAULT_HOST",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PORT",
    "DEFAULT_SRC_DIR",
    "DEFAULT_WATCH_INTERVAL",
    "Metadata",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "current_runtime",
    #
    # --- utils ---
    "LEVEL_ORDER",
    "get_logger",
    "set_log_level",
    #
    # --- Types ---
    "Environment",
    "PathConfig",
    "Runtime",
    "SiteConfig",
    "Transform",
]
