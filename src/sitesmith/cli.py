# src/sitesmith/cli.py

import argparse
import platform
import sys
from difflib import get_close_matches
from pathlib import Path

from .actions import get_metadata, run_selftest
from .config import load_and_validate_config, resolve_config
from .constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_WATCH_INTERVAL
from .logs import LEVEL_ORDER, get_logger, set_log_level
from .meta import DESCRIPTION, PROGRAM_DISPLAY, PROGRAM_ENV, PROGRAM_SCRIPT
from .runtime import current_runtime
from .tasks import run
from .types import Environment
from .utils import safe_log

ENV_CHOICES = [*(e.value for e in Environment), "dev", "prod"]


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        # Build known option strings: ["-v", "--verbose", "--log-level", ...]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])

        hint_lines: list[str] = []
        # "unrecognized arguments: --prot 8080"
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            bad_args = [tok for tok in bad.split() if tok.startswith("-")]
            for arg in bad_args:
                close = get_close_matches(arg, known_opts, n=1, cutoff=0.6)
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")

        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)

    # --- Build ---
    parser.add_argument(
        "--env",
        choices=ENV_CHOICES,
        type=str.lower,
        help=(
            "Build environment"
            f" (default: ${PROGRAM_ENV}_ENV, $NODE_ENV, config, or development)."
        ),
    )
    parser.add_argument("--src", help="Source root (default: src).")
    parser.add_argument("--dest", help="Destination root (default: docs).")
    parser.add_argument("-c", "--config", help="Path to config file.")

    # --- Serve / watch ---
    parser.add_argument("--host", help=f"Dev server host (default: {DEFAULT_HOST}).")
    parser.add_argument(
        "--port", type=int, help=f"Dev server port (default: {DEFAULT_PORT})."
    )
    parser.add_argument(
        "--watch-interval",
        type=float,
        metavar="SECONDS",
        help=f"Source polling interval (default: {DEFAULT_WATCH_INTERVAL}).",
    )

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    parser.add_argument(
        "--selftest",
        action="store_true",
        help="Build a tiny generated site to verify the toolchain works.",
    )
    return parser


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    logger = get_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)

        # --- Early runtime init (use CLI + env + defaults) ---
        if args.use_color is not None:
            current_runtime["use_color"] = args.use_color
        if args.log_level:
            set_log_level(args.log_level)
        logger = get_logger()
        logger.trace("[BOOT] log-level initialized: %s", current_runtime["log_level"])

        logger.debug(
            "Runtime: Python %s (%s)\n    %s",
            platform.python_version(),
            platform.python_implementation(),
            sys.version.replace("\n", " "),
        )

        # --- Version flag ---
        if args.version:
            meta = get_metadata()
            logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
            return 0

        # --- Self-test mode ---
        if args.selftest:
            return 0 if run_selftest() else 1

        # --- Load configuration ---
        config_path: Path | None = None
        root_cfg = None
        config_result = load_and_validate_config(args)
        if config_result is not None:
            config_path, root_cfg = config_result

        cwd = Path.cwd().resolve()
        config_dir = config_path.parent if config_path else cwd
        config = resolve_config(
            root_cfg, args, config_dir, cwd, config_path=config_path
        )
        logger = get_logger()  # log level may come from the config file

        # --- Config summary ---
        if config_path:
            logger.info("🔧 Using config: %s", config_path.name)
        paths = config["paths"]
        logger.info("🌱 Environment: %s", config["env"].value)
        logger.info("📂 Source: %s", paths.src_root)
        logger.info("📦 Output: %s\n", paths.dest_root)
        if not paths.src_root.is_dir():
            logger.warning("Source root does not exist: %s", paths.src_root)

        run(config)

    except KeyboardInterrupt:
        logger.info("\n🛑 Watch stopped.")
        return 0

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        silent = getattr(e, "silent", False)
        if not silent:
            try:
                logger.error(str(e))  # noqa: TRY400
            except Exception:  # noqa: BLE001
                safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.critical("Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    else:
        return 0
