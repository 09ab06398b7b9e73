# src/sitesmith/actions.py
import re
import shutil
import subprocess
import tempfile
from contextlib import suppress
from pathlib import Path

from .constants import DEFAULT_INCLUDE_PREFIX, DEFAULT_LOG_LEVEL
from .logs import get_logger
from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT, Metadata
from .paths import make_path_config
from .tasks import build_all, clean
from .types import Environment, SiteConfig


def get_metadata() -> Metadata:
    """Return (version, commit) for this tool.

    Version comes from pyproject.toml next to the source tree, commit from
    git; either is "unknown" when unavailable (e.g. installed wheels).
    """
    logger = get_logger()
    logger.trace("get_metadata ran from: %s", Path(__file__).resolve())

    version = "unknown"
    commit = "unknown"

    root = Path(__file__).resolve().parents[2]
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        logger.trace("trying to read metadata from %s", pyproject)
        text = pyproject.read_text(encoding="utf-8")
        match = re.search(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']', text)
        if match:
            version = match.group(1)

    with suppress(OSError, subprocess.CalledProcessError):
        logger.trace("trying to get commit from git")
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip()

    logger.trace("got package version %s with commit %s", version, commit)
    return Metadata(version, commit)


# --------------------------------------------------------------------------- #
# self-test
# --------------------------------------------------------------------------- #

_SELFTEST_FILES = {
    "pages/index.html": "<html><body>@@include('../partials/header.html')</body></html>",
    "partials/header.html": '<img src="../../assets/images/logo.png">',
    "assets/styles/main.scss": "$gap: 32px;\n.box { margin: $gap; }\n",
    "assets/scripts/main.js": "var hello = 'world';\n",
    "assets/fonts/site.woff2": "wOF2",
}


def _selftest_checks(out: Path) -> list[str]:
    """Return a description of every expectation the selftest output misses."""
    problems: list[str] = []

    page = out / "index.html"
    if not page.exists():
        problems.append("index.html not written")
    else:
        html = page.read_text(encoding="utf-8")
        if 'src="assets/images/logo.png"' not in html:
            problems.append("asset paths not rewritten / partial not included")

    css = out / "assets" / "style.min.css"
    if not css.exists() or "2rem" not in css.read_text(encoding="utf-8"):
        problems.append("stylesheet missing or px not converted to rem")

    if not (out / "assets" / "script.min.js").exists():
        problems.append("script bundle not written")
    if not (out / "assets" / "fonts" / "site.woff2").exists():
        problems.append("font not copied")
    return problems


def run_selftest() -> bool:
    """Build a tiny generated site into a temp dir and check the output."""
    logger = get_logger()
    logger.info("🧪 Running self-test...")

    tmp_dir: Path | None = None
    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-selftest-"))
        src = tmp_dir / "src"
        out = tmp_dir / "docs"
        for rel, text in _SELFTEST_FILES.items():
            path = src / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

        config: SiteConfig = {
            "env": Environment.DEVELOPMENT,
            "paths": make_path_config(src, out),
            "host": "localhost",
            "port": 0,
            "watch_interval": 1.0,
            "log_level": DEFAULT_LOG_LEVEL,
            "include_prefix": DEFAULT_INCLUDE_PREFIX,
            "__meta__": {"cli_root": tmp_dir, "config_root": tmp_dir},
        }
        logger.debug("[SELFTEST] using temp dir: %s", tmp_dir)

        clean(config)
        report = build_all(config)
        problems = _selftest_checks(out)
        if report.ok and not problems:
            logger.info(
                "✅ Self-test passed: %s is working correctly.", PROGRAM_DISPLAY
            )
            return True

        for name in report.failed:
            problems.append(f"{name} transform failed")
        logger.error("Self-test failed:\n  • " + "\n  • ".join(problems))
        return False

    except PermissionError:
        logger.error("Self-test failed: insufficient permissions.")  # noqa: TRY400
        return False
    except FileNotFoundError:
        logger.error("Self-test failed: missing file or directory.")  # noqa: TRY400
        return False
    except Exception:
        logger.exception(
            "Unexpected self-test failure. "
            "Please report this issue with the following traceback:"
        )
        return False

    finally:
        if tmp_dir and tmp_dir.exists():
            shutil.rmtree(tmp_dir, ignore_errors=True)
