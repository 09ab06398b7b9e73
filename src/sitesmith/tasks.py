# src/sitesmith/tasks.py
"""The fixed task graph: clean → build (all transforms at once) → observe."""

from __future__ import annotations

import shutil
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .fonts import build_fonts
from .html import IncludeCycleError, build_html
from .images import build_images
from .logs import get_logger
from .scripts import build_scripts
from .server import DevServer
from .styles import build_styles
from .types import SiteConfig, Transform
from .utils import plural
from .watch import Watcher

TRANSFORMS: dict[str, Transform] = {
    "html": build_html,
    "css": build_styles,
    "js": build_scripts,
    "img": build_images,
    "font": build_fonts,
}

# errors that still fail the run after every other transform has finished
FATAL_ERRORS: tuple[type[BaseException], ...] = (IncludeCycleError,)


class CleanError(RuntimeError):
    """The destination root could not be removed."""


@dataclass
class BuildReport:
    outputs: dict[str, list[Path]] = field(default_factory=dict)
    failed: dict[str, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def file_count(self) -> int:
        return sum(len(files) for files in self.outputs.values())


def clean(config: SiteConfig) -> None:
    """Delete the destination root; a missing root is fine."""
    logger = get_logger()
    paths = config["paths"]
    dest = paths.dest_root

    if paths.src_root == dest or paths.src_root.is_relative_to(dest):
        xmsg = f"Refusing to clean {dest}: it contains the source root"
        raise CleanError(xmsg)

    if not dest.exists():
        logger.debug("Nothing to clean at %s", dest)
        return

    try:
        shutil.rmtree(dest)
    except OSError as e:
        xmsg = f"Failed to clean {dest}: {e}"
        raise CleanError(xmsg) from e
    logger.info("🧹 Cleaned %s", dest)


def build_all(
    config: SiteConfig,
    transforms: Mapping[str, Transform] | None = None,
) -> BuildReport:
    """Run every transform concurrently and wait for all of them.

    A failing transform is logged and recorded in the report; the others
    keep going. Errors in FATAL_ERRORS are re-raised once all are done.
    """
    logger = get_logger()
    transforms = TRANSFORMS if transforms is None else transforms
    env = config["env"]
    logger.info("🔨 Building %d asset group(s) [%s]", len(transforms), env.value)

    with ThreadPoolExecutor(
        max_workers=max(len(transforms), 1), thread_name_prefix="build"
    ) as pool:
        futures = {
            name: pool.submit(transform, config)
            for name, transform in transforms.items()
        }

    report = BuildReport()
    fatal: BaseException | None = None
    for name, future in futures.items():
        try:
            report.outputs[name] = future.result()
        except FATAL_ERRORS as e:
            logger.error("[%s] %s", name, e)  # noqa: TRY400
            report.failed[name] = e
            fatal = fatal or e
        except Exception as e:  # noqa: BLE001
            logger.error("[%s] build failed: %s", name, e)  # noqa: TRY400
            report.failed[name] = e
        else:
            count = len(report.outputs[name])
            logger.debug("[%s] wrote %d file%s", name, count, plural(count))

    if fatal is not None:
        raise fatal

    if report.ok:
        logger.info("🎉 Build complete (%d files).", report.file_count)
    else:
        logger.warning(
            "Build finished with %d failed group%s: %s",
            len(report.failed),
            plural(report.failed),
            ", ".join(report.failed),
        )
    return report


def observe(
    config: SiteConfig,
    transforms: Mapping[str, Transform] | None = None,
    *,
    server_factory: Callable[[Path], DevServer] = DevServer,
) -> None:
    """Watch sources in the background and serve the output until Ctrl+C."""
    logger = get_logger()
    transforms = TRANSFORMS if transforms is None else transforms

    watcher = Watcher(config, transforms)
    thread = threading.Thread(target=watcher.run, name="watcher", daemon=True)
    thread.start()

    server = server_factory(config["paths"].dest_root)
    try:
        server.serve(config["host"], config["port"])
    finally:
        watcher.stop()
        logger.debug("[WATCH] watcher stopped")


def run(
    config: SiteConfig,
    transforms: Mapping[str, Transform] | None = None,
    *,
    server_factory: Callable[[Path], DevServer] = DevServer,
) -> BuildReport:
    """Clean, build everything, then watch and serve.

    Build failures are reported but do not prevent observing; only a
    CleanError or a fatal build error stops the run.
    """
    clean(config)
    report = build_all(config, transforms)
    observe(config, transforms, server_factory=server_factory)
    return report
