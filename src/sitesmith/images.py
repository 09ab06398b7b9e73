# src/sitesmith/images.py
"""Images: SVG sprite, favicon set, and incremental optimisation.

The three sub-pipelines share one invocation but read overlapping sources
and write disjoint outputs, so they are independent of each other.
"""

from __future__ import annotations

import io
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from PIL import Image, ImageOps

from .changes import ChangeTracker
from .constants import (
    APPLE_ICON_BACKGROUND,
    APPLE_ICON_SIZES,
    FAVICON_ICO_SIZES,
    FAVICON_SIZES,
    GIF_INTERLACED,
    JPEG_PROGRESSIVE,
    JPEG_QUALITY,
    PNG_COMPRESS_LEVEL,
    SPRITE_FILENAME,
)
from .logs import get_logger
from .stream import FileRecord, Step, dest, run_chain, src
from .svg import build_sprite, optimize_svg
from .types import SiteConfig

# --------------------------------------------------------------------------- #
# sprite
# --------------------------------------------------------------------------- #


def build_sprite_sheet(config: SiteConfig) -> list[Path]:
    paths = config["paths"]
    data = build_sprite(src(paths.src_root, paths.source["sprite"]))
    if data is None:
        return []
    target = paths.build["img"] / SPRITE_FILENAME
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    get_logger().debug("🧩 sprite → %s", target)
    return [target]


# --------------------------------------------------------------------------- #
# favicons
# --------------------------------------------------------------------------- #


def _square(image: Image.Image, size: int) -> Image.Image:
    return ImageOps.pad(
        image, (size, size), method=Image.Resampling.LANCZOS, color=(0, 0, 0, 0)
    )


def _apple_icon(image: Image.Image, size: int) -> Image.Image:
    # iOS renders transparency as black; flatten onto a solid background
    canvas = Image.new("RGBA", (size, size), APPLE_ICON_BACKGROUND)
    canvas.alpha_composite(_square(image, size))
    return canvas.convert("RGB")


def render_favicons(data: bytes, out_dir: Path) -> list[Path]:
    """Write the Apple-touch and standard favicon set for one source image.

    Everything is rendered locally; no other icon families are produced.
    """
    with Image.open(io.BytesIO(data)) as img:
        source = img.convert("RGBA")

    icons: dict[str, Image.Image] = {}
    for size in APPLE_ICON_SIZES:
        icons[f"apple-touch-icon-{size}x{size}.png"] = _apple_icon(source, size)
    largest = _apple_icon(source, max(APPLE_ICON_SIZES))
    icons["apple-touch-icon.png"] = largest
    icons["apple-touch-icon-precomposed.png"] = largest
    for size in FAVICON_SIZES:
        icons[f"favicon-{size}x{size}.png"] = _square(source, size)

    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, icon in icons.items():
        target = out_dir / name
        icon.save(target, format="PNG")
        written.append(target)

    ico = out_dir / "favicon.ico"
    biggest = max(FAVICON_ICO_SIZES)
    _square(source, biggest).save(
        ico, format="ICO", sizes=[(s, s) for s in FAVICON_ICO_SIZES]
    )
    written.append(ico)
    return written


def build_favicons(config: SiteConfig) -> list[Path]:
    logger = get_logger()
    paths = config["paths"]
    written: list[Path] = []
    for record in src(paths.src_root, paths.source["favicons"]):
        try:
            written.extend(render_favicons(record.contents, paths.build["favicons"]))
        except OSError as e:
            # includes PIL.UnidentifiedImageError (e.g. vector sources)
            logger.warning("Skipping favicon source %s: %s", record.relative, e)
    return written


# --------------------------------------------------------------------------- #
# general images
# --------------------------------------------------------------------------- #


def _optimize_gif(data: bytes) -> bytes:
    buf = io.BytesIO()
    with Image.open(io.BytesIO(data)) as img:
        img.save(
            buf,
            format="GIF",
            interlace=GIF_INTERLACED,
            optimize=True,
            save_all=getattr(img, "is_animated", False),
        )
    return buf.getvalue()


def _optimize_jpeg(data: bytes) -> bytes:
    buf = io.BytesIO()
    with Image.open(io.BytesIO(data)) as img:
        img.save(
            buf,
            format="JPEG",
            quality=JPEG_QUALITY,
            progressive=JPEG_PROGRESSIVE,
            optimize=True,
        )
    return buf.getvalue()


def _optimize_png(data: bytes) -> bytes:
    buf = io.BytesIO()
    with Image.open(io.BytesIO(data)) as img:
        img.save(buf, format="PNG", compress_level=PNG_COMPRESS_LEVEL)
    return buf.getvalue()


OPTIMIZERS: dict[str, Callable[[bytes], bytes]] = {
    ".gif": _optimize_gif,
    ".jpg": _optimize_jpeg,
    ".jpeg": _optimize_jpeg,
    ".png": _optimize_png,
    ".svg": optimize_svg,
}


def optimize_images(records: Iterable[FileRecord]) -> Iterator[FileRecord]:
    """Re-encode each image with its format's optimizer.

    Formats without an optimizer (e.g. .ico) pass through untouched; a file
    that fails to decode is logged and left out of this run.
    """
    logger = get_logger()
    for record in records:
        optimizer = OPTIMIZERS.get(record.path.suffix.lower())
        if optimizer is None:
            yield record
            continue
        try:
            data = optimizer(record.contents)
        except (OSError, ValueError, ET.ParseError) as e:
            logger.warning("Skipping image %s: %s", record.relative, e)
            continue
        logger.trace(
            "[IMG] %s %d → %d bytes", record.relative, len(record.contents), len(data)
        )
        yield FileRecord(path=record.path, base=record.base, contents=data)


def image_steps(dest_dir: Path) -> list[Step]:
    return [ChangeTracker(dest_dir), optimize_images, dest(dest_dir)]


def build_general_images(config: SiteConfig) -> list[Path]:
    paths = config["paths"]
    records = src(
        paths.src_root,
        paths.source["img"],
        exclude=[*paths.source["sprite"], *paths.source["favicons"]],
    )
    return [r.path for r in run_chain(records, image_steps(paths.build["img"]))]


def build_images(config: SiteConfig) -> list[Path]:
    return [
        *build_sprite_sheet(config),
        *build_favicons(config),
        *build_general_images(config),
    ]
