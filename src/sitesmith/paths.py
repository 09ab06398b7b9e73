# src/sitesmith/paths.py
"""Fixed source/destination layout of a site."""

from collections.abc import Iterable
from pathlib import Path
from types import MappingProxyType

from .types import PathConfig

IMAGE_EXTS = "{jpg,png,svg,gif,ico}"

SOURCE_GLOBS: dict[str, tuple[str, ...]] = {
    "html": ("pages/*.html",),
    "css": ("assets/styles/main.scss",),
    "js": ("assets/scripts/main.js",),
    "sprite": ("assets/images/sprite/**/*.svg",),
    "favicons": (f"assets/images/favicon/*.{IMAGE_EXTS}",),
    "img": (f"assets/images/**/*.{IMAGE_EXTS}",),
    "font": ("assets/fonts/**/*.{woff,woff2}",),
}

# Broader than SOURCE_GLOBS so edits to partials and imported modules
# also trigger a rebuild of the owning bundle.
WATCH_GLOBS: dict[str, tuple[str, ...]] = {
    "html": ("**/*.html",),
    "css": ("**/*.scss",),
    "js": ("**/*.js",),
    "img": (f"assets/images/**/*.{IMAGE_EXTS}",),
    "font": ("assets/fonts/**/*.{ttf,woff,woff2}",),
}

BUILD_DIRS: dict[str, str] = {
    "html": ".",
    "css": "assets",
    "js": "assets",
    "img": "assets/images",
    "favicons": "assets/images/favicons",
    "font": "assets/fonts",
}


def make_path_config(
    src_root: Path | str,
    dest_root: Path | str,
    *,
    style_libs: Iterable[Path | str] = (),
    script_libs: Iterable[Path | str] = (),
) -> PathConfig:
    """Build the immutable PathConfig for a (src, dest) root pair.

    Library paths are taken as given (relative ones against the cwd);
    they are concatenated ahead of the entry file in the listed order.
    """
    src = Path(src_root).resolve()
    dest = Path(dest_root).resolve()
    build = {role: (dest / rel).resolve() for role, rel in BUILD_DIRS.items()}

    return PathConfig(
        src_root=src,
        dest_root=dest,
        source=MappingProxyType(dict(SOURCE_GLOBS)),
        watch=MappingProxyType(dict(WATCH_GLOBS)),
        build=MappingProxyType(build),
        style_libs=tuple(Path(p) for p in style_libs),
        script_libs=tuple(Path(p) for p in script_libs),
    )
