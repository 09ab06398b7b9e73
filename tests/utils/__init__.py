# tests/utils/__init__.py

from .force_mtime_advance import force_mtime_advance, set_mtime_ns
from .site import gif_bytes, jpeg_bytes, make_site, png_bytes, svg_bytes, write_tree

__all__ = [
    "force_mtime_advance",
    "gif_bytes",
    "jpeg_bytes",
    "make_site",
    "png_bytes",
    "set_mtime_ns",
    "svg_bytes",
    "write_tree",
]
