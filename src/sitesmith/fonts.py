# src/sitesmith/fonts.py
"""Fonts are copied as-is."""

from __future__ import annotations

from pathlib import Path

from .stream import dest, run_chain, src
from .types import SiteConfig


def build_fonts(config: SiteConfig) -> list[Path]:
    paths = config["paths"]
    records = src(paths.src_root, paths.source["font"])
    return [r.path for r in run_chain(records, [dest(paths.build["font"])])]
