# src/sitesmith/meta.py

"""Centralized program identity constants for Sitesmith."""

from typing import NamedTuple

_BASE = "sitesmith"

# CLI script name (the executable or `poetry run` entrypoint)
PROGRAM_SCRIPT = _BASE

# Human-readable name for banners, help text, etc.
PROGRAM_DISPLAY = _BASE.replace("-", " ").title()

# Python package / import name
PROGRAM_PACKAGE = _BASE.replace("-", "_")

# Environment variable prefix (used for SITESMITH_LOG_LEVEL, etc.)
PROGRAM_ENV = _BASE.replace("-", "_").upper()

# Short tagline or description for help screens and metadata
DESCRIPTION = "Static-site asset pipeline: clean, build, watch and serve."


class Metadata(NamedTuple):
    version: str
    commit: str
