# src/sitesmith/types.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal, TypedDict

from typing_extensions import NotRequired

OriginType = Literal["cli", "config", "env", "default", "test"]

AssetRole = Literal["html", "css", "js", "img", "sprite", "favicons", "font"]


class Environment(Enum):
    """Build mode; fixed for the lifetime of a run."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, raw: str) -> Environment:
        """Accept 'development'/'dev' and 'production'/'prod' (any case)."""
        value = raw.strip().lower()
        aliases = {"dev": cls.DEVELOPMENT, "prod": cls.PRODUCTION}
        if value in aliases:
            return aliases[value]
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(e.value for e in cls)
            xmsg = f"Unknown environment {raw!r} (expected one of: {choices})"
            raise ValueError(xmsg) from None

    @property
    def is_production(self) -> bool:
        return self is Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self is Environment.DEVELOPMENT


@dataclass(frozen=True)
class PathConfig:
    """Where every asset role is read from and written to.

    `source` globs are what the one-shot transforms read; `watch` globs are
    broader and only drive the watcher. Both are relative to `src_root`.
    """

    src_root: Path
    dest_root: Path
    source: Mapping[str, tuple[str, ...]]
    watch: Mapping[str, tuple[str, ...]]
    build: Mapping[str, Path]
    style_libs: tuple[Path, ...] = ()
    script_libs: tuple[Path, ...] = ()


class RootConfigInput(TypedDict, total=False):
    env: str
    src: str
    dest: str
    style_libs: list[str]
    script_libs: list[str]

    # dev server / watcher
    host: str
    port: int
    watch_interval: float

    log_level: str
    include_prefix: str
    strict_config: bool


class MetaSiteConfig(TypedDict):
    # sources of parameters
    cli_root: Path
    config_root: Path
    config_path: NotRequired[Path]


class SiteConfig(TypedDict):
    env: Environment
    paths: PathConfig

    host: str
    port: int
    watch_interval: float

    log_level: str
    include_prefix: str

    # global provenance (optional, for audit/debug)
    __meta__: MetaSiteConfig


# one asset category: reads from config["paths"], returns the files it wrote
Transform = Callable[[SiteConfig], list[Path]]
