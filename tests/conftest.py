# tests/conftest.py
"""Shared test setup: a clean runtime and environment for every test."""

import pytest
from pytest import Config, Item as PytestItem

from sitesmith.runtime import current_runtime

ENV_VARS = (
    "SITESMITH_ENV",
    "NODE_ENV",
    "SITESMITH_LOG_LEVEL",
    "LOG_LEVEL",
    "WATCH_INTERVAL",
    "NO_COLOR",
    "FORCE_COLOR",
)


@pytest.fixture(autouse=True)
def _isolate_runtime(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start each test at info level, no color, with no stray env overrides."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setitem(current_runtime, "log_level", "info")
    monkeypatch.setitem(current_runtime, "use_color", False)


def pytest_collection_modifyitems(
    config: Config,
    items: list[PytestItem],
) -> None:
    """Skip tests marked `debug` unless they were asked for with -k debug."""
    keywords = config.getoption("-k") or ""
    if "debug" in keywords.lower():
        return

    for item in items:
        if "debug" in item.keywords:
            item.add_marker(
                pytest.mark.skip(reason="Skipped debug test (use -k debug to run)")
            )
