# tests/30-utils-tests/test_logs_streams.py

import pytest

import sitesmith.logs as mod_logs
from sitesmith.runtime import current_runtime


def test_info_goes_to_stdout_warning_to_stderr(
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- execute ---
    logger = mod_logs.get_logger()
    logger.info("hello out")
    logger.warning("hello err")

    # --- verify ---
    captured = capsys.readouterr()
    assert "hello out" in captured.out
    assert "hello err" in captured.err
    assert "⚠️" in captured.err


def test_trace_hidden_at_info_and_shown_at_trace(
    capsys: pytest.CaptureFixture[str],
) -> None:
    logger = mod_logs.get_logger()
    logger.trace("invisible")
    assert "invisible" not in capsys.readouterr().out

    mod_logs.set_log_level("trace")
    mod_logs.get_logger().trace("visible")
    assert "[TRACE] visible" in capsys.readouterr().out


def test_level_follows_runtime(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(current_runtime, "log_level", "error")
    assert mod_logs.get_logger().level == mod_logs.LEVELS["error"]


def test_silent_suppresses_errors(capsys: pytest.CaptureFixture[str]) -> None:
    mod_logs.set_log_level("silent")
    mod_logs.get_logger().error("nope")
    assert "nope" not in capsys.readouterr().err


def test_debug_tag_colored_only_when_enabled(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    mod_logs.set_log_level("debug")
    mod_logs.get_logger().debug("plain")
    assert "[DEBUG] plain" in capsys.readouterr().out

    monkeypatch.setitem(current_runtime, "use_color", True)
    mod_logs.get_logger().debug("tinted")
    out = capsys.readouterr().out
    assert f"[DEBUG]{mod_logs.RESET} tinted" in out
