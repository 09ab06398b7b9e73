# tests/80-cli-tests/test_cli.py
"""Tests for sitesmith.cli."""

import json
from pathlib import Path

import pytest

import sitesmith.cli as mod_cli
import sitesmith.meta as mod_meta
from sitesmith.tasks import CleanError
from sitesmith.types import Environment, SiteConfig


@pytest.fixture
def captured_run(monkeypatch: pytest.MonkeyPatch) -> list[SiteConfig]:
    """Replace the clean → build → observe run with a recorder."""
    configs: list[SiteConfig] = []
    monkeypatch.setattr(mod_cli, "run", configs.append)
    return configs


def test_help_flag(capsys: pytest.CaptureFixture[str]) -> None:
    """Should print usage information and exit cleanly when --help is passed."""
    # --- execute ---
    with pytest.raises(SystemExit) as e:
        mod_cli.main(["--help"])

    # --- verify ---
    assert e.value.code == 0
    out = capsys.readouterr().out
    assert "usage:" in out.lower()
    assert mod_meta.PROGRAM_SCRIPT in out
    assert "--env" in out
    assert "--watch-interval" in out


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    """Should print version and commit info, then exit with code 0."""
    code = mod_cli.main(["--version"])
    out = capsys.readouterr().out
    assert code == 0
    assert mod_meta.PROGRAM_DISPLAY in out


def test_typo_flag_gets_hint(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as e:
        mod_cli.main(["--prot", "8080"])
    assert e.value.code == 2
    assert "did you mean --port?" in capsys.readouterr().err


def test_main_without_config_runs_with_defaults(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    captured_run: list[SiteConfig],
) -> None:
    # --- setup ---
    (tmp_path / "src").mkdir()
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    code = mod_cli.main([])

    # --- verify ---
    assert code == 0
    (config,) = captured_run
    assert config["env"] is Environment.DEVELOPMENT
    assert config["paths"].src_root == (tmp_path / "src").resolve()
    assert config["paths"].dest_root == (tmp_path / "docs").resolve()


def test_main_env_flag_and_overrides(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    captured_run: list[SiteConfig],
) -> None:
    monkeypatch.chdir(tmp_path)

    code = mod_cli.main(
        ["--env", "PROD", "--src", "site", "--dest", "out", "--port", "8000"]
    )

    assert code == 0
    (config,) = captured_run
    assert config["env"] is Environment.PRODUCTION
    assert config["paths"].src_root == (tmp_path / "site").resolve()
    assert config["port"] == 8000


def test_main_uses_config_file(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    captured_run: list[SiteConfig],
) -> None:
    # --- setup ---
    config_file = tmp_path / f".{mod_meta.PROGRAM_SCRIPT}.json"
    config_file.write_text(json.dumps({"env": "production", "dest": "public"}))
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    code = mod_cli.main([])

    # --- verify ---
    assert code == 0
    (config,) = captured_run
    assert config["env"] is Environment.PRODUCTION
    assert config["paths"].dest_root == (tmp_path / "public").resolve()
    assert config["__meta__"]["config_path"] == config_file.resolve()
    assert "Using config" in capsys.readouterr().out


def test_main_invalid_config_exits_1(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    captured_run: list[SiteConfig],
) -> None:
    (tmp_path / f".{mod_meta.PROGRAM_SCRIPT}.json").write_text('{"port": "x"}')
    monkeypatch.chdir(tmp_path)

    assert mod_cli.main([]) == 1
    assert captured_run == []


def test_main_bad_node_env_exits_1(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    captured_run: list[SiteConfig],
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NODE_ENV", "staging")

    assert mod_cli.main([]) == 1
    assert "Unknown environment" in capsys.readouterr().err


def test_main_clean_error_exits_1(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    def fail(_config: SiteConfig) -> None:
        raise CleanError("Failed to clean docs: busy")

    monkeypatch.setattr(mod_cli, "run", fail)
    monkeypatch.chdir(tmp_path)

    # --- execute and verify ---
    assert mod_cli.main([]) == 1
    assert "Failed to clean docs" in capsys.readouterr().err


def test_main_ctrl_c_exits_0(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def interrupted(_config: SiteConfig) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr(mod_cli, "run", interrupted)
    monkeypatch.chdir(tmp_path)

    assert mod_cli.main([]) == 0
    assert capsys.readouterr().out.count("Watch stopped") == 1


def test_main_unexpected_error_is_critical(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def crash(_config: SiteConfig) -> None:
        raise LookupError("weird")

    monkeypatch.setattr(mod_cli, "run", crash)
    monkeypatch.chdir(tmp_path)

    assert mod_cli.main([]) == 1
    err = capsys.readouterr().err
    assert "Unexpected internal error: weird" in err
    assert "💥" in err


def test_selftest_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(mod_cli, "run_selftest", lambda: False)
    assert mod_cli.main(["--selftest"]) == 1
    monkeypatch.setattr(mod_cli, "run_selftest", lambda: True)
    assert mod_cli.main(["--selftest"]) == 0
