# tests/70-config-tests/test_load_config.py

from pathlib import Path

import pytest

import sitesmith.config as mod_config


def test_load_config_reads_jsonc(tmp_path: Path) -> None:
    cfg = tmp_path / ".sitesmith.jsonc"
    cfg.write_text('{\n  // production by default\n  "env": "prod",\n}\n')
    assert mod_config.load_config(cfg) == {"env": "prod"}


@pytest.mark.parametrize("text", ["", "// only a comment", "{}"])
def test_load_config_empty_is_none(tmp_path: Path, text: str) -> None:
    cfg = tmp_path / ".sitesmith.jsonc"
    cfg.write_text(text)
    assert mod_config.load_config(cfg) is None


def test_load_config_rejects_list_root(tmp_path: Path) -> None:
    cfg = tmp_path / ".sitesmith.json"
    cfg.write_text('["src"]')
    with pytest.raises(TypeError, match="must contain an object"):
        mod_config.load_config(cfg)


def test_load_config_syntax_error_names_file(tmp_path: Path) -> None:
    cfg = tmp_path / ".sitesmith.json"
    cfg.write_text('{"port": }')
    with pytest.raises(ValueError, match=r"'\.sitesmith\.json'"):
        mod_config.load_config(cfg)
