# tests/50-build-tests/test_styles_bundle.py

import base64
import json
from pathlib import Path

import pytest

import sitesmith.styles as mod_styles
from sitesmith.sourcemap import decode_mappings
from sitesmith.types import Environment
from tests.utils import make_site

MAIN_SCSS = """\
@import "partials/*";
$gap: 32px;
/* regular comment */
.box { margin: $gap; user-select: none; z-index: 3; }
@media (max-width: 600px) { .box { padding: 16px; } }
.thin { border: 1px solid; }
@media (max-width: 600px) { .thin { display: none; } }
"""


def _site(tmp_path: Path, env: Environment, **extra: str):
    files = {
        "assets/styles/main.scss": MAIN_SCSS,
        "assets/styles/partials/_base.scss": "body { font-size: 16px; }\n",
        **extra,
    }
    return make_site(tmp_path, files, env=env)


def test_development_bundle_has_inline_map(tmp_path: Path) -> None:
    # --- setup ---
    config = _site(tmp_path, Environment.DEVELOPMENT)

    # --- execute ---
    written = mod_styles.build_styles(config)

    # --- verify ---
    out = tmp_path / "docs" / "assets" / "style.min.css"
    assert written == [out]
    css = out.read_text()
    assert "margin: 2rem" in css
    assert "font-size: 1rem" in css
    assert "border: 1px solid" in css
    assert css.count("@media") == 2  # not grouped in development
    assert "-webkit-user-select" not in css
    assert "/*# sourceMappingURL=data:application/json" in css


def test_production_bundle_is_grouped_prefixed_and_minified(tmp_path: Path) -> None:
    # --- setup ---
    config = _site(tmp_path, Environment.PRODUCTION)

    # --- execute ---
    mod_styles.build_styles(config)

    # --- verify ---
    css = (tmp_path / "docs" / "assets" / "style.min.css").read_text()
    assert "sourceMappingURL" not in css
    assert "/*" not in css
    assert css.count("@media") == 1
    assert "margin:2rem" in css
    assert "padding:1rem" in css
    assert "-webkit-user-select:none" in css
    assert "z-index:3" in css
    assert "\n" not in css.strip()


def test_style_libs_are_concatenated_first(tmp_path: Path) -> None:
    # --- setup ---
    lib = tmp_path / "vendor" / "reset.css"
    lib.parent.mkdir()
    lib.write_text(".reset { margin: 0; }\n")
    config = make_site(
        tmp_path,
        {"assets/styles/main.scss": ".main { color: red; }\n"},
        style_libs=(lib,),
    )

    # --- execute ---
    mod_styles.build_styles(config)

    # --- verify ---
    css = (tmp_path / "docs" / "assets" / "style.min.css").read_text()
    assert css.index(".reset") < css.index(".main")


def test_sass_error_skips_output_and_logs(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    config = make_site(tmp_path, {"assets/styles/main.scss": ".broken { color: red;"})

    # --- execute ---
    written = mod_styles.build_styles(config)

    # --- verify ---
    assert written == []
    assert not (tmp_path / "docs" / "assets" / "style.min.css").exists()
    assert "Sass compilation failed" in capsys.readouterr().err


def test_missing_entry_writes_nothing(tmp_path: Path) -> None:
    config = make_site(tmp_path, {})
    assert mod_styles.build_styles(config) == []


def _inline_map(css: str) -> dict:
    marker = "sourceMappingURL=data:application/json;charset=utf8;base64,"
    payload = css.split(marker, 1)[1].split(" */", 1)[0]
    return json.loads(base64.b64decode(payload))


def test_development_map_points_nested_rules_at_their_source(
    tmp_path: Path,
) -> None:
    # --- setup ---
    config = make_site(
        tmp_path,
        {
            "assets/styles/main.scss": (
                '@import "partials/base";\n'
                "$c: red;\n"
                "\n"
                ".nav {\n"
                "  .item {\n"
                "    color: $c;\n"
                "  }\n"
                "}\n"
            ),
            "assets/styles/partials/_base.scss": "body {\n  margin: 0;\n}\n",
        },
    )

    # --- execute ---
    mod_styles.build_styles(config)

    # --- verify ---
    css = (tmp_path / "docs" / "assets" / "style.min.css").read_text()
    smap = _inline_map(css)
    lines = decode_mappings(smap["mappings"])
    css_lines = css.split("\n")

    nested = next(i for i, line in enumerate(css_lines) if ".nav .item" in line)
    _gen, src, src_line, _col = lines[nested][0]
    assert smap["sources"][src] == "main.scss"
    assert src_line in (3, 4)  # `.nav {` or `.item {`, never `$c: red;`

    body = next(i for i, line in enumerate(css_lines) if line.startswith("body"))
    _gen, src, src_line, _col = lines[body][0]
    assert smap["sources"][src] == "partials/_base.scss"
    assert src_line == 0
