# tests/50-build-tests/test_css_tools_transforms.py

from pathlib import Path

import pytest

import sitesmith.css_tools as mod_css
from tests.utils import write_tree


@pytest.mark.parametrize(
    ("css", "expected"),
    [
        (".a{margin:16px}", ".a{margin:1rem}"),
        (".a{margin:32px 24px}", ".a{margin:2rem 1.5rem}"),
        (".a{width:15px}", ".a{width:0.9375rem}"),
        (".a{border:1.5px solid}", ".a{border:1.5px solid}"),
        (".a{top:-16px}", ".a{top:-16px}"),
        (".a{width:calc(100% - 32px)}", ".a{width:calc(100% - 2rem)}"),
        (".a{margin:2em}", ".a{margin:2em}"),
    ],
)
def test_px_to_rem(css: str, expected: str) -> None:
    assert mod_css.px_to_rem(css) == expected


def test_px_to_rem_leaves_media_queries_alone() -> None:
    css = "@media (min-width: 768px){.a{width:32px}}"
    assert mod_css.px_to_rem(css) == "@media (min-width: 768px){.a{width:2rem}}"


def test_px_to_rem_rounds_to_precision() -> None:
    # 7 / 16 = 0.4375; 100 / 3 ≈ 33.33333 at root 3
    assert mod_css.px_to_rem(".a{x:7px}") == ".a{x:0.4375rem}"
    assert mod_css.px_to_rem(".a{x:100px}", root_value=3) == ".a{x:33.33333rem}"


def test_group_media_queries_merges_identical_queries() -> None:
    # --- setup ---
    css = (
        ".a{color:red}\n"
        "@media (max-width: 600px){.b{color:blue}}\n"
        ".c{color:green}\n"
        "@media (max-width: 600px){.d{color:black}}\n"
        "@media print{.e{display:none}}\n"
    )

    # --- execute ---
    result = mod_css.group_media_queries(css)

    # --- verify ---
    assert result.count("@media (max-width: 600px)") == 1
    assert result.index(".c{") < result.index("@media")
    merged = result[result.index("@media (max-width: 600px)") :]
    assert merged.index(".b{") < merged.index(".d{") < merged.index("@media print")


def test_autoprefix_adds_vendor_twins() -> None:
    # --- execute ---
    result = mod_css.autoprefix(
        "/* x */ .a{user-select:none;color:red}.b{position:sticky}"
    )

    # --- verify ---
    assert "-webkit-user-select:none" in result
    assert "-moz-user-select:none" in result
    assert "position:-webkit-sticky" in result
    assert "color:red" in result
    assert "/*" not in result


def test_autoprefix_keeps_existing_prefix_and_nests_media() -> None:
    css = "@media screen{.a{-webkit-appearance:none;appearance:none}}"
    result = mod_css.autoprefix(css)
    assert result.count("-webkit-appearance") == 1
    assert "-moz-appearance:none" in result
    assert result.startswith("@media screen{")


def test_autoprefix_only_touches_listed_properties() -> None:
    css = ".a{display:flex;transform:scale(2);transition:opacity 1s}"
    result = mod_css.autoprefix(css)
    assert "-webkit-" not in result
    assert "-moz-" not in result
    assert {"flex", "transform", "transition"}.isdisjoint(mod_css.PROPERTY_PREFIXES)


def test_minify_css_drops_comments_and_empty_rules_keeps_z_index() -> None:
    # --- execute ---
    result = mod_css.minify_css(
        "/*! banner */\n.a {\n  z-index: 100;\n}\n/* note */\n.empty {}\n"
    )

    # --- verify ---
    assert "z-index:100" in result
    assert "/*" not in result
    assert ".empty" not in result


def test_expand_glob_imports(tmp_path: Path) -> None:
    # --- setup ---
    write_tree(
        tmp_path,
        {
            "partials/_b.scss": "",
            "partials/_a.scss": "",
            "partials/readme.md": "",
        },
    )
    text = '@import "partials/*";\n@import "vars";\n'

    # --- execute ---
    result = mod_css.expand_glob_imports(text, tmp_path)

    # --- verify ---
    assert result == (
        '@import "partials/_a.scss";\n@import "partials/_b.scss";\n@import "vars";\n'
    )


def test_expand_glob_imports_without_matches(tmp_path: Path) -> None:
    assert mod_css.expand_glob_imports('@import "none/**/*.scss";', tmp_path) == ""
