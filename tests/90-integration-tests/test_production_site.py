# tests/90-integration-tests/test_production_site.py
"""End-to-end production build of a small but complete site."""

from pathlib import Path

import pytest

import sitesmith.tasks as mod_tasks
from sitesmith.types import Environment, SiteConfig
from tests.utils import (
    force_mtime_advance,
    gif_bytes,
    jpeg_bytes,
    make_site,
    png_bytes,
    svg_bytes,
    write_tree,
)

PAGE = """<!DOCTYPE html>
<html>
  <head>
    <!-- page head -->
    <link rel="stylesheet" href="../../assets/style.min.css">
  </head>
  <body>
    @@include('../partials/nav.html', {"title": "Home"})
    <img src="../../assets/images/photo.jpg">
  </body>
</html>
"""

STYLE = """@import "components/**/*.scss";
$gap: 32px;
.box { margin: $gap; appearance: none; }
@media (min-width: 600px) { .box { margin: 8px; } }
"""

COMPONENT = "@media (min-width: 600px) { .card { padding: 48px; } }\n"

SCRIPT = "const greet = (name) => `hi ${name}`;\nconsole.log(greet('site'));\n"


@pytest.fixture
def site(tmp_path: Path) -> SiteConfig:
    return make_site(
        tmp_path,
        {
            "pages/index.html": PAGE,
            "partials/nav.html": "<nav><h1>@@title</h1></nav>",
            "assets/styles/main.scss": STYLE,
            "assets/styles/components/card.scss": COMPONENT,
            "assets/scripts/main.js": SCRIPT,
            "assets/images/photo.jpg": jpeg_bytes(),
            "assets/images/sprite/arrow.svg": svg_bytes(element_id="tip"),
            "assets/images/favicon/icon.png": png_bytes((64, 64)),
            "assets/fonts/body.woff2": b"wOF2-body",
        },
        env=Environment.PRODUCTION,
    )


def test_production_build_writes_every_asset(site: SiteConfig) -> None:
    # --- setup ---
    out = site["paths"].dest_root
    out.mkdir(parents=True)
    (out / "stale.txt").write_text("left over")

    # --- execute ---
    mod_tasks.clean(site)
    report = mod_tasks.build_all(site)

    # --- verify ---
    assert report.ok
    assert not (out / "stale.txt").exists()

    html = (out / "index.html").read_text()
    assert "<h1>Home</h1>" in html
    assert "<!--" not in html
    assert "assets/images/photo.jpg" in html
    assert "../../assets" not in html

    css = (out / "assets" / "style.min.css").read_text()
    assert css.count("@media") == 1
    assert "600px" in css
    assert "2rem" in css
    assert ".5rem" in css
    assert "3rem" in css
    assert "-webkit-appearance" in css
    assert "sourceMappingURL" not in css

    js = (out / "assets" / "script.min.js").read_text()
    assert "=>" not in js
    assert "greet" in js
    assert "sourceMappingURL" not in js

    img = out / "assets" / "images"
    assert (img / "photo.jpg").exists()
    assert 'id="arrow"' in (img / "sprite.svg").read_text()
    assert (img / "favicons" / "favicon.ico").exists()
    assert (img / "favicons" / "apple-touch-icon-180x180.png").exists()
    assert not (img / "favicon").exists()
    assert not (img / "sprite").exists()

    assert (out / "assets" / "fonts" / "body.woff2").read_bytes() == b"wOF2-body"


def test_second_build_leaves_fresh_images_alone(site: SiteConfig) -> None:
    # --- setup ---
    mod_tasks.clean(site)
    mod_tasks.build_all(site)
    photo = site["paths"].build["img"] / "photo.jpg"
    first = photo.stat().st_mtime_ns

    # --- execute ---
    report = mod_tasks.build_all(site)

    # --- verify ---
    assert report.ok
    assert photo not in report.outputs["img"]
    assert photo.stat().st_mtime_ns == first


def test_production_scenario_optimizes_only_new_images(tmp_path: Path) -> None:
    # --- setup ---
    config = make_site(
        tmp_path,
        {
            "pages/index.html": PAGE,
            "partials/nav.html": "<nav><h1>@@title</h1></nav>",
            "assets/styles/main.scss": '@import "components/**/*.scss";\n',
            "assets/styles/components/card.scss": COMPONENT,
            "assets/scripts/main.js": SCRIPT,
            "assets/images/photo.jpg": jpeg_bytes(),
            "assets/images/logo.png": png_bytes(),
            "assets/images/icons/dot.gif": gif_bytes(),
            "assets/fonts/body.woff": b"wOFF-body",
            "assets/fonts/head/title.woff2": b"wOF2-title",
        },
        env=Environment.PRODUCTION,
    )
    img_out = config["paths"].build["img"]
    write_tree(img_out, {"photo.jpg": b"already optimized"})
    current = img_out / "photo.jpg"
    force_mtime_advance(current)
    seeded_mtime = current.stat().st_mtime_ns

    # --- execute ---
    report = mod_tasks.build_all(config)

    # --- verify ---
    assert report.ok
    out = config["paths"].dest_root
    assert sorted(p.name for p in out.glob("*.html")) == ["index.html"]
    html = (out / "index.html").read_text()
    assert "<h1>Home</h1>" in html
    assert "<!--" not in html

    css = (out / "assets" / "style.min.css").read_text()
    assert "padding:3rem" in css
    assert "\n" not in css.strip()

    js = (out / "assets" / "script.min.js").read_text()
    assert "=>" not in js
    assert "`" not in js

    assert sorted(report.outputs["img"]) == sorted(
        [img_out / "logo.png", img_out / "icons" / "dot.gif"]
    )
    assert current.read_bytes() == b"already optimized"
    assert current.stat().st_mtime_ns == seeded_mtime

    fonts = out / "assets" / "fonts"
    assert (fonts / "body.woff").read_bytes() == b"wOFF-body"
    assert (fonts / "head" / "title.woff2").read_bytes() == b"wOF2-title"
