# src/sitesmith/svg.py
"""SVG helpers: symbol sprites and lossless minification."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from pathlib import Path

from .logs import get_logger
from .stream import FileRecord

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# editor bookkeeping that never affects rendering
EDITOR_NAMESPACES = {
    "http://www.inkscape.org/namespaces/inkscape",
    "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
    "http://ns.adobe.com/AdobeIllustrator/10.0/",
    "http://www.bohemiancoding.com/sketch/ns",
}

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)


def _namespace(name: str) -> str:
    return name[1:].split("}", 1)[0] if name.startswith("{") else ""


def _local(name: str) -> str:
    return name.rsplit("}", 1)[-1]


def symbol_id(relative: Path) -> str:
    """'icons/arrow left.svg' → 'icons--arrow_left'."""
    stem = relative.with_suffix("").as_posix()
    return re.sub(r"\s+", "_", stem.replace("/", "--"))


def _viewbox(doc: ET.Element) -> str | None:
    viewbox = doc.get("viewBox")
    if viewbox:
        return viewbox
    width, height = doc.get("width"), doc.get("height")
    if width and height:
        w, h = (re.sub(r"px$", "", v.strip()) for v in (width, height))
        return f"0 0 {w} {h}"
    return None


def build_sprite(records: Iterable[FileRecord]) -> bytes | None:
    """Bundle SVGs as <symbol> elements of one document.

    Returns None when there is nothing to bundle.
    """
    logger = get_logger()
    sprite = ET.Element(f"{{{SVG_NS}}}svg")
    count = 0
    for record in records:
        try:
            doc = ET.fromstring(record.contents)
        except ET.ParseError as e:
            logger.warning(
                "Skipping unreadable sprite source %s: %s", record.relative, e
            )
            continue
        symbol = ET.SubElement(
            sprite, f"{{{SVG_NS}}}symbol", id=symbol_id(record.relative)
        )
        viewbox = _viewbox(doc)
        if viewbox:
            symbol.set("viewBox", viewbox)
        for child in list(doc):
            symbol.append(child)
        count += 1

    if not count:
        return None
    _strip_whitespace(sprite)
    return ET.tostring(sprite, encoding="utf-8", xml_declaration=True)


def _strip_whitespace(root: ET.Element) -> None:
    for el in root.iter():
        if el.text is not None and not el.text.strip():
            el.text = None
        if el.tail is not None and not el.tail.strip():
            el.tail = None


def _drop_editor_data(root: ET.Element) -> None:
    for parent in list(root.iter()):
        for child in list(parent):
            if (
                _namespace(child.tag) in EDITOR_NAMESPACES
                or _local(child.tag) == "metadata"
            ):
                parent.remove(child)
    for el in root.iter():
        for attr in [a for a in el.attrib if _namespace(a) in EDITOR_NAMESPACES]:
            del el.attrib[attr]


def optimize_svg(data: bytes) -> bytes:
    """Minify an SVG: drop comments, metadata, editor data and whitespace.

    The root viewBox is removed; element ids are kept so external
    references (CSS, `<use href="#id">`) keep working.
    """
    root = ET.fromstring(data)
    root.attrib.pop("viewBox", None)
    _drop_editor_data(root)
    _strip_whitespace(root)
    return ET.tostring(root, encoding="utf-8")
