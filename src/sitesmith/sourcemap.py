# src/sitesmith/sourcemap.py
"""Minimal v3 source maps for concatenated bundles.

Our own maps are recorded at line granularity: each non-empty line of an
input file is attributed to column 0 of the same line in its source. Maps
from the Sass compiler are decoded and composed on top of them.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

# generated column, source index, source line, source column
Segment = tuple[int, int, int, int]


def encode_vlq(value: int) -> str:
    """Base64 VLQ encoding as used by the `mappings` field."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & 0b11111
        vlq >>= 5
        if vlq:
            digit |= 0b100000
        out.append(_B64[digit])
        if not vlq:
            return "".join(out)


def decode_vlq(text: str) -> list[int]:
    values: list[int] = []
    acc = shift = 0
    for char in text:
        digit = _B64.index(char)
        acc |= (digit & 0b11111) << shift
        if digit & 0b100000:
            shift += 5
            continue
        values.append(-(acc >> 1) if acc & 1 else acc >> 1)
        acc = shift = 0
    return values


def decode_mappings(mappings: str) -> list[list[Segment]]:
    """Inverse of `SourceMap.encode_mappings`; name indices are dropped."""
    lines: list[list[Segment]] = []
    src = src_line = src_col = 0
    for line_text in mappings.split(";"):
        gen = 0
        segments: list[Segment] = []
        for chunk in line_text.split(","):
            if not chunk:
                continue
            fields = decode_vlq(chunk)
            gen += fields[0]
            if len(fields) < 4:  # generated column with no source
                continue
            src += fields[1]
            src_line += fields[2]
            src_col += fields[3]
            segments.append((gen, src, src_line, src_col))
        lines.append(segments)
    return lines


def _advance(line: int, col: int, text: str) -> tuple[int, int]:
    """Return the (line, column) reached after appending `text`."""
    newlines = text.count("\n")
    if newlines:
        return line + newlines, len(text.rsplit("\n", 1)[1])
    return line, col + len(text)


@dataclass
class SourceMap:
    file: str
    sources: list[str] = field(default_factory=list)
    sources_content: list[str] = field(default_factory=list)
    lines: list[list[Segment]] = field(default_factory=list)

    @classmethod
    def identity(cls, file: str, source: str, text: str) -> SourceMap:
        lines: list[list[Segment]] = [
            [(0, 0, i, 0)] if line else [] for i, line in enumerate(text.split("\n"))
        ]
        return cls(file=file, sources=[source], sources_content=[text], lines=lines)

    @classmethod
    def concatenate(
        cls,
        file: str,
        parts: Sequence[tuple[str, SourceMap | None]],
        separator: str,
    ) -> SourceMap:
        """Merge per-file maps for `separator.join(texts)`."""
        merged = cls(file=file)
        line, col = 0, 0
        for index, (text, smap) in enumerate(parts):
            if index:
                line, col = _advance(line, col, separator)
            if smap is not None:
                offset = len(merged.sources)
                merged.sources.extend(smap.sources)
                merged.sources_content.extend(smap.sources_content)
                for i, segments in enumerate(smap.lines):
                    while len(merged.lines) <= line + i:
                        merged.lines.append([])
                    shift = col if i == 0 else 0
                    merged.lines[line + i].extend(
                        (gen + shift, src + offset, src_line, src_col)
                        for gen, src, src_line, src_col in segments
                    )
            line, col = _advance(line, col, text)
        return merged

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SourceMap:
        """Load a v3 map as produced by another tool (e.g. libsass)."""
        sources = [str(s) for s in data.get("sources", [])]
        contents = list(data.get("sourcesContent") or [])
        contents += [None] * (len(sources) - len(contents))
        return cls(
            file=str(data.get("file", "")),
            sources=sources,
            sources_content=[c or "" for c in contents],
            lines=decode_mappings(str(data.get("mappings", ""))),
        )

    def lookup(self, line: int, col: int) -> tuple[int, int, int] | None:
        """Return (source index, line, column) for a generated position."""
        if line >= len(self.lines):
            return None
        found = None
        for gen, src, src_line, src_col in self.lines[line]:
            if gen > col:
                break
            found = (src, src_line, src_col + col - gen)
        return found

    def compose(self, index: int, inner: SourceMap) -> SourceMap:
        """Send segments that point into source `index` on through `inner`.

        `inner` maps the text of that source back to its own sources; every
        other source of this map is kept as is.
        """
        kept = [i for i in range(len(self.sources)) if i != index]
        renumber = {old: new for new, old in enumerate(kept)}
        offset = len(kept)
        out = SourceMap(
            file=self.file,
            sources=[self.sources[i] for i in kept] + inner.sources,
            sources_content=[self.sources_content[i] for i in kept]
            + inner.sources_content,
        )
        for segments in self.lines:
            line_out: list[Segment] = []
            for gen, src, src_line, src_col in segments:
                if src != index:
                    line_out.append((gen, renumber[src], src_line, src_col))
                    continue
                hit = inner.lookup(src_line, src_col)
                if hit is not None:
                    line_out.append((gen, hit[0] + offset, hit[1], hit[2]))
            out.lines.append(line_out)
        return out

    def encode_mappings(self) -> str:
        prev_src = prev_line = prev_col = 0
        encoded_lines = []
        for segments in self.lines:
            prev_gen = 0
            encoded = []
            for gen, src, src_line, src_col in segments:
                encoded.append(
                    encode_vlq(gen - prev_gen)
                    + encode_vlq(src - prev_src)
                    + encode_vlq(src_line - prev_line)
                    + encode_vlq(src_col - prev_col)
                )
                prev_gen, prev_src, prev_line, prev_col = gen, src, src_line, src_col
            encoded_lines.append(",".join(encoded))
        return ";".join(encoded_lines)

    def to_dict(self) -> dict[str, object]:
        return {
            "version": 3,
            "file": self.file,
            "sources": self.sources,
            "sourcesContent": self.sources_content,
            "names": [],
            "mappings": self.encode_mappings(),
        }

    def inline_comment(self, *, block: bool) -> str:
        """Return a `sourceMappingURL` data-URI comment.

        block=True gives the CSS form, otherwise the `//` JS form.
        """
        payload = json.dumps(self.to_dict(), separators=(",", ":"))
        data = base64.b64encode(payload.encode("utf-8")).decode("ascii")
        url = f"data:application/json;charset=utf8;base64,{data}"
        if block:
            return f"\n/*# sourceMappingURL={url} */\n"
        return f"\n//# sourceMappingURL={url}\n"
