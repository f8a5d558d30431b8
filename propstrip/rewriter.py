"""Text splicing over the original source, with a position map back to it.

All offsets are UTF-8 byte offsets into the original text, which is what
tree-sitter reports for node ranges.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from pathlib import PurePath
from typing import Dict, List, Optional, Tuple

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"


@dataclass(frozen=True)
class Segment:
    out_start: int
    out_end: int
    orig_start: int
    generated: bool = False


class PositionMap:
    """Maps offsets in the rewritten text back to the original text."""

    def __init__(self, segments: List[Segment], original_length: int) -> None:
        self.segments = segments
        self.original_length = original_length
        self._starts = [seg.out_start for seg in segments]

    def original_offset(self, out_offset: int) -> int:
        """Original offset for an output offset.

        Inside copied text the mapping is exact; inside generated text
        it is the anchor of the edit that produced it.
        """
        idx = bisect.bisect_right(self._starts, out_offset) - 1
        if idx < 0:
            return 0
        seg = self.segments[idx]
        if out_offset >= seg.out_end:
            return self.original_length if idx == len(self.segments) - 1 else seg.orig_start
        if seg.generated:
            return seg.orig_start
        return seg.orig_start + (out_offset - seg.out_start)

    def to_source_map(self, file_id: str, source: str, code: str) -> dict:
        """Render a Source Map v3 dictionary."""
        src = _LineIndex(source.encode("utf-8"))
        out_bytes = code.encode("utf-8")
        gen = _LineIndex(out_bytes)

        points: Dict[int, int] = {}
        for seg in self.segments:
            if seg.out_end <= seg.out_start:
                continue
            points.setdefault(seg.out_start, seg.orig_start)
            if seg.generated:
                continue
            pos = out_bytes.find(b"\n", seg.out_start, seg.out_end)
            while pos != -1 and pos + 1 < seg.out_end:
                points.setdefault(pos + 1, seg.orig_start + (pos + 1 - seg.out_start))
                pos = out_bytes.find(b"\n", pos + 1, seg.out_end)

        lines: List[List[Tuple[int, int, int]]] = [[] for _ in range(len(gen.starts))]
        for out_offset in sorted(points):
            gen_line, gen_col = gen.locate(out_offset)
            src_line, src_col = src.locate(points[out_offset])
            lines[gen_line].append((gen_col, src_line, src_col))

        encoded_lines = []
        prev_src_line = prev_src_col = 0
        for entries in lines:
            prev_gen_col = 0
            encoded = []
            for gen_col, src_line, src_col in entries:
                encoded.append(
                    _vlq(gen_col - prev_gen_col) + _vlq(0)
                    + _vlq(src_line - prev_src_line) + _vlq(src_col - prev_src_col)
                )
                prev_gen_col, prev_src_line, prev_src_col = gen_col, src_line, src_col
            encoded_lines.append(",".join(encoded))

        return {
            "version": 3,
            "file": PurePath(file_id).name,
            "sources": [file_id],
            "sourcesContent": [source],
            "names": [],
            "mappings": ";".join(encoded_lines),
        }


class SpliceBuffer:
    """Collects edits against the original text and renders the result.

    Range edits are expected to be disjoint; the buffer does not check.
    Text inserted at an offset is emitted before any range starting there.
    """

    def __init__(self, source: bytes) -> None:
        self._source = source
        self._ranges: List[Tuple[int, int, Optional[bytes]]] = []
        self._inserts: List[Tuple[int, int, bytes]] = []
        self._rendered: Optional[Tuple[bytes, PositionMap]] = None

    def overwrite(self, start: int, end: int, text: str) -> None:
        self._ranges.append((start, end, text.encode("utf-8")))
        self._rendered = None

    def remove(self, start: int, end: int) -> None:
        self._ranges.append((start, end, None))
        self._rendered = None

    def append_left(self, offset: int, text: str) -> None:
        self._inserts.append((offset, len(self._inserts), text.encode("utf-8")))
        self._rendered = None

    def has_changed(self) -> bool:
        return self._render_bytes()[0] != self._source

    def render(self) -> Tuple[str, PositionMap]:
        out, position_map = self._render_bytes()
        return out.decode("utf-8"), position_map

    def _render_bytes(self) -> Tuple[bytes, PositionMap]:
        if self._rendered is not None:
            return self._rendered

        ops = [(offset, 0, order, offset, text) for offset, order, text in self._inserts]
        ops.extend((start, 1, 0, end, text) for start, end, text in self._ranges)
        ops.sort(key=lambda op: (op[0], op[1], op[2]))

        out = bytearray()
        segments: List[Segment] = []

        def emit(chunk: bytes, orig_start: int, generated: bool) -> None:
            if chunk:
                segments.append(Segment(len(out), len(out) + len(chunk), orig_start, generated))
                out.extend(chunk)

        cursor = 0
        for pos, is_range, _order, end, text in ops:
            if pos > cursor:
                emit(self._source[cursor:pos], cursor, False)
                cursor = pos
            if text:
                emit(text, pos, True)
            if is_range:
                cursor = max(cursor, end)
        emit(self._source[cursor:], cursor, False)

        self._rendered = (bytes(out), PositionMap(segments, len(self._source)))
        return self._rendered


class _LineIndex:
    """Byte offset -> (line, UTF-16 column), both zero based."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.starts = [0]
        pos = data.find(b"\n")
        while pos != -1:
            self.starts.append(pos + 1)
            pos = data.find(b"\n", pos + 1)

    def locate(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self.starts, offset) - 1
        prefix = self.data[self.starts[line]:offset].decode("utf-8", errors="replace")
        return line, len(prefix.encode("utf-16-le")) // 2


def _vlq(value: int) -> str:
    v = ((-value) << 1) | 1 if value < 0 else value << 1
    chars = []
    while True:
        digit = v & 31
        v >>= 5
        if v:
            digit |= 32
        chars.append(_B64[digit])
        if not v:
            return "".join(chars)
