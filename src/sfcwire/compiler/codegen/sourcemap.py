"""Source map (v3) composition for generated modules."""

import bisect
from typing import Any, Dict, List, Optional, Tuple

from sfcwire.compiler.ast_nodes import Block

BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
VLQ_SHIFT = 5
VLQ_CONTINUATION = 1 << VLQ_SHIFT
VLQ_MASK = VLQ_CONTINUATION - 1


def encode_vlq(value: int) -> str:
    """Base64 VLQ encoding of a signed integer."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & VLQ_MASK
        vlq >>= VLQ_SHIFT
        if vlq:
            digit |= VLQ_CONTINUATION
        out.append(BASE64_CHARS[digit])
        if not vlq:
            return "".join(out)


class LineIndex:
    """Maps string offsets to (line, column), both 0-based."""

    def __init__(self, text: str) -> None:
        self.line_starts = [0]
        for i, c in enumerate(text):
            if c == "\n":
                self.line_starts.append(i + 1)

    def position(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self.line_starts, offset) - 1
        return line, offset - self.line_starts[line]


class SourceMapBuilder:
    """Collects generated -> original positions for one generated file."""

    def __init__(self, source_path: str, source_text: str, file: Optional[str] = None):
        self.source_path = source_path
        self.source_text = source_text
        self.file = file
        self._index = LineIndex(source_text)
        self._mappings: List[Tuple[int, int, int, int]] = []

    def add(self, gen_line: int, gen_column: int, source_offset: int) -> None:
        src_line, src_column = self._index.position(source_offset)
        self._mappings.append((gen_line, gen_column, src_line, src_column))

    def encode_mappings(self) -> str:
        lines: List[str] = []
        prev_src_line = 0
        prev_src_column = 0
        current_line = 0
        segments: List[str] = []
        prev_gen_column = 0

        for gen_line, gen_column, src_line, src_column in sorted(set(self._mappings)):
            while current_line < gen_line:
                lines.append(",".join(segments))
                segments = []
                current_line += 1
                prev_gen_column = 0
            segments.append(
                encode_vlq(gen_column - prev_gen_column)
                + encode_vlq(0)  # single source
                + encode_vlq(src_line - prev_src_line)
                + encode_vlq(src_column - prev_src_column)
            )
            prev_gen_column = gen_column
            prev_src_line = src_line
            prev_src_column = src_column

        lines.append(",".join(segments))
        return ";".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        source_map: Dict[str, Any] = {
            "version": 3,
            "sources": [self.source_path],
            "sourcesContent": [self.source_text],
            "names": [],
            "mappings": self.encode_mappings(),
        }
        if self.file:
            source_map["file"] = self.file
        return source_map


def block_source_map(block: Block, source_path: str, source_text: str) -> Dict[str, Any]:
    """Line-by-line map from a block's content back to the file it came from."""
    builder = SourceMapBuilder(source_path, source_text)
    offset = block.start
    for line_number, line in enumerate(block.content.split("\n")):
        builder.add(line_number, 0, offset)
        offset += len(line) + 1
    return builder.to_dict()
