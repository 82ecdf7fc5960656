import pytest

from sfcwire.compiler.codegen.sourcemap import (
    LineIndex,
    SourceMapBuilder,
    block_source_map,
    encode_vlq,
)
from sfcwire.compiler.splitter import split


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "A"),
        (1, "C"),
        (-1, "D"),
        (15, "e"),
        (16, "gB"),
        (-16, "hB"),
        (45, "6C"),
    ],
)
def test_encode_vlq(value, expected):
    assert encode_vlq(value) == expected


def test_line_index():
    index = LineIndex("ab\ncd\n")
    assert index.position(0) == (0, 0)
    assert index.position(1) == (0, 1)
    assert index.position(3) == (1, 0)
    assert index.position(4) == (1, 1)


def test_builder_encodes_relative_segments():
    builder = SourceMapBuilder("a.vue", "ab\ncd\n", file="a.js")
    builder.add(0, 0, 0)
    builder.add(2, 4, 4)
    source_map = builder.to_dict()
    assert source_map == {
        "version": 3,
        "file": "a.js",
        "sources": ["a.vue"],
        "sourcesContent": ["ab\ncd\n"],
        "names": [],
        "mappings": "AAAA;;IACC",
    }


def test_builder_ignores_duplicate_mappings():
    builder = SourceMapBuilder("a.vue", "abc")
    builder.add(0, 1, 1)
    builder.add(0, 1, 1)
    assert builder.encode_mappings() == "CAAC"


def test_block_source_map_shifts_lines():
    source = "<template>\n<div/>\n</template>"
    block = split(source)[0]
    source_map = block_source_map(block, "T.vue", source)
    assert source_map["sources"] == ["T.vue"]
    assert source_map["mappings"] == "AAAU;AACV;AACA"
