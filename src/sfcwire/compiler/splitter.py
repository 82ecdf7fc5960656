"""Block splitter: turns component file text into typed blocks."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type

from sfcwire.compiler.ast_nodes import AttrValue, Block, BlockKind
from sfcwire.compiler.exceptions import MalformedSourceError, SFCCompileError

# Blocks whose content is raw text; only the matching close tag ends them
RAW_TEXT_BLOCKS = {"script", "style"}

QUOTES = ("'", '"', "`")

TAG_NAME_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_:."
)


@dataclass(frozen=True)
class SourceFile:
    """Raw component text and the path it was loaded from."""

    path: str
    text: str

    @classmethod
    def from_path(cls, path: Path) -> "SourceFile":
        with open(path, "r", encoding="utf-8") as f:
            return cls(path=str(path), text=f.read())

    def blocks(self) -> List[Block]:
        return split(self.text, self.path)


@dataclass
class TagAttribute:
    name: str
    value: AttrValue
    start: int
    value_start: int


@dataclass
class OpenTag:
    name: str
    attributes: List[TagAttribute]
    start: int
    end: int  # offset just past '>'
    self_closing: bool

    @property
    def attrs(self) -> Dict[str, AttrValue]:
        return {a.name: a.value for a in self.attributes}


def parse_open_tag(
    text: str, pos: int, error_cls: Type[SFCCompileError] = MalformedSourceError
) -> OpenTag:
    """Parse ``<name attr=... >`` starting at ``pos`` (which points at ``<``)."""
    start = pos
    pos += 1
    name_start = pos
    while pos < len(text) and text[pos] in TAG_NAME_CHARS:
        pos += 1
    name = text[name_start:pos]
    if not name:
        raise error_cls("Expected a tag name after '<'", offset=start)

    attributes: List[TagAttribute] = []
    while True:
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos >= len(text):
            raise error_cls(f"Unterminated <{name}> tag", offset=start)

        c = text[pos]
        if c == ">":
            return OpenTag(name, attributes, start, pos + 1, False)
        if c == "/" and text.startswith("/>", pos):
            return OpenTag(name, attributes, start, pos + 2, True)

        attr_start = pos
        while pos < len(text) and not text[pos].isspace() and text[pos] not in "=>":
            if text.startswith("/>", pos):
                break
            pos += 1
        attr_name = text[attr_start:pos]
        if not attr_name:
            raise error_cls(f"Unexpected character {c!r} in <{name}> tag", offset=pos)

        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos < len(text) and text[pos] == "=":
            pos += 1
            while pos < len(text) and text[pos].isspace():
                pos += 1
            value, value_start, pos = _read_attr_value(text, pos, name, error_cls)
            attributes.append(TagAttribute(attr_name, value, attr_start, value_start))
        else:
            attributes.append(TagAttribute(attr_name, True, attr_start, attr_start))


def _read_attr_value(
    text: str, pos: int, tag_name: str, error_cls: Type[SFCCompileError]
) -> Tuple[str, int, int]:
    """Return (value, value_offset, next_pos)."""
    if pos >= len(text):
        raise error_cls(f"Unterminated <{tag_name}> tag", offset=pos)
    quote = text[pos]
    if quote in ("'", '"'):
        close = text.find(quote, pos + 1)
        if close == -1:
            raise error_cls(
                f"Unterminated attribute value in <{tag_name}> tag", offset=pos
            )
        return text[pos + 1 : close], pos + 1, close + 1

    value_start = pos
    while pos < len(text) and not text[pos].isspace() and text[pos] != ">":
        if text.startswith("/>", pos):
            break
        pos += 1
    return text[value_start:pos], value_start, pos

def _skip_comment(text: str, pos: int) -> int:
    close = text.find("-->", pos + 4)
    if close == -1:
        raise MalformedSourceError("Unterminated comment", offset=pos)
    return close + 3


def _find_close(text: str, tag: OpenTag) -> Tuple[int, int]:
    """Return (content_end, block_end) for the block opened by ``tag``."""
    name = tag.name
    lowered = text.lower()
    close_marker = f"</{name.lower()}"

    if name.lower() in RAW_TEXT_BLOCKS:
        close = lowered.find(close_marker, tag.end)
        if close == -1:
            raise MalformedSourceError(
                f"Missing closing </{name}> tag", offset=tag.start
            )
        gt = text.find(">", close)
        if gt == -1:
            raise MalformedSourceError(f"Unterminated </{name}> tag", offset=close)
        return close, gt + 1

    # Same-name tags may nest (e.g. <template> inside <template>)
    markup = name.lower() == "template"
    depth = 1
    pos = tag.end
    while True:
        lt = text.find("<", pos)
        mustache = text.find("{{", pos) if markup else -1
        if mustache != -1 and (lt == -1 or mustache < lt):
            pos = _skip_interpolation(text, mustache)
            continue
        if lt == -1:
            raise MalformedSourceError(
                f"Missing closing </{name}> tag", offset=tag.start
            )
        if text.startswith("<!--", lt):
            pos = _skip_comment(text, lt)
            continue
        if lowered.startswith(close_marker, lt) and _ends_name(text, lt + len(close_marker)):
            depth -= 1
            gt = text.find(">", lt)
            if gt == -1:
                raise MalformedSourceError(f"Unterminated </{name}> tag", offset=lt)
            if depth == 0:
                return lt, gt + 1
            pos = gt + 1
            continue
        opens_same = lowered.startswith(f"<{name.lower()}", lt) and _ends_name(
            text, lt + len(name) + 1
        )
        if opens_same or (markup and lt + 1 < len(text) and text[lt + 1].isalpha()):
            # Skip whole open tags so quoted values cannot close the block
            nested = parse_open_tag(text, lt)
            if opens_same and not nested.self_closing:
                depth += 1
            pos = nested.end
            continue
        pos = lt + 1


def _skip_interpolation(text: str, pos: int) -> int:
    """Return the offset just past the `}}` closing the `{{` at ``pos``.

    Only quoted strings are honored. An unterminated interpolation skips
    just the `{{` and is reported by the template parser.
    """
    i = pos + 2
    while i < len(text):
        c = text[i]
        if c in QUOTES:
            close = _find_quote_end(text, i)
            if close == -1:
                break
            i = close + 1
        elif text.startswith("}}", i):
            return i + 2
        else:
            i += 1
    return pos + 2


def _find_quote_end(text: str, pos: int) -> int:
    quote = text[pos]
    i = pos + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
        elif text[i] == quote:
            return i
        else:
            i += 1
    return -1


def _ends_name(text: str, pos: int) -> bool:
    return pos >= len(text) or text[pos] not in TAG_NAME_CHARS


def split(text: str, file_path: str = "") -> List[Block]:
    """Split component text into blocks in source order.

    Text between top-level blocks is ignored. Raises ``MalformedSourceError``
    for an unclosed block or a second template/script block.
    """
    blocks: List[Block] = []
    counters: Dict[BlockKind, int] = {}
    seen_single: Dict[BlockKind, Block] = {}

    pos = 0
    try:
        while True:
            lt = text.find("<", pos)
            if lt == -1:
                break
            if text.startswith("<!--", lt):
                pos = _skip_comment(text, lt)
                continue
            if text.startswith("<!", lt) or text.startswith("<?", lt):
                gt = text.find(">", lt)
                if gt == -1:
                    raise MalformedSourceError("Unterminated declaration", offset=lt)
                pos = gt + 1
                continue
            if text.startswith("</", lt):
                raise MalformedSourceError(
                    "Found a closing tag without a matching open tag", offset=lt
                )
            if lt + 1 >= len(text) or text[lt + 1] not in TAG_NAME_CHARS:
                pos = lt + 1
                continue

            tag = parse_open_tag(text, lt)
            kind = BlockKind.for_tag(tag.name.lower())

            if kind in (BlockKind.TEMPLATE, BlockKind.SCRIPT) and kind in seen_single:
                raise MalformedSourceError(
                    f"A component file can contain only one <{kind.value}> block",
                    offset=tag.start,
                )

            if tag.self_closing:
                content_start = content_end = block_end = tag.end
            else:
                content_start = tag.end
                content_end, block_end = _find_close(text, tag)

            index = counters.get(kind, 0)
            counters[kind] = index + 1
            block = Block(
                kind=kind,
                tag=tag.name,
                content=text[content_start:content_end],
                start=content_start,
                end=content_end,
                attrs=tag.attrs,
                index=index,
            )
            blocks.append(block)
            if kind in (BlockKind.TEMPLATE, BlockKind.SCRIPT):
                seen_single[kind] = block
            pos = block_end
    except MalformedSourceError as e:
        raise e.with_source(text, file_path)

    return blocks


def find_block(blocks: List[Block], kind: BlockKind, index: int = 0) -> Optional[Block]:
    for block in blocks:
        if block.kind is kind and block.index == index:
            return block
    return None
