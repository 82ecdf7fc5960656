"""Template block parser."""

import html
from pathlib import Path
from typing import List, Optional, Union

from sfcwire.compiler.ast_nodes import (
    Block,
    BlockKind,
    Directive,
    ElementNode,
    ElseAttribute,
    ElseIfAttribute,
    ForAttribute,
    IfAttribute,
    TemplateChild,
)
from sfcwire.compiler.attributes.base import AttributeParser
from sfcwire.compiler.attributes.bind import BindAttributeParser
from sfcwire.compiler.attributes.conditional import ConditionalAttributeParser
from sfcwire.compiler.attributes.custom import CustomDirectiveParser
from sfcwire.compiler.attributes.dom import DomPropAttributeParser
from sfcwire.compiler.attributes.events import EventAttributeParser
from sfcwire.compiler.attributes.loop import LoopAttributeParser
from sfcwire.compiler.exceptions import DuplicateKeyError, TemplateSyntaxError
from sfcwire.compiler.expressions import scan
from sfcwire.compiler.interpolation.mustache import MustacheInterpolationParser
from sfcwire.compiler.splitter import TAG_NAME_CHARS, SourceFile, find_block, parse_open_tag

# HTML void elements that don't have closing tags
VOID_ELEMENTS = {
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
}


class TemplateParser:
    """Parses a template block into an element tree."""

    def __init__(self) -> None:
        # Attribute parser chain, first match wins
        self.attribute_parsers: List[AttributeParser] = [
            BindAttributeParser(),
            EventAttributeParser(),
            ConditionalAttributeParser(),
            LoopAttributeParser(),
            DomPropAttributeParser(),
            CustomDirectiveParser(),
        ]

        # Interpolation parser (pluggable)
        self.interpolation_parser = MustacheInterpolationParser()

    def parse_file(self, file_path: Path) -> Optional[ElementNode]:
        """Parse the template block of a component file, if it has one."""
        source = SourceFile.from_path(file_path)
        block = find_block(source.blocks(), BlockKind.TEMPLATE)
        if block is None:
            return None
        return self.parse(block, source.path, source.text)

    def parse(
        self, block: Block, file_path: str = "", source: Optional[str] = None
    ) -> ElementNode:
        """Parse ``block`` into a root node whose children are the top-level nodes.

        ``source`` is the full file text; when given, errors carry line and
        column numbers.
        """
        root = ElementNode(tag="template", start=block.start, end=block.end)
        try:
            self._parse_content(block.content, block.start, root)
            self._validate_root(root)
        except (TemplateSyntaxError, DuplicateKeyError) as e:
            if source is None:
                e.file_path = e.file_path or file_path or None
                e.args = (str(e),)
                raise
            raise e.with_source(source, file_path)
        return root

    def _parse_content(self, content: str, base: int, root: ElementNode) -> None:
        stack: List[ElementNode] = [root]
        pos = 0
        n = len(content)

        while pos < n:
            if content[pos] != "<" or not self._is_markup(content, pos):
                pos = self._parse_text(content, pos, base, stack[-1])
                continue

            if content.startswith("<!--", pos):
                close = content.find("-->", pos + 4)
                if close == -1:
                    raise TemplateSyntaxError("Unterminated comment", offset=base + pos)
                pos = close + 3
                continue

            if content.startswith("</", pos):
                pos = self._parse_close_tag(content, pos, base, stack)
                continue

            tag = parse_open_tag(content, pos, error_cls=TemplateSyntaxError)
            node = ElementNode(tag=tag.name, start=base + tag.start, end=base + tag.end)

            if node.tag == "slot" and any(parent.tag == "slot" for parent in stack):
                raise TemplateSyntaxError(
                    "A <slot> cannot be nested inside another <slot>",
                    offset=node.start,
                )

            for attr in tag.attributes:
                self._add_attribute(
                    node, attr.name, attr.value, base + attr.start, base + attr.value_start
                )

            if node.tag == "slot":
                if "name" in node.static_attrs and any(
                    d.key == "name" for d in node.directives
                ):
                    raise DuplicateKeyError(
                        "'name' is bound more than once on the same element",
                        offset=node.start,
                    )
                name = node.static_attrs.pop("name", "default")
                node.slot_name = name if isinstance(name, str) and name else "default"

            self._append_child(stack[-1], node)
            if not tag.self_closing and node.tag.lower() not in VOID_ELEMENTS:
                stack.append(node)
            pos = tag.end

        if len(stack) > 1:
            unclosed = stack[-1]
            raise TemplateSyntaxError(
                f"Element <{unclosed.tag}> is missing its closing tag",
                offset=unclosed.start,
            )

    def _is_markup(self, content: str, pos: int) -> bool:
        nxt = content[pos + 1 : pos + 2]
        return nxt == "/" or nxt == "!" or (nxt != "" and nxt in TAG_NAME_CHARS)

    def _parse_text(
        self, content: str, pos: int, base: int, parent: ElementNode
    ) -> int:
        start = pos
        n = len(content)
        while pos < n:
            if content.startswith("{{", pos):
                # '<' inside an interpolation is an operator, not markup
                pos = scan(content, pos + 2, stop="}}", base=base) + 2
                continue
            if content[pos] == "<" and pos > start and self._is_markup(content, pos):
                break
            pos += 1

        text = content[start:pos]
        if text.strip():
            for part in self.interpolation_parser.parse(text, base + start):
                self._append_child(parent, part)
        return pos

    def _parse_close_tag(
        self, content: str, pos: int, base: int, stack: List[ElementNode]
    ) -> int:
        gt = content.find(">", pos)
        if gt == -1:
            raise TemplateSyntaxError("Unterminated closing tag", offset=base + pos)
        name = content[pos + 2 : gt].strip()

        if len(stack) == 1:
            raise TemplateSyntaxError(
                f"Closing tag </{name}> has no matching open tag", offset=base + pos
            )
        current = stack[-1]
        if current.tag.lower() != name.lower():
            raise TemplateSyntaxError(
                f"Expected </{current.tag}> but found </{name}>", offset=base + pos
            )
        current.end = base + gt + 1
        stack.pop()
        return gt + 1

    def _add_attribute(
        self,
        node: ElementNode,
        name: str,
        value: Union[str, bool],
        start: int,
        value_start: int,
    ) -> None:
        for parser in self.attribute_parsers:
            if parser.can_parse(name):
                parsed = parser.parse(name, value, start, value_start)
                if isinstance(parsed, Directive):
                    node.directives.append(parsed)
                else:
                    node.special_attributes.append(parsed)
                return

        node.static_attrs[name] = html.unescape(value) if isinstance(value, str) else value

    def _append_child(self, parent: ElementNode, child: TemplateChild) -> None:
        if isinstance(child, ElementNode) and (
            child.get_special(ElseAttribute) or child.get_special(ElseIfAttribute)
        ):
            previous = parent.children[-1] if parent.children else None
            if not (
                isinstance(previous, ElementNode)
                and (previous.get_special(IfAttribute) or previous.get_special(ElseIfAttribute))
            ):
                raise TemplateSyntaxError(
                    "v-else/v-else-if used on an element without a preceding v-if",
                    offset=child.start,
                )
        parent.children.append(child)

    def _validate_root(self, root: ElementNode) -> None:
        roots: List[TemplateChild] = []
        for child in root.children:
            if isinstance(child, ElementNode):
                if child.get_special(ElseAttribute) or child.get_special(ElseIfAttribute):
                    continue
            elif roots and not isinstance(roots[-1], ElementNode):
                # Adjacent text and interpolations render as one text node
                continue
            roots.append(child)
        if len(roots) > 1:
            raise TemplateSyntaxError(
                "Component template should contain exactly one root element",
                offset=roots[1].start,
            )
        for child in root.children:
            if not isinstance(child, ElementNode):
                continue
            if child.tag in ("slot", "template"):
                raise TemplateSyntaxError(
                    f"Cannot use <{child.tag}> as the component root element",
                    offset=child.start,
                )
            if child.get_special(ForAttribute):
                raise TemplateSyntaxError(
                    "Cannot use v-for on the component root element",
                    offset=child.start,
                )
