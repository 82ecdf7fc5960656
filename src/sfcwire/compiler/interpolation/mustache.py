"""``{{ expr }}`` interpolation parser."""

import html
from typing import List, Union

from sfcwire.compiler.ast_nodes import InterpolationNode, TextNode
from sfcwire.compiler.expressions import check_expression, scan

OPEN = "{{"
CLOSE = "}}"


class MustacheInterpolationParser:
    """Splits a text run into literal text and interpolation nodes."""

    def parse(
        self, text: str, offset: int = 0
    ) -> List[Union[TextNode, InterpolationNode]]:
        """Parse ``text`` that starts at file offset ``offset``."""
        parts: List[Union[TextNode, InterpolationNode]] = []
        pos = 0
        while pos < len(text):
            open_at = text.find(OPEN, pos)
            if open_at == -1:
                break
            if open_at > pos:
                parts.append(self._text(text, pos, open_at, offset))

            expr_start = open_at + len(OPEN)
            close_at = scan(text, expr_start, stop=CLOSE, base=offset)
            raw = text[expr_start:close_at]
            stripped = raw.strip()
            lead = len(raw) - len(raw.lstrip())
            check_expression(stripped, offset + expr_start + lead)
            parts.append(
                InterpolationNode(
                    expression=stripped,
                    start=offset + open_at,
                    end=offset + close_at + len(CLOSE),
                )
            )
            pos = close_at + len(CLOSE)

        if pos < len(text):
            parts.append(self._text(text, pos, len(text), offset))
        return parts

    def _text(self, text: str, start: int, end: int, offset: int) -> TextNode:
        return TextNode(
            text=html.unescape(text[start:end]),
            start=offset + start,
            end=offset + end,
        )
