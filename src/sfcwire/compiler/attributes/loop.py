"""Loop attribute parser."""

import re

from sfcwire.compiler.ast_nodes import AttrValue, ForAttribute
from sfcwire.compiler.attributes.base import AttributeParser
from sfcwire.compiler.exceptions import TemplateSyntaxError
from sfcwire.compiler.expressions import check_expression

FOR_RE = re.compile(r"^\s*(?:\(([^)]*)\)|([^\s()]+))\s+(?:in|of)\s+([\s\S]+?)\s*$")
ALIAS_RE = re.compile(r"^[A-Za-z_$][\w$]*$")


class LoopAttributeParser(AttributeParser):
    """Parses ``v-for="item in items"`` and the (item, key, index) forms."""

    def can_parse(self, name: str) -> bool:
        return name == "v-for"

    def parse(
        self, name: str, value: AttrValue, start: int, value_start: int
    ) -> ForAttribute:
        expression = self.require_expression(name, value, value_start)
        match = FOR_RE.match(expression)
        if not match:
            raise TemplateSyntaxError(
                f"Invalid v-for expression: {expression!r}", offset=value_start
            )

        alias_text = match.group(1) if match.group(1) is not None else match.group(2)
        aliases = [a.strip() for a in alias_text.split(",")]
        if not 1 <= len(aliases) <= 3 or not all(ALIAS_RE.match(a) for a in aliases):
            raise TemplateSyntaxError(
                f"Invalid v-for alias: {alias_text!r}", offset=value_start
            )

        iterable = match.group(3)
        check_expression(iterable, value_start + str(value).find(iterable))
        return ForAttribute(
            name=name,
            value=str(value),
            aliases=aliases,
            iterable=iterable,
            start=start,
            end=value_start + len(str(value)),
        )
