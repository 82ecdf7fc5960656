"""Fallback parser for user-defined ``v-<name>`` directives."""

from sfcwire.compiler.ast_nodes import AttrValue, CustomDirectiveAttribute
from sfcwire.compiler.attributes.base import AttributeParser
from sfcwire.compiler.exceptions import TemplateSyntaxError
from sfcwire.compiler.expressions import check_expression

# Handled by the built-in parsers, or not supported at all
RESERVED = {"v-if", "v-else-if", "v-else", "v-for", "v-text", "v-html", "v-bind", "v-on"}


class CustomDirectiveParser(AttributeParser):
    """Parses ``v-name:arg.mod1.mod2="expr"``."""

    def can_parse(self, name: str) -> bool:
        return name.startswith("v-") and name.split(":", 1)[0] not in RESERVED

    def parse(
        self, name: str, value: AttrValue, start: int, value_start: int
    ) -> CustomDirectiveAttribute:
        head, *modifiers = name[2:].split(".")
        directive, _, arg = head.partition(":")
        if not directive:
            raise TemplateSyntaxError(f"Invalid directive name '{name}'", offset=start)

        expression = ""
        if value is not True and str(value).strip():
            text = str(value)
            expression = check_expression(
                text.strip(), value_start + len(text) - len(text.lstrip())
            )

        return CustomDirectiveAttribute(
            name=name,
            value="" if value is True else str(value),
            directive=directive,
            expression=expression,
            arg=arg or None,
            modifiers=modifiers,
            start=start,
            end=start + len(name) if value is True else value_start + len(str(value)),
        )
