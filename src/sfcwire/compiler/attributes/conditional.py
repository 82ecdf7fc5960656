"""Conditional rendering attributes."""

from sfcwire.compiler.ast_nodes import (
    AttrValue,
    ElseAttribute,
    ElseIfAttribute,
    IfAttribute,
    SpecialAttribute,
)
from sfcwire.compiler.attributes.base import AttributeParser
from sfcwire.compiler.exceptions import TemplateSyntaxError


class ConditionalAttributeParser(AttributeParser):
    """Parses v-if, v-else-if and v-else."""

    def can_parse(self, name: str) -> bool:
        return name in ("v-if", "v-else-if", "v-else")

    def parse(
        self, name: str, value: AttrValue, start: int, value_start: int
    ) -> SpecialAttribute:
        if name == "v-else":
            if value is not True and str(value).strip():
                raise TemplateSyntaxError("v-else does not take a value", offset=start)
            return ElseAttribute(name=name, value="", start=start, end=start + len(name))

        condition = self.require_expression(name, value, value_start)
        end = value_start + len(str(value))
        if name == "v-if":
            return IfAttribute(
                name=name, value=str(value), condition=condition, start=start, end=end
            )
        return ElseIfAttribute(
            name=name, value=str(value), condition=condition, start=start, end=end
        )
