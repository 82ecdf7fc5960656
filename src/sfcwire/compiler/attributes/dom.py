"""v-text / v-html."""

from sfcwire.compiler.ast_nodes import AttrValue, DomPropAttribute
from sfcwire.compiler.attributes.base import AttributeParser

DOM_PROPS = {"v-text": "textContent", "v-html": "innerHTML"}


class DomPropAttributeParser(AttributeParser):
    def can_parse(self, name: str) -> bool:
        return name in DOM_PROPS

    def parse(
        self, name: str, value: AttrValue, start: int, value_start: int
    ) -> DomPropAttribute:
        expression = self.require_expression(name, value, value_start)
        return DomPropAttribute(
            name=name,
            value=str(value),
            prop=DOM_PROPS[name],
            expression=expression,
            start=start,
            end=value_start + len(str(value)),
        )
