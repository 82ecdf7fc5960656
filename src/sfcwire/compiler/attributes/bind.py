"""Binding attributes: bind:key / :key / bind."""

from sfcwire.compiler.ast_nodes import AttrValue, Directive, DirectiveForm
from sfcwire.compiler.attributes.base import AttributeParser
from sfcwire.compiler.exceptions import TemplateSyntaxError

SPREAD_NAMES = ("bind", "v-bind")
KEYED_PREFIXES = ("bind:", "v-bind:", ":")


class BindAttributeParser(AttributeParser):
    """Parses individual (``bind:value``) and spread (``bind``) bindings."""

    def can_parse(self, name: str) -> bool:
        return name in SPREAD_NAMES or name.startswith(KEYED_PREFIXES)

    def parse(
        self, name: str, value: AttrValue, start: int, value_start: int
    ) -> Directive:
        expression = self.require_expression(name, value, value_start)
        end = value_start + len(str(value))

        if name in SPREAD_NAMES:
            return Directive(
                form=DirectiveForm.SPREAD,
                expression=expression,
                start=start,
                end=end,
            )

        prefix = next(p for p in KEYED_PREFIXES if name.startswith(p))
        # Modifiers (.prop, .sync, ...) do not change the bound key
        key = name[len(prefix) :].split(".", 1)[0]
        if not key:
            raise TemplateSyntaxError(
                f"Binding '{name}' is missing an attribute name", offset=start
            )
        return Directive(
            form=DirectiveForm.INDIVIDUAL,
            key=key,
            expression=expression,
            start=start,
            end=end,
        )
