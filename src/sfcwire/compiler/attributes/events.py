"""Event attributes: on:click / v-on:click / @click."""

from sfcwire.compiler.ast_nodes import AttrValue, EventAttribute
from sfcwire.compiler.attributes.base import AttributeParser
from sfcwire.compiler.exceptions import TemplateSyntaxError

EVENT_PREFIXES = ("on:", "v-on:", "@")


class EventAttributeParser(AttributeParser):
    def can_parse(self, name: str) -> bool:
        return name.startswith(EVENT_PREFIXES)

    def parse(
        self, name: str, value: AttrValue, start: int, value_start: int
    ) -> EventAttribute:
        prefix = next(p for p in EVENT_PREFIXES if name.startswith(p))
        event, *modifiers = name[len(prefix) :].split(".")
        if not event:
            raise TemplateSyntaxError(
                f"Event binding '{name}' is missing an event name", offset=start
            )
        handler = self.require_expression(name, value, value_start)
        return EventAttribute(
            name=name,
            value=str(value),
            event=event,
            handler=handler,
            modifiers=modifiers,
            start=start,
            end=value_start + len(str(value)),
        )
