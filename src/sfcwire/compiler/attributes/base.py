"""Base interface for attribute parsers."""

from abc import ABC, abstractmethod
from typing import Union

from sfcwire.compiler.ast_nodes import AttrValue, Directive, SpecialAttribute
from sfcwire.compiler.exceptions import TemplateSyntaxError
from sfcwire.compiler.expressions import check_expression


class AttributeParser(ABC):
    """Turns one directive attribute into a node attached to its element."""

    @abstractmethod
    def can_parse(self, name: str) -> bool:
        """Check if this parser handles the attribute name."""
        pass

    @abstractmethod
    def parse(
        self, name: str, value: AttrValue, start: int, value_start: int
    ) -> Union[Directive, SpecialAttribute]:
        """Parse the attribute. ``start`` is the name offset, ``value_start``
        the offset of the value text (equal to ``start`` for valueless ones)."""
        pass

    def require_expression(self, name: str, value: AttrValue, value_start: int) -> str:
        if value is True or not str(value).strip():
            raise TemplateSyntaxError(
                f"Directive '{name}' expects a value", offset=value_start
            )
        text = str(value)
        lead = len(text) - len(text.lstrip())
        return check_expression(text.strip(), value_start + lead)
