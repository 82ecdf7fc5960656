"""AST node definitions for component files and their template blocks."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

AttrValue = Union[str, bool]


class BlockKind(str, Enum):
    TEMPLATE = "template"
    SCRIPT = "script"
    STYLE = "style"
    CUSTOM = "custom"

    @classmethod
    def for_tag(cls, tag: str) -> "BlockKind":
        for kind in (cls.TEMPLATE, cls.SCRIPT, cls.STYLE):
            if kind.value == tag:
                return kind
        return cls.CUSTOM


@dataclass(frozen=True)
class Block:
    """One top-level section of a component file.

    ``content`` excludes the opening and closing tag markup. ``start`` and
    ``end`` are offsets of that content inside the file text, so
    ``text[start:end] == content`` always holds.
    """

    kind: BlockKind
    tag: str
    content: str
    start: int
    end: int
    attrs: Dict[str, AttrValue] = field(default_factory=dict)
    index: int = 0

    @property
    def lang(self) -> Optional[str]:
        lang = self.attrs.get("lang")
        return lang if isinstance(lang, str) and lang else None

    @property
    def scoped(self) -> bool:
        value = self.attrs.get("scoped")
        return value is True or value == "true" or value == "scoped"


# === Template nodes ===


@dataclass
class Node:
    """Base for template nodes. Offsets are absolute positions in the file."""

    start: int = field(default=0, kw_only=True)
    end: int = field(default=0, kw_only=True)


@dataclass
class TextNode(Node):
    text: str


@dataclass
class InterpolationNode(Node):
    """``{{ expr }}`` inside text; the expression is kept as raw source."""

    expression: str


class DirectiveForm(str, Enum):
    INDIVIDUAL = "individual"
    SPREAD = "spread"


@dataclass
class Directive(Node):
    """A ``bind`` attribute: one named key, or a spread object expression."""

    form: DirectiveForm
    expression: str
    key: Optional[str] = None


@dataclass
class SpecialAttribute(Node):
    """Base for the non-binding directives (events, control flow, ...)."""

    name: str
    value: str


@dataclass
class EventAttribute(SpecialAttribute):
    event: str
    handler: str
    modifiers: List[str] = field(default_factory=list)


@dataclass
class IfAttribute(SpecialAttribute):
    condition: str


@dataclass
class ElseIfAttribute(SpecialAttribute):
    condition: str


@dataclass
class ElseAttribute(SpecialAttribute):
    pass


@dataclass
class ForAttribute(SpecialAttribute):
    aliases: List[str]
    iterable: str


@dataclass
class DomPropAttribute(SpecialAttribute):
    """``v-text`` / ``v-html``."""

    prop: str
    expression: str


@dataclass
class CustomDirectiveAttribute(SpecialAttribute):
    directive: str
    expression: str
    arg: Optional[str] = None
    modifiers: List[str] = field(default_factory=list)


@dataclass
class ElementNode(Node):
    tag: str
    static_attrs: Dict[str, AttrValue] = field(default_factory=dict)
    directives: List[Directive] = field(default_factory=list)
    special_attributes: List[SpecialAttribute] = field(default_factory=list)
    children: List["TemplateChild"] = field(default_factory=list)
    slot_name: Optional[str] = None

    def get_special(self, attr_type: type) -> Optional[SpecialAttribute]:
        return next(
            (a for a in self.special_attributes if isinstance(a, attr_type)), None
        )

    @property
    def is_fragment(self) -> bool:
        return self.tag == "template"


@dataclass
class SlotInvocationNode(Node):
    """A ``<slot>`` usage after binding resolution."""

    name: str
    fallback_children: Optional[List["TemplateChild"]] = None
    name_expression: Optional[str] = None  # bound `:name`, replaces `name`
    static_extra_props: Optional[Dict[str, str]] = None
    dynamic_binding_expr: Optional[str] = None
    special_attributes: List[SpecialAttribute] = field(default_factory=list)

    def get_special(self, attr_type: type) -> Optional[SpecialAttribute]:
        return next(
            (a for a in self.special_attributes if isinstance(a, attr_type)), None
        )


TemplateChild = Union[ElementNode, TextNode, InterpolationNode, SlotInvocationNode]


# === Binding state ===


@dataclass(frozen=True)
class NoBindings:
    pass


@dataclass(frozen=True)
class IndividualOnly:
    entries: Dict[str, str]


@dataclass(frozen=True)
class SpreadOnly:
    expression: str


@dataclass(frozen=True)
class Mixed:
    entries: Dict[str, str]
    expression: str


BindingState = Union[NoBindings, IndividualOnly, SpreadOnly, Mixed]
