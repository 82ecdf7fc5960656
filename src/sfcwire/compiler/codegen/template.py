"""Render function code generation."""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Union

from sfcwire.compiler.ast_nodes import (
    AttrValue,
    CustomDirectiveAttribute,
    DomPropAttribute,
    ElementNode,
    ElseAttribute,
    ElseIfAttribute,
    EventAttribute,
    ForAttribute,
    IfAttribute,
    InterpolationNode,
    SlotInvocationNode,
    TemplateChild,
    TextNode,
)
from sfcwire.compiler.bindings import collect_bindings, normalize, spread_segments
from sfcwire.compiler.codegen.js import js_array, js_key, js_object_pairs, js_string
from sfcwire.compiler.exceptions import CodeGenError
from sfcwire.compiler.expressions import is_function_expression, is_simple_path

RENDER_PREFIX = "with(this){return "
RENDER_SUFFIX = "}"

# Data keys that live at the top level of the element data object
TOP_LEVEL_KEYS = ("key", "ref", "slot")
DATA_KEYS = TOP_LEVEL_KEYS + ("class", "style")

KNOWN_SPECIALS = (
    EventAttribute,
    IfAttribute,
    ElseIfAttribute,
    ElseAttribute,
    ForAttribute,
    DomPropAttribute,
    CustomDirectiveAttribute,
)

MODIFIER_GUARDS = {
    "stop": "$event.stopPropagation();",
    "prevent": "$event.preventDefault();",
    "self": "if($event.target!==$event.currentTarget)return null;",
}
KEY_MODIFIERS = {
    "enter": "Enter",
    "tab": "Tab",
    "esc": "Escape",
    "space": " ",
    "up": "ArrowUp",
    "down": "ArrowDown",
    "left": "ArrowLeft",
    "right": "ArrowRight",
    "delete": "Delete",
}
# Handled through the event name or the nativeOn entry
NAME_MODIFIERS = {"capture": "!", "once": "~", "passive": "&"}

STYLE_DECL_RE = re.compile(r";(?![^(]*\))")

Mapping = Tuple[int, int]


class CodeWriter:
    """Accumulates generated text and records source offsets as it goes."""

    def __init__(self) -> None:
        self._parts: List[str] = []
        self._length = 0
        self.mappings: List[Mapping] = []

    def write(self, text: str) -> None:
        self._parts.append(text)
        self._length += len(text)

    def mark(self, source_offset: int) -> None:
        """Map the next written character back to ``source_offset``."""
        self.mappings.append((self._length, source_offset))

    def getvalue(self) -> str:
        return "".join(self._parts)


@dataclass
class RenderOutput:
    """Generated render function source.

    ``mappings`` pairs offsets in ``code`` with offsets in the component
    file. ``static_render_fns`` are only filled when static hoisting is on.
    """

    code: str
    helper_calls: Set[str] = field(default_factory=set)
    static_render_fns: List[str] = field(default_factory=list)
    mappings: List[Mapping] = field(default_factory=list)


@dataclass
class _TextRun:
    parts: List[Union[TextNode, InterpolationNode]]


@dataclass
class _IfChain:
    branches: List[Union[ElementNode, SlotInvocationNode]]
    closed: bool = False


_Item = Union[_TextRun, _IfChain, ElementNode, SlotInvocationNode]


def tag_literal(tag: str) -> str:
    return js_string(tag, quote="'")


def is_component(tag: str) -> bool:
    return "-" in tag or tag[:1].isupper()


class TemplateCodegen:
    """Generates render function source from a parsed template."""

    def __init__(self, hoist_static: bool = False) -> None:
        self.hoist_static = hoist_static
        self._helpers: Set[str] = set()
        self._static_fns: List[str] = []
        self._in_static = False

    def generate(self, root: ElementNode) -> RenderOutput:
        """Compile the children of the template root into one render function."""
        self._reset_state()
        tree = normalize(root)

        writer = CodeWriter()
        items = self._group(tree.children)
        if items:
            # The parser guarantees a single root
            self._gen_item(items[0], writer)
        else:
            writer.write(self._empty())

        shift = len(RENDER_PREFIX)
        return RenderOutput(
            code=RENDER_PREFIX + writer.getvalue() + RENDER_SUFFIX,
            helper_calls=set(self._helpers),
            static_render_fns=list(self._static_fns),
            mappings=[(gen + shift, src) for gen, src in writer.mappings],
        )

    def _reset_state(self) -> None:
        self._helpers = set()
        self._static_fns = []
        self._in_static = False

    def _helper(self, name: str) -> str:
        self._helpers.add(name)
        return name

    def _empty(self) -> str:
        return self._helper("_e") + "()"

    # === Grouping ===

    def _group(self, children: List[TemplateChild]) -> List[_Item]:
        """Merge adjacent text into runs and v-if/v-else siblings into chains."""
        items: List[_Item] = []
        for child in children:
            if isinstance(child, (TextNode, InterpolationNode)):
                if items and isinstance(items[-1], _TextRun):
                    items[-1].parts.append(child)
                else:
                    items.append(_TextRun([child]))
                continue

            if not isinstance(child, (ElementNode, SlotInvocationNode)):
                raise CodeGenError(f"Unknown template node {type(child).__name__}")

            is_else = child.get_special(ElseAttribute) is not None
            if is_else or child.get_special(ElseIfAttribute) is not None:
                chain = items[-1] if items else None
                if not isinstance(chain, _IfChain) or chain.closed:
                    raise CodeGenError(
                        "v-else/v-else-if has no matching v-if", offset=child.start
                    )
                chain.branches.append(child)
                chain.closed = is_else
                continue

            if child.get_special(IfAttribute) and not child.get_special(ForAttribute):
                items.append(_IfChain([child]))
            else:
                items.append(child)
        return items

    def _normalization_hint(self, items: List[_Item]) -> int:
        nodes: List[Union[ElementNode, SlotInvocationNode]] = []
        for item in items:
            if isinstance(item, _IfChain):
                nodes.extend(item.branches)
            elif not isinstance(item, _TextRun):
                nodes.append(item)

        for node in nodes:
            if isinstance(node, SlotInvocationNode):
                return 2
            if node.is_fragment or node.get_special(ForAttribute):
                return 2
        for item in items:
            if isinstance(item, _TextRun) and any(
                isinstance(p, InterpolationNode) for p in item.parts
            ):
                return 1
        return 0

    # === Node generation ===

    def _gen_item(self, item: _Item, w: CodeWriter) -> None:
        if isinstance(item, _TextRun):
            self._gen_text(item, w)
        elif isinstance(item, _IfChain):
            self._gen_if_chain(item, w)
        else:
            self._gen_node(item, w)

    def _gen_text(self, run: _TextRun, w: CodeWriter) -> None:
        w.write(self._helper("_v") + "(")
        for i, part in enumerate(run.parts):
            if i:
                w.write("+")
            w.mark(part.start)
            if isinstance(part, TextNode):
                w.write(js_string(part.text))
            else:
                w.write(f"{self._helper('_s')}({part.expression})")
        w.write(")")

    def _gen_if_chain(self, chain: _IfChain, w: CodeWriter) -> None:
        for branch in chain.branches:
            cond = branch.get_special(IfAttribute) or branch.get_special(ElseIfAttribute)
            if not isinstance(cond, (IfAttribute, ElseIfAttribute)):
                self._gen_node(branch, w)
                return
            w.mark(cond.start)
            w.write(f"({cond.condition})?")
            self._gen_node(branch, w)
            w.write(":")
        w.write(self._empty())

    def _gen_node(
        self, node: Union[ElementNode, SlotInvocationNode], w: CodeWriter
    ) -> None:
        loop = node.get_special(ForAttribute)
        if not isinstance(loop, ForAttribute):
            self._gen_plain(node, w)
            return

        # v-for wins over a v-if on the same element; the condition runs per item
        w.mark(loop.start)
        w.write(
            f"{self._helper('_l')}(({loop.iterable}),"
            f"function({','.join(loop.aliases)}){{return "
        )
        cond = node.get_special(IfAttribute)
        if isinstance(cond, IfAttribute):
            w.write(f"({cond.condition})?")
            self._gen_plain(node, w)
            w.write(":" + self._empty())
        else:
            self._gen_plain(node, w)
        w.write("})")

    def _gen_plain(
        self, node: Union[ElementNode, SlotInvocationNode], w: CodeWriter
    ) -> None:
        self._check_specials(node)
        if isinstance(node, SlotInvocationNode):
            self._gen_slot(node, w)
            return
        if node.is_fragment:
            self._gen_fragment(node, w)
            return
        if self.hoist_static and not self._in_static and self._is_hoistable(node):
            self._gen_hoisted(node, w)
            return

        w.mark(node.start)
        w.write(f"{self._helper('_c')}({tag_literal(node.tag)}")
        data = self._gen_data(node)
        if data is not None:
            w.write("," + data)
        if node.children:
            w.write(",")
            hint = self._gen_children(node.children, w)
            if hint:
                w.write(f",{hint}")
        w.write(")")

    def _gen_children(self, children: List[TemplateChild], w: CodeWriter) -> int:
        items = self._group(children)
        w.write("[")
        for i, item in enumerate(items):
            if i:
                w.write(",")
            self._gen_item(item, w)
        w.write("]")
        return self._normalization_hint(items)

    def _gen_fragment(self, node: ElementNode, w: CodeWriter) -> None:
        w.mark(node.start)
        if not node.children:
            w.write("void 0")
            return
        self._gen_children(node.children, w)

    def _gen_slot(self, slot: SlotInvocationNode, w: CodeWriter) -> None:
        """Emit ``_t(name, fallback, extra, dynamic)``.

        Arguments are positional: an absent argument before a present one
        is written as ``null``, trailing absent ones are dropped.
        """
        extra = (
            js_object_pairs((js_key(k), v) for k, v in slot.static_extra_props.items())
            if slot.static_extra_props is not None
            else None
        )
        present = [
            bool(slot.fallback_children),
            extra is not None,
            slot.dynamic_binding_expr is not None,
        ]
        count = max((i + 1 for i, p in enumerate(present) if p), default=0)

        w.mark(slot.start)
        name = slot.name_expression
        if name is None:
            name = js_string(slot.name)
        w.write(f"{self._helper('_t')}({name}")
        if count >= 1:
            w.write(",")
            if slot.fallback_children:
                w.write("function(){return ")
                self._gen_children(slot.fallback_children, w)
                w.write("}")
            else:
                w.write("null")
        if count >= 2:
            w.write("," + (extra if extra is not None else "null"))
        if count >= 3:
            w.write(f",{slot.dynamic_binding_expr}")
        w.write(")")

    # === Static hoisting ===

    def _is_static(self, node: TemplateChild) -> bool:
        if isinstance(node, TextNode):
            return True
        if not isinstance(node, ElementNode):
            return False
        return (
            not node.is_fragment
            and not is_component(node.tag)
            and not node.directives
            and not node.special_attributes
            and not any(key in node.static_attrs for key in TOP_LEVEL_KEYS)
            and all(self._is_static(c) for c in node.children)
        )

    def _is_hoistable(self, node: ElementNode) -> bool:
        if not node.children:
            return False
        if len(node.children) == 1 and isinstance(node.children[0], TextNode):
            return False
        return self._is_static(node)

    def _gen_hoisted(self, node: ElementNode, w: CodeWriter) -> None:
        inner = CodeWriter()
        self._in_static = True
        try:
            self._gen_plain(node, inner)
        finally:
            self._in_static = False

        code = RENDER_PREFIX + inner.getvalue() + RENDER_SUFFIX
        if code in self._static_fns:
            index = self._static_fns.index(code)
        else:
            index = len(self._static_fns)
            self._static_fns.append(code)
        w.mark(node.start)
        w.write(f"{self._helper('_m')}({index})")

    # === Element data ===

    def _check_specials(self, node: Union[ElementNode, SlotInvocationNode]) -> None:
        for attr in node.special_attributes:
            if not isinstance(attr, KNOWN_SPECIALS):
                raise CodeGenError(
                    f"Unsupported directive '{attr.name}'", offset=attr.start
                )

    def _gen_data(self, node: ElementNode) -> Optional[str]:
        entries, _ = collect_bindings(node.directives)
        groups, spreads = spread_segments(node.directives)
        static = dict(node.static_attrs)
        pairs: List[Tuple[str, str]] = []

        directives = [
            self._gen_directive(a)
            for a in node.special_attributes
            if isinstance(a, CustomDirectiveAttribute)
        ]
        if directives:
            pairs.append(("directives", js_array(directives)))

        for key in TOP_LEVEL_KEYS:
            if key in entries:
                pairs.append((key, entries[key]))
            elif key in static:
                pairs.append((key, self._static_value(static.pop(key))))

        if "class" in static:
            value = static.pop("class")
            classes = " ".join(value.split()) if isinstance(value, str) else ""
            pairs.append(("staticClass", js_string(classes)))
        if "class" in entries:
            pairs.append(("class", entries["class"]))
        if "style" in static:
            pairs.append(("staticStyle", self._static_style(static.pop("style"))))
        if "style" in entries:
            pairs.append(("style", entries["style"]))

        # Only plain attributes take part in spread ordering
        groups = [
            [(js_string(k), v) for k, v in group if k not in DATA_KEYS] for group in groups
        ]
        attrs = [(js_string(k), self._static_value(v)) for k, v in static.items()]
        attrs += groups[-1]
        if attrs:
            pairs.append(("props" if is_component(node.tag) else "attrs", js_object_pairs(attrs)))

        dom_props = [
            (js_string(a.prop), a.expression)
            for a in node.special_attributes
            if isinstance(a, DomPropAttribute)
        ]
        if dom_props:
            pairs.append(("domProps", js_object_pairs(dom_props)))

        on, native_on = self._gen_events(node)
        if on:
            pairs.append(("on", on))
        if native_on:
            pairs.append(("nativeOn", native_on))

        data = js_object_pairs(pairs) if pairs else None
        # _b keeps keys already present; nest from the last source group outward
        tag = tag_literal(node.tag)
        for spread, group in zip(reversed(spreads), reversed(groups[:-1])):
            bind = self._helper("_b")
            data = f"{bind}({data or '{}'},{tag},({spread}),false)"
            if group:
                data = f"{bind}({data},{tag},{js_object_pairs(group)},false)"
        return data

    def _static_value(self, value: AttrValue) -> str:
        return "true" if value is True else js_string(str(value))

    def _static_style(self, value: AttrValue) -> str:
        pairs = []
        if isinstance(value, str):
            for decl in STYLE_DECL_RE.split(value):
                prop, sep, prop_value = decl.partition(":")
                if sep and prop.strip():
                    pairs.append((js_string(prop.strip()), js_string(prop_value.strip())))
        return js_object_pairs(pairs)

    def _gen_directive(self, attr: CustomDirectiveAttribute) -> str:
        parts = [("name", js_string(attr.directive)), ("rawName", js_string(attr.name))]
        if attr.expression:
            parts.append(("value", f"({attr.expression})"))
            parts.append(("expression", js_string(attr.expression)))
        if attr.arg:
            parts.append(("arg", js_string(attr.arg)))
        if attr.modifiers:
            parts.append(
                ("modifiers", js_object_pairs((js_string(m), "true") for m in attr.modifiers))
            )
        return js_object_pairs(parts)

    def _gen_events(self, node: ElementNode) -> Tuple[Optional[str], Optional[str]]:
        on: Dict[str, List[str]] = {}
        native_on: Dict[str, List[str]] = {}
        for attr in node.special_attributes:
            if not isinstance(attr, EventAttribute):
                continue
            name = attr.event
            for modifier, prefix in NAME_MODIFIERS.items():
                if modifier in attr.modifiers:
                    name = prefix + name
            target = native_on if "native" in attr.modifiers and is_component(node.tag) else on
            target.setdefault(name, []).append(self._gen_handler(attr))

        def render(handlers: Dict[str, List[str]]) -> Optional[str]:
            if not handlers:
                return None
            return js_object_pairs(
                (js_string(k), v[0] if len(v) == 1 else js_array(v))
                for k, v in handlers.items()
            )

        return render(on), render(native_on)

    def _gen_handler(self, attr: EventAttribute) -> str:
        guards = []
        for modifier in attr.modifiers:
            if modifier in MODIFIER_GUARDS:
                guards.append(MODIFIER_GUARDS[modifier])
            elif modifier in KEY_MODIFIERS:
                guards.append(
                    f"if($event.key!=={js_string(KEY_MODIFIERS[modifier])})return null;"
                )
            elif modifier not in NAME_MODIFIERS and modifier != "native":
                raise CodeGenError(
                    f"Unsupported event modifier '.{modifier}'", offset=attr.start
                )

        handler = attr.handler
        simple = is_simple_path(handler)
        function = is_function_expression(handler)
        if not guards:
            if simple or function:
                return handler
            return f"function($event){{{handler}}}"

        if simple:
            body = f"return {handler}.apply(null,arguments)"
        elif function:
            body = f"return ({handler}).apply(null,arguments)"
        else:
            body = handler
        return f"function($event){{{''.join(guards)}{body}}}"
