"""Binding resolution: how bind directives surface on each element."""

import dataclasses
import json
from typing import Dict, List, Optional, Tuple

from sfcwire.compiler.ast_nodes import (
    BindingState,
    Directive,
    DirectiveForm,
    ElementNode,
    IndividualOnly,
    InterpolationNode,
    Mixed,
    NoBindings,
    SlotInvocationNode,
    SpreadOnly,
    TemplateChild,
    TextNode,
)
from sfcwire.compiler.codegen.js import js_object
from sfcwire.compiler.exceptions import CodeGenError, DuplicateKeyError


def collect_bindings(
    directives: List[Directive], static_entries: Optional[Dict[str, str]] = None
) -> Tuple[Dict[str, str], List[str]]:
    """Split directives into individual key -> expression entries and spread expressions.

    Both keep source order. ``static_entries`` are literal attributes that
    take part in the same key space (used for ``<slot>``).
    """
    entries: Dict[str, str] = dict(static_entries or {})
    spreads: List[str] = []
    for directive in directives:
        if directive.form is DirectiveForm.INDIVIDUAL:
            key = directive.key or ""
            if key in entries:
                raise DuplicateKeyError(
                    f"'{key}' is bound more than once on the same element",
                    offset=directive.start,
                )
            entries[key] = directive.expression
        elif directive.form is DirectiveForm.SPREAD:
            spreads.append(directive.expression)
        else:
            raise CodeGenError(
                f"Unsupported directive form {directive.form!r}", offset=directive.start
            )
    return entries, spreads


def spread_segments(
    directives: List[Directive],
) -> Tuple[List[List[Tuple[str, str]]], List[str]]:
    """Individual bindings grouped by the spreads that separate them.

    Returns ``(groups, spreads)`` with ``len(groups) == len(spreads) + 1``:
    ``groups[i]`` holds the ``(key, expression)`` pairs written between
    ``spreads[i - 1]`` and ``spreads[i]``.
    """
    collect_bindings(directives)
    groups: List[List[Tuple[str, str]]] = [[]]
    spreads: List[str] = []
    for directive in directives:
        if directive.form is DirectiveForm.SPREAD:
            spreads.append(directive.expression)
            groups.append([])
        else:
            groups[-1].append((directive.key or "", directive.expression))
    return groups, spreads


def binding_state(
    directives: List[Directive], static_entries: Optional[Dict[str, str]] = None
) -> BindingState:
    entries, spreads = collect_bindings(directives, static_entries)
    if spreads:
        # Several spreads on one element: the last one wins
        if entries:
            return Mixed(entries=entries, expression=spreads[-1])
        return SpreadOnly(expression=spreads[-1])
    if entries:
        return IndividualOnly(entries=entries)
    return NoBindings()


def resolve_element_bindings(node: ElementNode) -> BindingState:
    """Binding state of a generic (non-slot) element."""
    return binding_state(node.directives)


def resolve_slot_bindings(node: ElementNode) -> SlotInvocationNode:
    """Turn a ``<slot>`` element into a slot invocation.

    Position 3 (``static_extra_props``) only exists to keep literal keys
    apart from a spread whose keys are unknown; without a spread the
    individual bindings go straight to position 4.
    """
    static_entries = {
        k: json.dumps(v) if isinstance(v, str) else "true"
        for k, v in node.static_attrs.items()
    }
    collect_bindings(node.directives)
    directives = [d for d in node.directives if not _binds_name(d)]
    name_expression = next(
        (d.expression for d in node.directives if _binds_name(d)), None
    )
    state = binding_state(directives, static_entries)

    extra: Optional[Dict[str, str]] = None
    dynamic: Optional[str] = None
    if isinstance(state, Mixed):
        extra = dict(sorted(state.entries.items()))
        dynamic = state.expression
    elif isinstance(state, SpreadOnly):
        dynamic = state.expression
    elif isinstance(state, IndividualOnly):
        dynamic = js_object(state.entries)

    return SlotInvocationNode(
        name=node.slot_name or "default",
        fallback_children=[normalize_child(c) for c in node.children] or None,
        name_expression=name_expression,
        static_extra_props=extra,
        dynamic_binding_expr=dynamic,
        special_attributes=list(node.special_attributes),
        start=node.start,
        end=node.end,
    )


def _binds_name(directive: Directive) -> bool:
    return directive.form is DirectiveForm.INDIVIDUAL and directive.key == "name"


def normalize_child(node: TemplateChild) -> TemplateChild:
    if isinstance(node, ElementNode):
        if node.tag == "slot":
            return resolve_slot_bindings(node)
        collect_bindings(node.directives)
        return dataclasses.replace(
            node, children=[normalize_child(c) for c in node.children]
        )
    if isinstance(node, (TextNode, InterpolationNode, SlotInvocationNode)):
        return node
    raise CodeGenError(f"Unknown template node {type(node).__name__}")


def normalize(root: ElementNode) -> ElementNode:
    """Return a copy of the tree with slots resolved and bindings validated."""
    return dataclasses.replace(root, children=[normalize_child(c) for c in root.children])
