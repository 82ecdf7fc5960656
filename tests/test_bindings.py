import pytest

from sfcwire.compiler.ast_nodes import (
    ElementNode,
    IndividualOnly,
    Mixed,
    NoBindings,
    SlotInvocationNode,
    SpreadOnly,
)
from sfcwire.compiler.bindings import (
    normalize,
    resolve_element_bindings,
    resolve_slot_bindings,
    spread_segments,
)
from sfcwire.compiler.exceptions import DuplicateKeyError
from sfcwire.compiler.parser import TemplateParser
from sfcwire.compiler.splitter import split


def parse(markup: str) -> ElementNode:
    text = f"<template>{markup}</template>"
    return TemplateParser().parse(split(text)[0], "Test.vue", text)


def slot_of(markup: str) -> ElementNode:
    """The <slot> element inside a wrapping <div>."""
    return parse(f"<div>{markup}</div>").children[0].children[0]


def test_individual_only_collapses_to_dynamic_position():
    slot = resolve_slot_bindings(slot_of("<slot name=\"test\" bind:value=\"'data'\"></slot>"))
    assert slot.name == "test"
    assert slot.static_extra_props is None
    assert slot.dynamic_binding_expr == "{value:'data'}"


def test_spread_only_lands_in_dynamic_position():
    slot = resolve_slot_bindings(slot_of("<slot name=\"test\" bind=\"{value:'data'}\"></slot>"))
    assert slot.static_extra_props is None
    assert slot.dynamic_binding_expr == "{value:'data'}"


def test_individual_and_spread_forms_match():
    individual = resolve_slot_bindings(slot_of("<slot name=\"test\" bind:value=\"'data'\"></slot>"))
    spread = resolve_slot_bindings(slot_of("<slot name=\"test\" bind=\"{value:'data'}\"></slot>"))
    assert individual.static_extra_props == spread.static_extra_props
    assert individual.dynamic_binding_expr == spread.dynamic_binding_expr


def test_mixed_sorts_extra_props_and_spread_wins_dynamic():
    slot = resolve_slot_bindings(
        slot_of(
            "<slot name=\"test\" bind=\"{test:'ok'}\" "
            "bind:foo=\"'foo'\" bind:bar=\"'bar'\"></slot>"
        )
    )
    assert slot.static_extra_props == {"bar": "'bar'", "foo": "'foo'"}
    assert list(slot.static_extra_props) == ["bar", "foo"]
    assert slot.dynamic_binding_expr == "{test:'ok'}"


def test_individual_only_keeps_declaration_order():
    slot = resolve_slot_bindings(slot_of('<slot bind:b="1" bind:a="2"></slot>'))
    assert slot.dynamic_binding_expr == "{b:1,a:2}"


def test_last_spread_wins():
    slot = resolve_slot_bindings(slot_of('<slot bind="first" bind="second"></slot>'))
    assert slot.dynamic_binding_expr == "second"


def test_static_slot_attributes_join_individual_set():
    slot = resolve_slot_bindings(slot_of('<slot name="x" foo="bar" :baz="q"></slot>'))
    assert slot.static_extra_props is None
    assert slot.dynamic_binding_expr == '{foo:"bar",baz:q}'


def test_no_bindings_omits_both():
    slot = resolve_slot_bindings(slot_of("<slot>fallback</slot>"))
    assert slot.name == "default"
    assert slot.static_extra_props is None
    assert slot.dynamic_binding_expr is None
    assert slot.fallback_children[0].text == "fallback"


def test_empty_slot_has_no_fallback():
    slot = resolve_slot_bindings(slot_of("<slot></slot>"))
    assert slot.fallback_children is None


@pytest.mark.parametrize(
    "markup",
    [
        '<div><div :a="x" bind:a="y"></div></div>',
        '<div><slot :a="x" v-bind:a="y"></slot></div>',
        '<div><slot a="x" :a="y"></slot></div>',
    ],
)
def test_duplicate_keys_fail(markup):
    with pytest.raises(DuplicateKeyError):
        normalize(parse(markup))


def test_element_binding_states():
    div = parse('<div><p></p><p :a="1"></p><p bind="o"></p><p :a="1" bind="o"></p></div>').children[0]
    states = [resolve_element_bindings(p) for p in div.children]
    assert isinstance(states[0], NoBindings)
    assert states[1] == IndividualOnly(entries={"a": "1"})
    assert states[2] == SpreadOnly(expression="o")
    assert states[3] == Mixed(entries={"a": "1"}, expression="o")


def test_normalize_replaces_slots_without_mutating_input():
    root = parse("<div><slot name=\"s\" :v=\"1\"></slot></div>")
    normalized = normalize(root)
    assert isinstance(normalized.children[0].children[0], SlotInvocationNode)
    assert isinstance(root.children[0].children[0], ElementNode)


def test_spread_segments_follow_source_order():
    div = parse('<div :a="1" bind="o" :b="2" :c="3" v-bind="p"></div>').children[0]
    groups, spreads = spread_segments(div.directives)
    assert spreads == ["o", "p"]
    assert groups == [[("a", "1")], [("b", "2"), ("c", "3")], []]


def test_spread_segments_reject_duplicates_across_spreads():
    div = parse('<div :a="1" bind="o" :a="2"></div>').children[0]
    with pytest.raises(DuplicateKeyError):
        spread_segments(div.directives)


def test_bound_slot_name_is_not_a_prop():
    slot = resolve_slot_bindings(slot_of('<slot :name="current" :v="1"></slot>'))
    assert slot.name_expression == "current"
    assert slot.dynamic_binding_expr == "{v:1}"


def test_bound_slot_name_twice_fails():
    with pytest.raises(DuplicateKeyError):
        resolve_slot_bindings(slot_of('<slot :name="a" v-bind:name="b"></slot>'))
