import unittest

from sfcwire.compiler.ast_nodes import ElementNode, SpecialAttribute
from sfcwire.compiler.codegen.template import RENDER_PREFIX, RenderOutput, TemplateCodegen
from sfcwire.compiler.exceptions import CodeGenError
from sfcwire.compiler.parser import TemplateParser
from sfcwire.compiler.splitter import split


def render(markup: str, hoist_static: bool = False) -> RenderOutput:
    text = f"<template>{markup}</template>"
    root = TemplateParser().parse(split(text)[0], "T.vue", text)
    return TemplateCodegen(hoist_static=hoist_static).generate(root)


class TestTemplateCodegen(unittest.TestCase):
    def assertRenders(self, markup: str, expected: str) -> None:
        code = render(markup).code
        self.assertTrue(code.startswith(RENDER_PREFIX))
        self.assertTrue(code.endswith("}"))
        self.assertEqual(code[len(RENDER_PREFIX) : -1], expected)

    def test_render_wrapper(self) -> None:
        self.assertEqual(render("<div></div>").code, "with(this){return _c('div')}")

    def test_elements_and_text(self) -> None:
        self.assertRenders("<div/>", "_c('div')")
        self.assertRenders("<h1>BOOOO</h1>", "_c('h1',[_v(\"BOOOO\")])")
        self.assertRenders(
            "<div><h1>A</h1><p>B</p></div>",
            "_c('div',[_c('h1',[_v(\"A\")]),_c('p',[_v(\"B\")])])",
        )

    def test_text_escaping(self) -> None:
        self.assertRenders('<p>say "hi" \\ bye</p>', "_c('p',[_v(\"say \\\"hi\\\" \\\\ bye\")])")

    def test_interpolation_merges_with_text(self) -> None:
        self.assertRenders(
            "<h1>foo {{ x }} bar</h1>",
            "_c('h1',[_v(\"foo \"+_s(x)+\" bar\")],1)",
        )
        self.assertRenders("<h1>{{ a }}{{ b }}</h1>", "_c('h1',[_v(_s(a)+_s(b))],1)")

    def test_root_text_and_empty_template(self) -> None:
        self.assertRenders("Hello", '_v("Hello")')
        self.assertRenders("", "_e()")

    def test_static_and_bound_attributes(self) -> None:
        self.assertRenders(
            '<h1 a="b" c="d" e>Hmm</h1>',
            "_c('h1',{attrs:{\"a\":\"b\",\"c\":\"d\",\"e\":true}},[_v(\"Hmm\")])",
        )
        self.assertRenders(
            '<h1 :value="value">Hmm</h1>',
            "_c('h1',{attrs:{\"value\":value}},[_v(\"Hmm\")])",
        )

    def test_components_receive_props(self) -> None:
        self.assertRenders(
            '<custom-component :value="value"></custom-component>',
            "_c('custom-component',{props:{\"value\":value}})",
        )

    def test_class_and_style(self) -> None:
        self.assertRenders(
            '<div class="a  b" :class="{c: on}" style="color: red; width: 1px" :style="s"></div>',
            "_c('div',{staticClass:\"a b\",class:{c: on},"
            "staticStyle:{\"color\":\"red\",\"width\":\"1px\"},style:s})",
        )

    def test_top_level_keys(self) -> None:
        self.assertRenders(
            '<li :key="item.id" ref="row"></li>',
            "_c('li',{key:item.id,ref:\"row\"})",
        )

    def test_spread_wraps_data(self) -> None:
        self.assertRenders(
            '<div id="a" bind="attrs"></div>',
            "_c('div',_b({attrs:{\"id\":\"a\"}},'div',(attrs),false))",
        )
        self.assertRenders(
            '<div bind="one" v-bind="two"></div>',
            "_c('div',_b(_b({},'div',(two),false),'div',(one),false))",
        )

    def test_spread_keeps_source_order(self) -> None:
        before = render('<div :id="a" v-bind="o"></div>').code
        after = render('<div v-bind="o" :id="a"></div>').code
        self.assertNotEqual(before, after)
        self.assertRenders(
            '<div :id="a" v-bind="o"></div>',
            "_c('div',_b(_b({},'div',(o),false),'div',{\"id\":a},false))",
        )
        self.assertRenders(
            '<div v-bind="o" :id="a"></div>',
            "_c('div',_b({attrs:{\"id\":a}},'div',(o),false))",
        )
        self.assertRenders(
            '<div :key="k" :title="t" v-bind="o" :id="a"></div>',
            "_c('div',_b(_b({key:k,attrs:{\"id\":a}},'div',(o),false),"
            "'div',{\"title\":t},false))",
        )

    def test_events(self) -> None:
        self.assertRenders(
            '<button @click="count++">+</button>',
            "_c('button',{on:{\"click\":function($event){count++}}},[_v(\"+\")])",
        )
        self.assertRenders('<button on:click="save"></button>', "_c('button',{on:{\"click\":save}})")
        self.assertRenders(
            '<button @click="() => go(1)"></button>',
            "_c('button',{on:{\"click\":() => go(1)}})",
        )
        self.assertRenders(
            '<form @submit.prevent="save"></form>',
            "_c('form',{on:{\"submit\":function($event){$event.preventDefault();"
            "return save.apply(null,arguments)}}})",
        )
        self.assertRenders('<a @click.once.capture="go"></a>', "_c('a',{on:{\"~!click\":go}})")
        self.assertRenders(
            '<input @keyup.enter="send">',
            "_c('input',{on:{\"keyup\":function($event){if($event.key!==\"Enter\")return null;"
            "return send.apply(null,arguments)}}})",
        )

    def test_repeated_event_handlers_become_array(self) -> None:
        self.assertRenders('<a @click="a" v-on:click="b"></a>', "_c('a',{on:{\"click\":[a,b]}})")

    def test_native_events_on_components(self) -> None:
        self.assertRenders(
            '<my-button @click.native="go"></my-button>',
            "_c('my-button',{nativeOn:{\"click\":go}})",
        )

    def test_unknown_event_modifier(self) -> None:
        with self.assertRaises(CodeGenError):
            render('<a @click.bogus="go"></a>')

    def test_if_chain(self) -> None:
        self.assertRenders('<h1 v-if="a">A</h1>', "(a)?_c('h1',[_v(\"A\")]):_e()")
        self.assertRenders(
            '<div><h1 v-if="a">A</h1><h2 v-else-if="b">B</h2><h3 v-else>C</h3></div>',
            "_c('div',[(a)?_c('h1',[_v(\"A\")]):(b)?_c('h2',[_v(\"B\")]):_c('h3',[_v(\"C\")])])",
        )
        self.assertRenders(
            '<div><p v-if="a">A</p><p v-else-if="b">B</p></div>',
            "_c('div',[(a)?_c('p',[_v(\"A\")]):(b)?_c('p',[_v(\"B\")]):_e()])",
        )

    def test_for(self) -> None:
        self.assertRenders(
            '<ul><li v-for="(item, i) in items" :key="i">{{ item }}</li></ul>',
            "_c('ul',[_l((items),function(item,i){return "
            "_c('li',{key:i},[_v(_s(item))],1)})],2)",
        )

    def test_for_takes_priority_over_if(self) -> None:
        self.assertRenders(
            '<ul><li v-for="x of xs" v-if="x.ok">y</li></ul>',
            "_c('ul',[_l((xs),function(x){return (x.ok)?_c('li',[_v(\"y\")]):_e()})],2)",
        )

    def test_dom_props(self) -> None:
        self.assertRenders('<div v-text="msg"></div>', "_c('div',{domProps:{\"textContent\":msg}})")
        self.assertRenders('<div v-html="raw"></div>', "_c('div',{domProps:{\"innerHTML\":raw}})")

    def test_custom_directives(self) -> None:
        self.assertRenders(
            '<div v-show="true"></div>',
            "_c('div',{directives:[{name:\"show\",rawName:\"v-show\",value:(true),expression:\"true\"}]})",
        )
        self.assertRenders(
            '<div v-custom:arg.foo.bar="true"></div>',
            "_c('div',{directives:[{name:\"custom\",rawName:\"v-custom:arg.foo.bar\","
            "value:(true),expression:\"true\",arg:\"arg\",modifiers:{\"foo\":true,\"bar\":true}}]})",
        )

    def test_fragments(self) -> None:
        self.assertRenders("<div><template></template></div>", "_c('div',[void 0],2)")
        self.assertRenders("<div><template /></div>", "_c('div',[void 0],2)")
        self.assertRenders(
            "<div><template><p>x</p></template></div>",
            "_c('div',[[_c('p',[_v(\"x\")])]],2)",
        )
        self.assertRenders(
            '<div><template v-if="ok"></template></div>',
            "_c('div',[(ok)?void 0:_e()],2)",
        )

    def test_slots(self) -> None:
        self.assertRenders("<div><slot></slot></div>", "_c('div',[_t(\"default\")],2)")
        self.assertRenders(
            "<div><slot name=\"test\" bind:value=\"'data'\"></slot></div>",
            "_c('div',[_t(\"test\",null,null,{value:'data'})],2)",
        )
        self.assertRenders(
            "<div><slot name=\"test\" bind=\"{value:'data'}\"></slot></div>",
            "_c('div',[_t(\"test\",null,null,{value:'data'})],2)",
        )
        self.assertRenders(
            "<div><slot name=\"test\" bind=\"{test:'ok'}\" bind:foo=\"'foo'\" bind:bar=\"'bar'\"></slot></div>",
            "_c('div',[_t(\"test\",null,{bar:'bar',foo:'foo'},{test:'ok'})],2)",
        )

    def test_slot_fallback_thunk(self) -> None:
        self.assertRenders(
            "<div><slot>Default</slot></div>",
            "_c('div',[_t(\"default\",function(){return [_v(\"Default\")]})],2)",
        )
        self.assertRenders(
            '<div><slot :n="1"><b>{{ x }}</b></slot></div>',
            "_c('div',[_t(\"default\",function(){return [_c('b',[_v(_s(x))],1)]},null,{n:1})],2)",
        )

    def test_bound_slot_name(self) -> None:
        self.assertRenders(
            '<div><slot :name="n"></slot></div>',
            "_c('div',[_t(n)],2)",
        )
        self.assertRenders(
            '<div><slot :name="n" :v="1"></slot></div>',
            "_c('div',[_t(n,null,null,{v:1})],2)",
        )

    def test_normalization_hints(self) -> None:
        self.assertRenders("<div><p>a</p></div>", "_c('div',[_c('p',[_v(\"a\")])])")
        self.assertRenders(
            "<div>{{ a }}<p>b</p></div>",
            "_c('div',[_v(_s(a)),_c('p',[_v(\"b\")])],1)",
        )
        self.assertRenders(
            "<div>{{ a }}<slot></slot></div>",
            "_c('div',[_v(_s(a)),_t(\"default\")],2)",
        )

    def test_helper_calls(self) -> None:
        self.assertEqual(render("<p>{{ x }}</p>").helper_calls, {"_c", "_v", "_s"})
        self.assertEqual(render('<p v-if="a"></p>').helper_calls, {"_c", "_e"})

    def test_static_hoisting(self) -> None:
        output = render(
            '<div><p class="x"><b>static</b></p><span>{{ n }}</span></div>',
            hoist_static=True,
        )
        self.assertEqual(
            output.code,
            "with(this){return _c('div',[_m(0),_c('span',[_v(_s(n))],1)])}",
        )
        self.assertEqual(
            output.static_render_fns,
            ["with(this){return _c('p',{staticClass:\"x\"},[_c('b',[_v(\"static\")])])}"],
        )
        self.assertIn("_m", output.helper_calls)

    def test_identical_static_trees_share_an_index(self) -> None:
        output = render(
            "<div><p><b>s</b></p><i>{{ n }}</i><p><b>s</b></p></div>",
            hoist_static=True,
        )
        self.assertEqual(output.code.count("_m(0)"), 2)
        self.assertEqual(len(output.static_render_fns), 1)

    def test_hoisting_is_off_by_default(self) -> None:
        output = render("<div><p><b>s</b></p></div>")
        self.assertEqual(output.static_render_fns, [])
        self.assertNotIn("_m", output.helper_calls)

    def test_hoisting_does_not_change_dynamic_output(self) -> None:
        markup = '<div :id="x"><span>{{ n }}</span></div>'
        self.assertEqual(render(markup).code, render(markup, hoist_static=True).code)

    def test_unknown_directive_kind(self) -> None:
        root = ElementNode(
            tag="template",
            children=[
                ElementNode(
                    tag="div",
                    special_attributes=[SpecialAttribute(name="x-weird", value="1")],
                )
            ],
        )
        with self.assertRaises(CodeGenError):
            TemplateCodegen().generate(root)

    def test_mappings_point_back_to_source(self) -> None:
        markup = "<div>{{ x }}</div>"
        text = f"<template>{markup}</template>"
        output = render(markup)
        self.assertEqual(output.mappings[0], (len(RENDER_PREFIX), text.index("<div")))
        generated = [g for g, s in output.mappings if s == text.index("{{")]
        self.assertEqual(len(generated), 1)
        self.assertTrue(output.code[generated[0] :].startswith("_s(x)"))

    def test_generate_is_deterministic(self) -> None:
        markup = '<div :a="1" @click="go"><slot :x="y">{{ z }}</slot></div>'
        first, second = render(markup), render(markup)
        self.assertEqual(first.code, second.code)
        self.assertEqual(first.mappings, second.mappings)


if __name__ == "__main__":
    unittest.main()
