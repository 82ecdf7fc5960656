"""Module emitters: the template block module and the component entry module."""

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sfcwire.compiler.ast_nodes import Block, BlockKind
from sfcwire.compiler.codegen.js import js_string
from sfcwire.compiler.codegen.sourcemap import SourceMapBuilder
from sfcwire.compiler.codegen.template import RenderOutput, TemplateCodegen
from sfcwire.compiler.exceptions import SFCCompileError
from sfcwire.compiler.parser import TemplateParser
from sfcwire.config import CompilerOptions
from sfcwire.renderer import render_template

RENDER_DECL = "var render = new Function("


@dataclass
class GeneratedModule:
    code: str
    map: Optional[Dict[str, Any]] = None


class ModuleGenerator:
    """Builds the JavaScript modules served for a component file."""

    def __init__(self, options: Optional[CompilerOptions] = None) -> None:
        self.options = options or CompilerOptions()
        self.parser = TemplateParser()

    def compile_template(self, block: Block, file_path: str, source: str) -> GeneratedModule:
        """Parse, normalize and generate the module for a template block."""
        root = self.parser.parse(block, file_path, source)
        codegen = TemplateCodegen(hoist_static=self.options.hoist_static)
        try:
            output = codegen.generate(root)
        except SFCCompileError as e:
            raise e.with_source(source, file_path)
        return self.template_module(output, file_path, source)

    def template_module(
        self, output: RenderOutput, file_path: str, source: str
    ) -> GeneratedModule:
        """Wrap render source into an ES module exporting render/staticRenderFns.

        The render body uses ``with``, so it is built with ``new Function``
        rather than written inline into the (strict) module.
        """
        lines = [RENDER_DECL + js_string(output.code) + ");"]
        static_fns = ",".join(
            f"new Function({js_string(code)})" for code in output.static_render_fns
        )
        lines.append(f"var staticRenderFns = [{static_fns}];")
        lines.append("export { render, staticRenderFns };")
        code = "\n".join(lines) + "\n"

        source_map = None
        if self.options.source_maps:
            builder = SourceMapBuilder(file_path, source, file=file_path)
            for column, offset in self._render_columns(output):
                builder.add(0, column, offset)
            source_map = builder.to_dict()
        return GeneratedModule(code=code, map=source_map)

    def _render_columns(self, output: RenderOutput) -> List[Tuple[int, int]]:
        """Translate render-code offsets into columns of the quoted literal on line 0."""
        columns = []
        column = len(RENDER_DECL) + 1
        previous = 0
        for gen_offset, src_offset in sorted(output.mappings):
            # js_string escapes per character, so lengths add up
            column += len(js_string(output.code[previous:gen_offset])) - 2
            previous = gen_offset
            columns.append((column, src_offset))
        return columns

    def entry_module(
        self, file_path: str, blocks: List[Block], ids: List[str]
    ) -> GeneratedModule:
        """Entry module for the component root that stitches its blocks together."""
        by_kind: Dict[BlockKind, List[str]] = {}
        for block, block_id in zip(blocks, ids):
            by_kind.setdefault(block.kind, []).append(block_id)

        scoped = any(b.kind is BlockKind.STYLE and b.scoped for b in blocks)
        code = render_template(
            "entry.js.j2",
            {
                "script": next(iter(by_kind.get(BlockKind.SCRIPT, [])), None),
                "template": next(iter(by_kind.get(BlockKind.TEMPLATE, [])), None),
                "styles": by_kind.get(BlockKind.STYLE, []),
                "customs": by_kind.get(BlockKind.CUSTOM, []),
                "scope_id": self.scope_id(file_path) if scoped else None,
                "file_path": file_path,
            },
        )
        return GeneratedModule(code=code)

    def scope_id(self, file_path: str) -> str:
        digest = hashlib.sha256(file_path.encode("utf-8")).hexdigest()
        return f"data-v-{digest[: self.options.scope_id_length]}"
