"""Bundler-facing virtual module resolution.

A bundler drives three hooks per import: ``resolve_id``, ``load`` and
``transform``. Each returns ``None`` for ids this resolver does not own, so
the bundler can ask the next plugin in its chain.
"""

import dataclasses
import logging
import os
from typing import Callable, Optional

from sfcwire.compiler.ast_nodes import BlockKind
from sfcwire.compiler.codegen.generator import GeneratedModule, ModuleGenerator
from sfcwire.compiler.codegen.sourcemap import block_source_map
from sfcwire.compiler.exceptions import ResolutionOrderError
from sfcwire.compiler.preprocessor import StylePreprocessorRegistry
from sfcwire.compiler.splitter import split
from sfcwire.config import CompilerOptions
from sfcwire.ids import VirtualModuleId
from sfcwire.store import BlockStore, FileEntry

logger = logging.getLogger(__name__)

SourceReader = Callable[[str], str]


def read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


class ModuleResolver:
    def __init__(
        self,
        options: Optional[CompilerOptions] = None,
        read_source: Optional[SourceReader] = None,
        preprocessors: Optional[StylePreprocessorRegistry] = None,
    ) -> None:
        self.options = options or CompilerOptions()
        self.read_source = read_source or read_text
        self.preprocessors = preprocessors or StylePreprocessorRegistry()
        self.generator = ModuleGenerator(self.options)
        self.store = BlockStore()

    # === Bundler hooks ===

    def resolve_id(self, specifier: str, importer: Optional[str] = None) -> Optional[str]:
        """Claim block ids and component roots; enumerate a root's blocks on first sight."""
        module_id = self.parse_id(specifier)
        if module_id is not None:
            return module_id.format(self.options.namespace)

        if not self.options.is_component_path(specifier):
            return None

        path = self._absolute(specifier, importer)
        self._enumerate(path)
        logger.debug("Resolved %s -> %s", specifier, path)
        return path

    def load(self, module_id: str) -> Optional[GeneratedModule]:
        """Entry module for a root path, raw content for a block id."""
        block_id = self.parse_id(module_id)
        if block_id is None:
            if not self.options.is_component_path(module_id):
                return None
            # A root that was never resolved is enumerated on demand
            entry = self._enumerate(module_id)
            logger.debug("Loading entry module for %s", module_id)
            return self.generator.entry_module(
                entry.file_path,
                list(entry.blocks),
                [i.format(self.options.namespace) for i in entry.ids],
            )

        entry = self._require(block_id)
        block = entry.block_for(block_id)
        if block is None:
            raise ResolutionOrderError(
                f"Unknown block id {module_id}", file_path=block_id.file_path
            )
        logger.debug("Loading %s block #%d of %s", block.kind.value, block.index, entry.file_path)
        source_map = (
            block_source_map(block, entry.file_path, entry.source)
            if self.options.source_maps
            else None
        )
        return GeneratedModule(code=block.content, map=source_map)

    async def transform(self, code: str, module_id: str) -> Optional[GeneratedModule]:
        """Compile template blocks and preprocess style blocks.

        Script and custom blocks are not ours to transform and yield ``None``.
        """
        block_id = self.parse_id(module_id)
        if block_id is None:
            return None

        entry = self._require(block_id)
        block = entry.block_for(block_id)
        if block is None:
            raise ResolutionOrderError(
                f"Unknown block id {module_id}", file_path=block_id.file_path
            )

        if block.kind is BlockKind.TEMPLATE:
            logger.debug("Compiling template of %s", entry.file_path)
            if code == block.content:
                return self.generator.compile_template(block, entry.file_path, entry.source)
            # Content changed by an earlier plugin; offsets refer to the new text
            replaced = dataclasses.replace(block, content=code, start=0, end=len(code))
            return self.generator.compile_template(replaced, entry.file_path, code)

        if block.kind is BlockKind.STYLE:
            result = await self.preprocessors.process(code, block, entry.file_path)
            if result is None:
                return None
            return GeneratedModule(code=result.code, map=result.map)

        return None

    def invalidate(self, file_path: str) -> bool:
        """Drop the cached blocks of ``file_path`` so the next resolve re-splits it."""
        return self.store.invalidate(file_path)

    # === Helpers ===

    def parse_id(self, module_id: str) -> Optional[VirtualModuleId]:
        return VirtualModuleId.parse(module_id, self.options.namespace)

    def _absolute(self, specifier: str, importer: Optional[str]) -> str:
        if os.path.isabs(specifier) or importer is None:
            return specifier
        if specifier.startswith(("./", "../")):
            importer_path = importer.split("?", 1)[0]
            return os.path.normpath(os.path.join(os.path.dirname(importer_path), specifier))
        return specifier

    def _enumerate(self, file_path: str) -> FileEntry:
        return self.store.get_or_create(file_path, lambda: self._split(file_path))

    def _split(self, file_path: str) -> FileEntry:
        source = self.read_source(file_path)
        blocks = split(source, file_path)
        ids = tuple(VirtualModuleId.for_block(file_path, b) for b in blocks)
        logger.debug(
            "Split %s into %s",
            file_path,
            ", ".join(f"{b.tag}#{b.index}" for b in blocks) or "no blocks",
        )
        return FileEntry(file_path=file_path, source=source, blocks=tuple(blocks), ids=ids)

    def _require(self, block_id: VirtualModuleId) -> FileEntry:
        entry = self.store.get(block_id.file_path)
        if entry is None:
            raise ResolutionOrderError(
                f"{block_id.format(self.options.namespace)} was requested before "
                f"{block_id.file_path} was resolved",
                file_path=block_id.file_path,
            )
        return entry
