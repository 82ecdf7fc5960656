"""Virtual module ids for component blocks.

Text form::

    <filePath>?<namespace>&type=<kind>&index=<N>[&lang=<lang>][&scoped=true]

Custom blocks also carry ``&blockType=<tag>``.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from urllib.parse import quote, unquote

from sfcwire.compiler.ast_nodes import Block, BlockKind


@dataclass(frozen=True)
class VirtualModuleId:
    file_path: str
    block_kind: BlockKind
    block_index: int
    query: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def for_block(cls, file_path: str, block: Block) -> "VirtualModuleId":
        query = []
        if block.lang:
            query.append(("lang", block.lang))
        if block.kind is BlockKind.STYLE and block.scoped:
            query.append(("scoped", "true"))
        if block.kind is BlockKind.CUSTOM:
            query.append(("blockType", block.tag))
        return cls(file_path, block.kind, block.index, tuple(query))

    @property
    def query_dict(self) -> Dict[str, str]:
        return dict(self.query)

    def format(self, namespace: str = "sfc") -> str:
        text = (
            f"{self.file_path}?{namespace}"
            f"&type={self.block_kind.value}&index={self.block_index}"
        )
        for key, value in self.query:
            text += f"&{key}={quote(value, safe='')}"
        return text

    @classmethod
    def parse(cls, text: str, namespace: str = "sfc") -> Optional["VirtualModuleId"]:
        """Parse an id produced by ``format``; ``None`` if it is not one of ours."""
        file_path, sep, query_text = text.rpartition("?")
        if not sep or not file_path:
            return None
        marker, *params = query_text.split("&")
        if marker != namespace:
            return None

        fields: Dict[str, str] = {}
        query = []
        for param in params:
            key, eq, value = param.partition("=")
            if not eq:
                return None
            if key in ("type", "index"):
                fields[key] = value
            else:
                query.append((key, unquote(value)))

        try:
            kind = BlockKind(fields["type"])
            index = int(fields["index"])
        except (KeyError, ValueError):
            return None
        if index < 0:
            return None
        return cls(file_path, kind, index, tuple(query))
