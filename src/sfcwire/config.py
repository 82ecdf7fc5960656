"""Compiler configuration."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CompilerOptions:
    """Options shared by the resolver and the code generators."""

    # File suffixes treated as component roots
    extensions: Tuple[str, ...] = (".vue", ".component")
    # Query marker that tags virtual block ids as ours
    namespace: str = "sfc"
    # Emit static subtrees once as staticRenderFns and reference them with _m()
    hoist_static: bool = False
    source_maps: bool = True
    scope_id_length: int = 8

    def __post_init__(self) -> None:
        if not self.namespace or any(c in self.namespace for c in "?&="):
            raise ValueError(f"Invalid id namespace: {self.namespace!r}")
        if not self.extensions:
            raise ValueError("At least one component extension is required")

    def is_component_path(self, path: str) -> bool:
        return path.endswith(self.extensions)
