"""Per-file cache of enumerated blocks."""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from sfcwire.compiler.ast_nodes import Block
from sfcwire.ids import VirtualModuleId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """Split result for one component file, with the id of each block."""

    file_path: str
    source: str
    blocks: Tuple[Block, ...]
    ids: Tuple[VirtualModuleId, ...]

    def block_for(self, module_id: VirtualModuleId) -> Optional[Block]:
        for block, block_id in zip(self.blocks, self.ids):
            if block_id == module_id:
                return block
        return None


class BlockStore:
    """Root path -> FileEntry, written at most once per key until invalidated.

    Each key has its own lock: concurrent lookups of the same file wait for
    the first writer and then see its entry, different files never contend.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, FileEntry] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, file_path: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(file_path)
            if lock is None:
                lock = self._locks[file_path] = threading.Lock()
            return lock

    def get(self, file_path: str) -> Optional[FileEntry]:
        return self._entries.get(file_path)

    def get_or_create(
        self, file_path: str, factory: Callable[[], FileEntry]
    ) -> FileEntry:
        entry = self._entries.get(file_path)
        if entry is not None:
            logger.debug("Block cache hit for %s", file_path)
            return entry

        with self._lock_for(file_path):
            entry = self._entries.get(file_path)
            if entry is None:
                entry = factory()
                self._entries[file_path] = entry
                logger.debug("Cached %d block(s) for %s", len(entry.blocks), file_path)
            return entry

    def invalidate(self, file_path: str) -> bool:
        """Forget ``file_path``; returns whether it was cached."""
        with self._lock_for(file_path):
            removed = self._entries.pop(file_path, None) is not None
        if removed:
            logger.debug("Invalidated %s", file_path)
        return removed

    def __contains__(self, file_path: str) -> bool:
        return file_path in self._entries

    def __len__(self) -> int:
        return len(self._entries)
