# ctxpacker/core/pins.py

from __future__ import annotations

from typing import List, Optional

from ctxpacker.core.models import FileTreeNode
from ctxpacker.utils.logger import logger


class PinTracker:
    """Pinned files in the order they were pinned."""

    def __init__(self):
        self._pinned: List[FileTreeNode] = []

    @property
    def pinned_files(self) -> List[FileTreeNode]:
        return list(self._pinned)

    def pinned_file_paths(self) -> List[str]:
        return [n.full_path for n in self._pinned]

    def toggle_pin(self, node: Optional[FileTreeNode]) -> bool:
        if node is None:
            logger.warning("toggle_pin called without a node")
            return False
        if node.is_directory:
            logger.debug(f"Cannot pin directory: {node.full_path}")
            return False
        return self.unpin(node) if node.is_pinned else self.pin(node)

    def pin(self, node: Optional[FileTreeNode]) -> bool:
        if node is None:
            logger.warning("pin called without a node")
            return False
        if node.is_directory:
            logger.debug(f"Cannot pin directory: {node.full_path}")
            return False
        if node.is_pinned:
            logger.debug(f"File already pinned: {node.full_path}")
            return False

        node.is_pinned = True
        node.is_selected = False
        self._pinned.append(node)
        logger.debug(f"Pinned file: {node.full_path}")
        return True

    def unpin(self, node: Optional[FileTreeNode]) -> bool:
        if node is None or not node.is_pinned:
            return False
        node.is_pinned = False
        if node in self._pinned:
            self._pinned.remove(node)
        logger.debug(f"Unpinned file: {node.full_path}")
        return True

    def is_pinned(self, node: Optional[FileTreeNode]) -> bool:
        return bool(node is not None and node.is_pinned)

    def clear_all(self) -> None:
        logger.debug(f"Clearing all {len(self._pinned)} pinned files")
        for node in self._pinned:
            node.is_pinned = False
        self._pinned.clear()

    def __len__(self) -> int:
        return len(self._pinned)
