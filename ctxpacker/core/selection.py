# ctxpacker/core/selection.py

from __future__ import annotations

from typing import Iterator, List, Optional

from ctxpacker.core.models import FileTreeNode
from ctxpacker.utils.logger import logger


def select_all(root: Optional[FileTreeNode]) -> None:
    """Select every visible, non-pinned file under ``root``."""
    if root is None:
        logger.warning("select_all called without a root node")
        return
    _select_recursive(root, True)


def deselect_all(root: Optional[FileTreeNode]) -> None:
    if root is None:
        logger.warning("deselect_all called without a root node")
        return
    _select_recursive(root, False)


def _select_recursive(node: FileTreeNode, select: bool) -> None:
    if not node.is_visible or node.is_pinned:
        return
    if node.is_directory:
        for child in node.children:
            _select_recursive(child, select)
        refresh_directory_state(node)
    else:
        node.is_selected = select


def refresh_directory_state(directory: FileTreeNode) -> bool:
    """
    Derive a directory's flag from its children: selected iff every visible,
    non-pinned child is selected. Returns True if the flag changed.
    """
    if not directory.is_directory:
        return False
    candidates = [c for c in directory.children if c.is_visible and not c.is_pinned]
    new_value = bool(candidates) and all(c.is_selected for c in candidates)
    changed = new_value != directory.is_selected
    directory.is_selected = new_value
    return changed


def set_selected(node: FileTreeNode, value: bool) -> List[FileTreeNode]:
    """
    Select or deselect ``node``; a directory passes the value down to its
    visible, non-pinned descendants. Ancestors are refreshed afterwards.

    Returns every node whose flag changed.
    """
    affected: List[FileTreeNode] = []
    if node.is_pinned:
        logger.debug(f"Pinned file cannot be selected: {node.full_path}")
        return affected

    def cascade(n: FileTreeNode) -> None:
        if n.is_directory:
            for child in n.children:
                if child.is_visible and not child.is_pinned:
                    cascade(child)
            if refresh_directory_state(n):
                affected.append(n)
        elif n.is_selected != value:
            n.is_selected = value
            affected.append(n)

    cascade(node)

    parent = node.parent
    while parent is not None:
        if refresh_directory_state(parent):
            affected.append(parent)
        parent = parent.parent
    return affected


def get_selected_file_paths(root: Optional[FileTreeNode]) -> Iterator[str]:
    """Lazily yield full paths of visible, selected files, depth-first."""
    if root is None:
        return
    for node in root.iter_nodes():
        if not node.is_directory and node.is_selected and node.is_visible:
            yield node.full_path


def get_selected_file_count(root: Optional[FileTreeNode]) -> int:
    return sum(1 for _ in get_selected_file_paths(root))


def get_visible_file_paths(root: FileTreeNode) -> List[str]:
    return [n.full_path for n in root.iter_nodes() if not n.is_directory and n.is_visible]


def find_node_by_path(root: Optional[FileTreeNode], path: str) -> Optional[FileTreeNode]:
    if root is None:
        return None
    for node in root.iter_nodes():
        if node.full_path == path:
            return node
    return None
