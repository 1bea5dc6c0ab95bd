# ctxpacker/core/file_scanner.py

from __future__ import annotations

import os
from typing import List, Optional, Set

from ctxpacker.core.errors import PathNotFoundError
from ctxpacker.core.models import FileTreeNode
from ctxpacker.utils.logger import logger


class FileScanner:
    """
    Builds the in-memory tree of a project folder.

    Best effort: entries that vanish or cannot be listed while the walk is
    running are logged and skipped, the rest of the tree is still built.
    """

    def __init__(self, base_folder: str):
        self.base_folder = base_folder
        self._seen_dirs: Set[str] = set()

    def build_tree(self, path: Optional[str] = None) -> FileTreeNode:
        """Walk ``path`` (default: the base folder) depth-first, pre-order."""
        self._seen_dirs = set()
        return self._build(path or self.base_folder)

    def _build(self, path: str) -> FileTreeNode:
        is_dir = os.path.isdir(path)
        if not is_dir and not os.path.isfile(path):
            logger.warning(f"Path not found during tree building: {path}")
            raise PathNotFoundError(f"Path not found: {path}", path)

        node = FileTreeNode(
            name=os.path.basename(path.rstrip("\\/")) or path,
            full_path=path,
            is_directory=is_dir,
        )

        if not is_dir:
            node.file_size = self._file_size(path)
            return node

        real = os.path.realpath(path)
        if real in self._seen_dirs:
            logger.warning(f"Skipping directory already visited through a link: {path}")
            return node
        self._seen_dirs.add(real)

        dirs, files = self._list_dir(path)

        for d in dirs:
            try:
                node.add_child(self._build(d))
            except PathNotFoundError:
                # vanished between listing and visiting
                continue

        for f in files:
            if not os.path.isfile(f):
                logger.warning(f"File not found during enumeration: {f}")
                continue
            node.add_child(FileTreeNode(
                name=os.path.basename(f),
                full_path=f,
                is_directory=False,
                file_size=self._file_size(f),
            ))

        return node

    def _list_dir(self, path: str):
        dirs: List[str] = []
        files: List[str] = []
        try:
            with os.scandir(path) as it:
                for entry in it:
                    try:
                        if entry.is_dir():
                            dirs.append(entry.path)
                        else:
                            files.append(entry.path)
                    except OSError as e:
                        logger.warning(f"Skipping entry {entry.path}: {e}")
        except PermissionError as e:
            logger.warning(f"Access denied to directory: {path} ({e})")
            return [], []
        except (FileNotFoundError, NotADirectoryError) as e:
            logger.warning(f"Directory not found during enumeration: {path} ({e})")
            return [], []
        except OSError as e:
            logger.warning(f"Could not list directory {path}: {e}")
            return [], []

        dirs.sort()
        files.sort()
        return dirs, files

    @staticmethod
    def _file_size(path: str) -> int:
        try:
            return os.path.getsize(path)
        except OSError as e:
            logger.warning(f"Could not get file size for {path}: {e}")
            return 0


def build_tree(path: str) -> FileTreeNode:
    return FileScanner(path).build_tree()


def count_nodes(node: FileTreeNode) -> int:
    return sum(1 for _ in node.iter_nodes())


def read_gitignore(file_path: str) -> List[str]:
    """Pattern lines of a .gitignore: trimmed, without blanks and comments."""
    if not os.path.isfile(file_path):
        logger.debug(f".gitignore file not found: {file_path}")
        return []

    try:
        with open(file_path, "r", encoding="utf-8", errors="ignore") as f:
            lines = f.read().splitlines()
    except OSError as e:
        logger.error(f"Failed to read .gitignore file {file_path}: {e}")
        return []

    patterns = [ln.strip() for ln in lines if ln.strip() and not ln.lstrip().startswith("#")]
    logger.info(f"Read {len(patterns)} patterns from .gitignore: {file_path}")
    return patterns
