# ctxpacker/core/project.py

from __future__ import annotations

import os
import threading
import time
from typing import Iterable, List, Optional

from ctxpacker.config import GITIGNORE_FILENAME
from ctxpacker.core.errors import CtxPackerError, ProjectLoadError
from ctxpacker.core.file_reader import FileReader
from ctxpacker.core.file_scanner import FileScanner, count_nodes, read_gitignore
from ctxpacker.core.filter_catalog import resolve_active_filters
from ctxpacker.core.filter_engine import FilterEngine
from ctxpacker.core.models import AppSettings, FileTreeNode, GeneratedPart, IgnoreFilter
from ctxpacker.core.part_packer import PartPacker
from ctxpacker.core.pins import PinTracker
from ctxpacker.core import selection
from ctxpacker.core.progress import CancelEventLike, ProgressSink
from ctxpacker.utils.logger import logger


class ProjectSession:
    """
    The loaded project: its tree, its .gitignore and the user's pins.

    ``load`` replaces everything, ``close`` drops it. Operations that mutate
    the tree hold the session lock, so one session can be shared with a
    background worker.
    """

    def __init__(self, reader: Optional[FileReader] = None):
        self.reader = reader or FileReader()
        self.root_path: Optional[str] = None
        self.root_node: Optional[FileTreeNode] = None
        self.gitignore_path: Optional[str] = None
        self.gitignore_patterns: List[str] = []
        self.pins = PinTracker()
        self.engine: Optional[FilterEngine] = None
        self.lock = threading.RLock()

    @property
    def is_loaded(self) -> bool:
        return self.root_node is not None

    @property
    def has_local_gitignore(self) -> bool:
        return self.gitignore_path is not None

    # ---------- lifecycle ----------

    def load(self, folder_path: str, progress: Optional[ProgressSink] = None) -> FileTreeNode:
        if not folder_path or not folder_path.strip():
            raise ValueError("Folder path cannot be empty")

        logger.info(f"Loading project from: {folder_path}")
        started = time.perf_counter()
        try:
            if progress:
                progress.report("Validating folder...", 10)
            if not os.path.isdir(folder_path):
                logger.error(f"Directory not found: {folder_path}")
                raise ProjectLoadError(f"Directory does not exist: {folder_path}", folder_path)

            if progress:
                progress.report("Loading project structure...", 30)
            root = FileScanner(folder_path).build_tree()

            if progress:
                progress.report("Reading .gitignore...", 60)
            gi = os.path.join(folder_path, GITIGNORE_FILENAME)
            has_gitignore = os.path.isfile(gi)
            patterns = read_gitignore(gi) if has_gitignore else []

            if progress:
                progress.report("Finalizing...", 90)
            with self.lock:
                self.pins.clear_all()
                self.root_path = folder_path
                self.root_node = root
                self.gitignore_path = gi if has_gitignore else None
                self.gitignore_patterns = patterns
                self.engine = None

            logger.info(
                f"Project loaded from {folder_path} in {time.perf_counter() - started:.3f}s. "
                f"Files/Folders: {count_nodes(root)}, has .gitignore: {has_gitignore}"
            )
            if progress:
                progress.report("Project loaded successfully!", 100)
            return root
        except (ProjectLoadError, ValueError):
            raise
        except CtxPackerError as e:
            logger.error(f"Failed to load project from {folder_path}: {e}")
            raise ProjectLoadError(f"Failed to load project: {e}", folder_path) from e
        finally:
            if progress:
                progress.clear()

    def close(self) -> None:
        with self.lock:
            if self.root_path is not None:
                logger.info(f"Unloading project: {self.root_path}")
            self.pins.clear_all()
            self.root_path = None
            self.root_node = None
            self.gitignore_path = None
            self.gitignore_patterns = []
            self.engine = None

    def _require_loaded(self) -> FileTreeNode:
        if self.root_node is None:
            raise CtxPackerError("No project loaded")
        return self.root_node

    # ---------- filtering ----------

    def build_engine(
        self,
        settings: AppSettings,
        *,
        use_gitignore: bool = True,
        extra_filter_names: Iterable[str] = (),
        extra_filters: Iterable[IgnoreFilter] = (),
        allowed_extensions: Optional[Iterable[str]] = None,
    ) -> FilterEngine:
        filters = resolve_active_filters(settings, extra_filter_names) + list(extra_filters)
        return FilterEngine(
            allowed_extensions if allowed_extensions is not None else settings.allowed_extensions,
            filters,
            self.gitignore_patterns if use_gitignore else [],
            self.root_path or "",
            gitignore_mode=settings.gitignore_mode,
        )

    def apply_filters(
        self,
        engine: FilterEngine,
        progress: Optional[ProgressSink] = None,
        cancel_event: Optional[CancelEventLike] = None,
    ) -> bool:
        root = self._require_loaded()
        with self.lock:
            self.engine = engine
            return engine.apply_filters(root, progress, cancel_event)

    # ---------- selection / pins ----------

    def select_all(self) -> None:
        with self.lock:
            selection.select_all(self._require_loaded())

    def deselect_all(self) -> None:
        with self.lock:
            selection.deselect_all(self._require_loaded())

    def find(self, path: str) -> Optional[FileTreeNode]:
        root = self._require_loaded()
        node = selection.find_node_by_path(root, path)
        if node is None and self.root_path and not os.path.isabs(path):
            node = selection.find_node_by_path(root, os.path.normpath(os.path.join(self.root_path, path)))
        return node

    def pin(self, node: FileTreeNode) -> bool:
        with self.lock:
            return self.pins.pin(node)

    def unpin(self, node: FileTreeNode) -> bool:
        with self.lock:
            return self.pins.unpin(node)

    def set_selected(self, node: FileTreeNode, value: bool) -> List[FileTreeNode]:
        with self.lock:
            return selection.set_selected(node, value)

    def selected_file_paths(self) -> List[str]:
        return list(selection.get_selected_file_paths(self._require_loaded()))

    # ---------- output ----------

    def generate_parts(
        self,
        settings: AppSettings,
        *,
        global_prompt: Optional[str] = None,
        cancel_event: Optional[CancelEventLike] = None,
    ) -> List[GeneratedPart]:
        self._require_loaded()
        with self.lock:
            pinned = self.pins.pinned_file_paths()
            selected = self.selected_file_paths()
        packer = PartPacker(self.root_path, self.reader)
        return packer.generate_parts(
            pinned,
            selected,
            settings.max_chars_limit,
            settings.include_file_headers,
            global_prompt,
            cancel_event=cancel_event,
        )
