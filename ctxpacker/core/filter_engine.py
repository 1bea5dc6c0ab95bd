# ctxpacker/core/filter_engine.py

from __future__ import annotations

from typing import Iterable, List, Optional

from pathspec import GitIgnoreSpec

from ctxpacker.config import GITIGNORE_MODES, PROGRESS_REPORT_INTERVAL
from ctxpacker.core.file_scanner import count_nodes
from ctxpacker.core.models import FileTreeNode, IgnoreFilter
from ctxpacker.core.pattern_matcher import matches, normalize_path
from ctxpacker.core.progress import CancelEventLike, ProgressSink, is_cancelled
from ctxpacker.utils.logger import logger


def file_extension(path: str) -> str:
    """Lower-cased extension including the dot, taken from the last '.' of the file name."""
    name = normalize_path(path).rsplit("/", 1)[-1]
    idx = name.rfind(".")
    if idx < 0 or idx == len(name) - 1:
        return ""
    return name[idx:].lower()


class FilterEngine:
    """
    Decides which files and directories of a project are visible.

    A file must pass three stages: the extension whitelist, the active ignore
    filters and the gitignore patterns. Directories skip the whitelist.
    """

    def __init__(
        self,
        allowed_extensions: Iterable[str],
        active_filters: Iterable[IgnoreFilter],
        gitignore_patterns: Iterable[str],
        base_path: str,
        *,
        gitignore_mode: str = "simple",
    ):
        if gitignore_mode not in GITIGNORE_MODES:
            raise ValueError(f"Unknown gitignore mode: {gitignore_mode!r}")
        self.allowed_extensions = {e.lower() for e in allowed_extensions}
        self.active_filters: List[IgnoreFilter] = list(active_filters)
        self.gitignore_patterns: List[str] = list(gitignore_patterns)
        self.base_path = base_path
        self.gitignore_mode = gitignore_mode

        # full git semantics (negation, dir-only patterns) on request
        self._git_spec: Optional[GitIgnoreSpec] = None
        if gitignore_mode == "git" and self.gitignore_patterns:
            self._git_spec = GitIgnoreSpec.from_lines(self.gitignore_patterns)

    # ---------- predicates ----------

    def should_include_file(self, file_path: str) -> bool:
        if file_extension(file_path) not in self.allowed_extensions:
            return False
        if self._ignored_by_filters(file_path):
            return False
        if self._ignored_by_gitignore(file_path, is_dir=False):
            return False
        return True

    def should_show_directory(self, directory_path: str) -> bool:
        if self._ignored_by_filters(directory_path):
            return False
        if self._ignored_by_gitignore(directory_path, is_dir=True):
            return False
        return True

    def should_show_in_structure(self, path: str, is_dir: bool = False) -> bool:
        """Blacklist stages only; used to outline every non-ignored file."""
        if self._ignored_by_filters(path):
            return False
        if self._ignored_by_gitignore(path, is_dir=is_dir):
            return False
        return True

    def relative_path(self, full_path: str) -> str:
        base = self.base_path
        if base and full_path.lower().startswith(base.lower()):
            rel = full_path[len(base):].lstrip("\\/")
            return normalize_path(rel)
        return normalize_path(full_path)

    # ---------- tree pass ----------

    def apply_filters(
        self,
        root: FileTreeNode,
        progress: Optional[ProgressSink] = None,
        cancel_event: Optional[CancelEventLike] = None,
    ) -> bool:
        """
        Set ``is_visible`` on every reachable node of ``root``.

        Returns False if the pass was cancelled; nodes not reached keep the
        visibility they had before.
        """
        total = count_nodes(root)
        processed = 0

        def cancelled() -> bool:
            return is_cancelled(cancel_event) or (progress is not None and progress.is_cancelled)

        def tick() -> None:
            nonlocal processed
            processed += 1
            if progress is not None and processed % PROGRESS_REPORT_INTERVAL == 0:
                progress.report(f"Filtering files... {processed}/{total}", processed * 100.0 / max(1, total))

        def walk(node: FileTreeNode) -> bool:
            if cancelled():
                return False

            if not node.is_directory:
                node.is_visible = self.should_include_file(node.full_path)
                tick()
                return True

            if not self.should_show_directory(node.full_path):
                # pruned: children are never evaluated
                node.is_visible = False
                tick()
                return True

            tick()
            for child in node.children:
                if not walk(child):
                    return False
            node.is_visible = any(c.is_visible for c in node.children)
            return True

        try:
            completed = walk(root)
            if completed:
                logger.info(f"Filters applied to {processed} of {total} nodes under {self.base_path}")
                if progress is not None:
                    progress.report("Filtering complete", 100.0)
            else:
                logger.info(f"Filter pass cancelled after {processed} of {total} nodes")
            return completed
        finally:
            if progress is not None:
                progress.clear()

    # ---------- internals ----------

    def _ignored_by_filters(self, path: str) -> bool:
        rel = self.relative_path(path)
        for flt in self.active_filters:
            for pattern in flt.patterns:
                if matches(rel, pattern):
                    logger.debug(f"Excluding '{rel}' due to filter '{flt.name}' pattern '{pattern}'")
                    return True
        return False

    def _ignored_by_gitignore(self, path: str, is_dir: bool) -> bool:
        if not self.gitignore_patterns:
            return False
        rel = self.relative_path(path)

        if self.gitignore_mode == "git":
            if self._git_spec is None or not rel:
                return False
            return self._git_spec.match_file(rel + "/" if is_dir else rel)

        for pattern in self.gitignore_patterns:
            if matches(rel, pattern):
                logger.debug(f"Excluding '{rel}' due to .gitignore pattern '{pattern}'")
                return True
        return False
