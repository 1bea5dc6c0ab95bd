# ctxpacker/core/search.py

from __future__ import annotations

import re
import time
from typing import Callable, List, Optional

from ctxpacker.core.errors import (
    CtxPackerError,
    FileSystemError,
    InvalidPatternError,
    OperationCanceledError,
)
from ctxpacker.core.file_reader import FileReader
from ctxpacker.core.models import FileTreeNode, SearchOptions, SearchResult
from ctxpacker.core.progress import CancelEventLike, is_cancelled
from ctxpacker.utils.logger import logger


def compile_matcher(options: SearchOptions) -> Callable[[str], bool]:
    """
    Build the text predicate for ``options``.

    Raises InvalidPatternError if a regex term does not compile.
    """
    term = options.search_term
    flags = 0 if options.case_sensitive else re.IGNORECASE

    if options.use_regex or options.whole_word:
        pattern = rf"\b{re.escape(term)}\b" if options.whole_word else term
        try:
            regex = re.compile(pattern, flags)
        except re.error as e:
            raise InvalidPatternError(term, str(e)) from e
        return lambda text: bool(text) and regex.search(text) is not None

    if options.case_sensitive:
        return lambda text: bool(text) and term in text
    folded = term.casefold()
    return lambda text: bool(text) and folded in text.casefold()


def _safe_matcher(options: SearchOptions) -> Callable[[str], bool]:
    try:
        return compile_matcher(options)
    except InvalidPatternError as e:
        logger.warning(f"Invalid regex pattern, search yields no matches: {e}")
        return lambda text: False


def search_by_name(root: FileTreeNode, options: SearchOptions) -> List[FileTreeNode]:
    """Mark and return visible nodes whose name matches."""
    if root is None:
        raise ValueError("root is required")
    is_match = _safe_matcher(options)
    matched: List[FileTreeNode] = []
    for node in root.iter_nodes():
        node.is_search_match = False
        if node.is_visible and is_match(node.name):
            node.is_search_match = True
            matched.append(node)
    logger.debug(f"Name search '{options.search_term}' matched {len(matched)} node(s)")
    return matched


def search_content(
    root: FileTreeNode,
    options: SearchOptions,
    reader: Optional[FileReader] = None,
    cancel_event: Optional[CancelEventLike] = None,
) -> SearchResult:
    """
    Search the content of every visible file under ``root``.

    Unreadable files are skipped (still counted as searched). Raises
    OperationCanceledError when ``cancel_event`` fires.
    """
    if root is None:
        raise ValueError("root is required")
    if options is None:
        raise ValueError("options are required")

    reader = reader or FileReader()
    logger.info(
        f"Starting file content search: term='{options.search_term}', "
        f"case_sensitive={options.case_sensitive}, regex={options.use_regex}, whole_word={options.whole_word}"
    )
    started = time.perf_counter()
    is_match = _safe_matcher(options)
    result = SearchResult()

    def visit(node: FileTreeNode) -> None:
        if is_cancelled(cancel_event):
            raise OperationCanceledError("Search cancelled")
        if not node.is_visible:
            return

        if not node.is_directory:
            result.files_searched += 1
            try:
                content = reader.read_file_content(node.full_path)
            except FileSystemError as e:
                logger.warning(f"Failed to read file for search: {node.full_path} ({e})")
            else:
                if is_match(content):
                    node.is_search_match = True
                    result.matched_nodes.append(node)
                    logger.debug(f"Match found in file: {node.full_path}")

        for child in node.children:
            visit(child)

    try:
        visit(root)
    except OperationCanceledError:
        logger.info(
            f"Search cancelled after {time.perf_counter() - started:.3f}s: "
            f"{result.files_searched} files searched, {len(result.matched_nodes)} matches"
        )
        raise
    except Exception as e:
        logger.error(f"Search failed after {result.files_searched} files: {e}")
        raise CtxPackerError(f"File content search failed: {e}") from e

    result.files_matched = len(result.matched_nodes)
    logger.info(
        f"Search completed in {time.perf_counter() - started:.3f}s: "
        f"{result.files_searched} files searched, {result.files_matched} matches"
    )
    return result


def clear_search_highlight(root: FileTreeNode) -> None:
    if root is None:
        raise ValueError("root is required")
    for node in root.iter_nodes():
        node.is_search_match = False
