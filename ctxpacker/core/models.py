# ctxpacker/core/models.py

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from ctxpacker.config import DEFAULT_ALLOWED_EXTENSIONS, DEFAULT_MAX_CHARS


@dataclass(eq=False)
class FileTreeNode:
    """
    One file-system entry of a loaded project.

    Nodes compare by identity. The parent link is a weak reference so a
    subtree never keeps its ancestors alive.
    """
    name: str
    full_path: str
    is_directory: bool = False
    children: List["FileTreeNode"] = field(default_factory=list, repr=False)
    is_visible: bool = True
    is_selected: bool = False
    is_pinned: bool = False
    is_search_match: bool = False
    file_size: int = 0
    _parent_ref: Optional["weakref.ReferenceType[FileTreeNode]"] = field(
        default=None, init=False, repr=False
    )

    @property
    def parent(self) -> Optional["FileTreeNode"]:
        return self._parent_ref() if self._parent_ref is not None else None

    @parent.setter
    def parent(self, node: Optional["FileTreeNode"]) -> None:
        self._parent_ref = weakref.ref(node) if node is not None else None

    def add_child(self, child: "FileTreeNode") -> "FileTreeNode":
        child.parent = self
        self.children.append(child)
        return child

    def iter_nodes(self) -> Iterator["FileTreeNode"]:
        """Depth-first, pre-order walk of this node and its descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True)
class IgnoreFilter:
    name: str
    patterns: Tuple[str, ...] = ()

    def __post_init__(self):
        # accept any iterable of patterns, store an immutable tuple
        object.__setattr__(self, "patterns", tuple(self.patterns))


@dataclass(frozen=True)
class GeneratedPart:
    part_number: int
    content: str
    character_count: int
    max_chars: int

    @property
    def usage_percent(self) -> float:
        if self.max_chars <= 0:
            return 0.0
        return self.character_count * 100.0 / self.max_chars


@dataclass
class GlobalPrompt:
    id: Optional[str]
    name: str
    content: str = ""


@dataclass
class AppSettings:
    max_chars_limit: int = DEFAULT_MAX_CHARS
    include_file_headers: bool = True
    allowed_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_EXTENSIONS))
    custom_ignore_filters: List[IgnoreFilter] = field(default_factory=list)
    active_filters: Dict[str, bool] = field(default_factory=dict)
    global_prompts: List[GlobalPrompt] = field(default_factory=list)
    gitignore_mode: str = "simple"

    def find_prompt(self, prompt_id: Optional[str]) -> Optional[GlobalPrompt]:
        if not prompt_id:
            return None
        for p in self.global_prompts:
            if p.id == prompt_id or p.name == prompt_id:
                return p
        return None


@dataclass(frozen=True)
class SearchOptions:
    search_term: str
    case_sensitive: bool = False
    use_regex: bool = False
    whole_word: bool = False


@dataclass
class SearchResult:
    files_searched: int = 0
    files_matched: int = 0
    matched_nodes: List[FileTreeNode] = field(default_factory=list)
