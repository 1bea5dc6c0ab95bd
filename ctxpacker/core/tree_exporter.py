# ctxpacker/core/tree_exporter.py

from typing import Iterable, List, Optional

from ctxpacker.config import PINNED_MARKER, SELECTED_MARKER
from ctxpacker.core.filter_engine import FilterEngine
from ctxpacker.core.models import FileTreeNode


def _fmt_size(n: int) -> str:
    if n < 1024:
        return f"{n} B"
    n /= 1024.0
    if n < 1024:
        return f"{n:.1f} KB"
    n /= 1024.0
    if n < 1024:
        return f"{n:.1f} MB"
    n /= 1024.0
    return f"{n:.1f} GB"


class TreeExporter:
    """
    Renders a loaded project tree as an indented outline:
      - only visible nodes (or, given a FilterEngine, every node that passes
        the blacklist stages, whitelist ignored)
      - pinned files marked with a pin, selected files with a check mark

    Options:
      - style: "unicode" (├── │ └──) or "ascii" (|-- | `--)
      - include_sizes: append "(12.3 KB)" for files
      - markdown: wrap output in ```text fences
    """

    def __init__(
        self,
        root: FileTreeNode,
        *,
        selected_paths: Iterable[str] = (),
        pinned_paths: Iterable[str] = (),
        engine: Optional[FilterEngine] = None,
    ):
        self.root = root
        self.selected = set(selected_paths)
        self.pinned = set(pinned_paths)
        self.engine = engine

    # ---------- public API ----------

    def build_lines(
        self,
        *,
        style: str = "unicode",
        include_sizes: bool = False,
        markdown: bool = False,
    ) -> List[str]:
        chars = self._style_chars(style)
        lines: List[str] = []
        if markdown:
            lines.append("```text")

        lines.append("Project Structure:")
        lines.append("==================")
        lines.append("")

        def walk(node: FileTreeNode, indent: str, is_last: bool) -> None:
            if not self._is_shown(node):
                return

            connector = chars["L"] if is_last else chars["T"]
            suffix = ""
            if not node.is_directory:
                if node.full_path in self.pinned:
                    suffix = PINNED_MARKER
                elif node.full_path in self.selected:
                    suffix = SELECTED_MARKER
                if include_sizes:
                    suffix += f" ({_fmt_size(node.file_size)})"
            lines.append(f"{indent}{connector} {node.name}{suffix}")

            if node.is_directory and node.children:
                next_indent = indent + ("    " if is_last else chars["V"] + "   ")
                shown = [c for c in node.children if self._is_shown(c)]
                for idx, child in enumerate(shown):
                    walk(child, next_indent, idx == len(shown) - 1)

        walk(self.root, "", True)

        if markdown:
            lines.append("```")
        return lines

    def render(self, **kwargs) -> str:
        return "\n".join(self.build_lines(**kwargs)) + "\n"

    def export(self, dest_path: str, **kwargs) -> bool:
        try:
            with open(dest_path, "w", encoding="utf-8") as f:
                f.write(self.render(**kwargs))
            return True
        except OSError:
            return False

    # ---------- internals ----------

    def _style_chars(self, style: str) -> dict:
        style = (style or "").lower()
        if style == "ascii":
            return {"T": "|--", "L": "`--", "V": "|"}
        return {"T": "├──", "L": "└──", "V": "│"}

    def _is_shown(self, node: FileTreeNode) -> bool:
        if self.engine is None:
            return node.is_visible
        if node is self.root:
            return True
        # walk() never descends below a hidden directory
        return self.engine.should_show_in_structure(node.full_path, is_dir=node.is_directory)


def build_structure(
    root: FileTreeNode,
    selected_paths: Iterable[str] = (),
    pinned_paths: Iterable[str] = (),
    *,
    style: str = "unicode",
    markdown: bool = False,
    engine: Optional[FilterEngine] = None,
) -> str:
    exporter = TreeExporter(root, selected_paths=selected_paths, pinned_paths=pinned_paths, engine=engine)
    return exporter.render(style=style, markdown=markdown)
