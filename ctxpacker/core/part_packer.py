# ctxpacker/core/part_packer.py

from __future__ import annotations

import os
import tempfile
from typing import Callable, List, Optional, Sequence, Tuple

from ctxpacker.config import FILE_HEADER_TEMPLATE, PART_FILE_TEMPLATE, PART_SEPARATOR
from ctxpacker.core.errors import FileTooLargeError, OperationCanceledError
from ctxpacker.core.file_reader import FileReader, relative_path
from ctxpacker.core.models import GeneratedPart
from ctxpacker.core.progress import CancelEventLike, is_cancelled
from ctxpacker.utils.logger import logger


def file_header(file_path: str, base_path: str) -> str:
    rel = relative_path(base_path, file_path)
    return FILE_HEADER_TEMPLATE.format(path=rel) + PART_SEPARATOR


def combine_file_lists(pinned: Sequence[str], selected: Sequence[str]) -> List[Tuple[str, bool]]:
    """Pinned paths first, then selected paths that are not pinned; duplicates dropped."""
    seen = set()
    combined: List[Tuple[str, bool]] = []
    for path in pinned:
        if path not in seen:
            seen.add(path)
            combined.append((path, True))
    for path in selected:
        if path not in seen:
            seen.add(path)
            combined.append((path, False))
    return combined


class PartPacker:
    def __init__(self, base_path: str, reader: Optional[FileReader] = None):
        self.base_path = base_path
        self.reader = reader or FileReader()

    def generate_parts(
        self,
        pinned_files: Sequence[str],
        selected_files: Sequence[str],
        max_chars: int,
        include_headers: bool = True,
        global_prompt: Optional[str] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
        cancel_event: Optional[CancelEventLike] = None,
    ) -> List[GeneratedPart]:
        """
        Pack file contents into parts of at most ``max_chars`` characters.

        The global prompt and the pinned files always occupy the first part(s)
        on their own. Raises
        FileTooLargeError before producing anything if one file cannot fit.
        """
        if max_chars <= 0:
            raise ValueError("max_chars must be positive")

        files = combine_file_lists(pinned_files, selected_files)
        total = len(files)

        # Read everything once and validate before packing
        rendered: List[Tuple[str, bool]] = []
        for done, (path, is_pinned) in enumerate(files, start=1):
            if is_cancelled(cancel_event):
                logger.info("Part generation cancelled while reading files.")
                raise OperationCanceledError("Part generation cancelled")

            content = self.reader.read_file_content(path)
            header = file_header(path, self.base_path) if include_headers else ""
            size = len(header) + len(content)
            if size > max_chars:
                rel = relative_path(self.base_path, path)
                logger.error(f"File {rel} is {size} chars, over the {max_chars} limit")
                raise FileTooLargeError(path, rel, size, max_chars)

            rendered.append((header + content + PART_SEPARATOR, is_pinned))
            if progress_callback:
                progress_callback(done, total)

        parts: List[GeneratedPart] = []
        buffer: List[str] = []
        count = 0

        def flush() -> None:
            nonlocal buffer, count
            content = "".join(buffer)
            parts.append(GeneratedPart(
                part_number=len(parts) + 1,
                content=content,
                character_count=len(content),
                max_chars=max_chars,
            ))
            buffer = []
            count = 0

        if global_prompt and global_prompt.strip():
            seed = global_prompt + PART_SEPARATOR
            buffer.append(seed)
            count = len(seed)

        # the prompt and pinned files form a leading region of their own
        in_pinned_region = True
        for text, is_pinned in rendered:
            if in_pinned_region and not is_pinned:
                if count > 0:
                    flush()
                in_pinned_region = False

            if count + len(text) > max_chars and count > 0:
                flush()

            buffer.append(text)
            count += len(text)

        if count > 0:
            flush()

        logger.info(f"Generated {len(parts)} part(s) from {total} file(s), limit {max_chars} chars")
        return parts


def generate_parts(
    pinned_files: Sequence[str],
    selected_files: Sequence[str],
    base_path: str,
    max_chars: int,
    include_headers: bool = True,
    global_prompt: Optional[str] = None,
    reader: Optional[FileReader] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    cancel_event: Optional[CancelEventLike] = None,
) -> List[GeneratedPart]:
    return PartPacker(base_path, reader).generate_parts(
        pinned_files, selected_files, max_chars, include_headers, global_prompt,
        progress_callback=progress_callback, cancel_event=cancel_event,
    )


def write_parts(parts: Sequence[GeneratedPart], out_dir: str, stem: str) -> List[str]:
    """
    Write one file per part into ``out_dir``.
    Each file is written atomically (tmp -> replace).
    """
    os.makedirs(out_dir, exist_ok=True)
    written: List[str] = []
    for part in parts:
        out_path = os.path.join(out_dir, PART_FILE_TEMPLATE.format(stem=stem, number=part.part_number))
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", delete=False, dir=out_dir, newline="") as tmp:
            tmp_path = tmp.name
            tmp.write(part.content)
        try:
            os.replace(tmp_path, out_path)
        except OSError:
            os.unlink(tmp_path)
            raise
        logger.info(f"Part {part.part_number} written to {out_path}")
        written.append(out_path)
    return written
