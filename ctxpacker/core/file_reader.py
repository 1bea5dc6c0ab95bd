# ctxpacker/core/file_reader.py

from __future__ import annotations

import os

from ctxpacker.core.errors import AccessDeniedError, FileReadError, PathNotFoundError
from ctxpacker.utils.encoding_detector import detect_file_encoding
from ctxpacker.utils.logger import logger


def relative_path(base_path: str, full_path: str) -> str:
    """Path of ``full_path`` relative to ``base_path``; unrelated paths come back unchanged."""
    try:
        rel = os.path.relpath(full_path, base_path)
    except ValueError:
        # different drives on Windows
        return full_path
    if rel == os.pardir or rel.startswith(os.pardir + os.sep):
        return full_path
    return rel


class FileReader:
    """Reads project files as text; the single place file content enters the pipeline."""

    def read_file_content(self, path: str) -> str:
        if not os.path.isfile(path):
            logger.error(f"File not found: {path}")
            raise PathNotFoundError(f"File not found: {path}", path)

        try:
            encoding = detect_file_encoding(path)
            with open(path, "r", encoding=encoding, errors="replace", newline="") as f:
                content = f.read()
        except PermissionError as e:
            logger.error(f"Access denied reading {path}: {e}")
            raise AccessDeniedError(f"Access denied: {path}", path) from e
        except FileNotFoundError as e:
            logger.error(f"File vanished before it could be read: {path}")
            raise PathNotFoundError(f"File not found: {path}", path) from e
        except (OSError, LookupError) as e:
            logger.error(f"Failed to read file {path}: {e}")
            raise FileReadError(f"Failed to read file: {e}", path) from e

        logger.debug(f"Read {len(content)} characters from {path}")
        return content

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)
