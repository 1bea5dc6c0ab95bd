# ctxpacker/core/errors.py

from __future__ import annotations

from typing import Optional


class CtxPackerError(Exception):
    """Base class for every error raised by ctxpacker."""


class ProjectLoadError(CtxPackerError):
    def __init__(self, message: str, project_path: Optional[str] = None):
        super().__init__(message)
        self.project_path = project_path


class FileSystemError(CtxPackerError):
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class PathNotFoundError(FileSystemError):
    """Neither a file nor a directory exists at the path."""


class AccessDeniedError(FileSystemError):
    """Directory listing or file read was refused by the OS."""


class FileReadError(FileSystemError):
    """A file exists but its content could not be read."""


class FileTooLargeError(CtxPackerError):
    """A single rendered file does not fit in one part."""

    def __init__(self, path: str, relative_path: str, size: int, limit: int):
        super().__init__(
            f"File '{relative_path}' exceeds the maximum character limit.\n"
            f"File size: {size:,} chars\n"
            f"Limit: {limit:,} chars\n\n"
            f"Please increase the limit or exclude this file."
        )
        self.path = path
        self.relative_path = relative_path
        self.size = size
        self.limit = limit


class InvalidPatternError(CtxPackerError):
    def __init__(self, pattern: str, reason: str = ""):
        super().__init__(f"Invalid pattern {pattern!r}: {reason}" if reason else f"Invalid pattern {pattern!r}")
        self.pattern = pattern


class OperationCanceledError(CtxPackerError):
    """The cancel signal fired before the operation finished."""
