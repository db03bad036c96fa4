from __future__ import annotations

from .base import Source
from .filesystem import FileSystemSource
from .registry import SOURCE_TYPES, create_source, default_start_path

__all__ = [
    "Source",
    "FileSystemSource",
    "SOURCE_TYPES",
    "create_source",
    "default_start_path",
]
