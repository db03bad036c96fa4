from __future__ import annotations

"""
Local Filesystem Backend.

Lists directories with os.scandir and "downloads" by copying files. Entries
are returned sorted by name so listings are stable across platforms.
"""

import logging
import os
import shutil
from typing import List, Tuple

from superscan.domain.errors import BackendUnavailable, LocalIOError, NotFound
from superscan.domain.tree_models import ListingEntry
from superscan.infra.network.common import CHUNK_SIZE
from superscan.infra.sources.base import Source

logger = logging.getLogger(__name__)


class FileSystemSource(Source):
    """Source backed by the local filesystem."""

    name = "filesystem"
    description = "Local File System"
    skip_hidden = True

    def resolve_root(self, path: str) -> Tuple[str, str]:
        abs_path = os.path.abspath(path or os.getcwd())
        if not os.path.exists(abs_path):
            raise NotFound(f"Path does not exist: {abs_path}")
        return abs_path, os.path.basename(abs_path.rstrip(os.sep)) or abs_path

    def source_base(self, path: str) -> str:
        return os.path.abspath(path or os.getcwd()).replace("\\", "/")

    def list_entries(self, identifier: str) -> List[ListingEntry]:
        try:
            with os.scandir(identifier) as it:
                dir_entries = sorted(it, key=lambda e: e.name)
        except FileNotFoundError as e:
            raise NotFound(f"Directory does not exist: {identifier}") from e
        except OSError as e:
            raise BackendUnavailable(f"Failed to read directory {identifier}: {e}") from e

        entries: List[ListingEntry] = []
        for entry in dir_entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                size = 0 if is_dir else entry.stat().st_size
            except OSError as e:
                logger.error(f"Failed to get file info for {entry.path}: {e}")
                continue
            entries.append(ListingEntry(
                name=entry.name,
                is_dir=is_dir,
                size=size,
                identifier=entry.path,
            ))
        return entries

    def download_file(self, source_path: str, destination_path: str) -> None:
        logger.debug(f"Copying {source_path} to {destination_path}")
        try:
            src = open(source_path, "rb")
        except FileNotFoundError as e:
            raise NotFound(f"File does not exist: {source_path}") from e
        except OSError as e:
            raise BackendUnavailable(f"Failed to open source file {source_path}: {e}") from e

        with src:
            try:
                with open(destination_path, "wb") as dst:
                    shutil.copyfileobj(src, dst, CHUNK_SIZE)
            except OSError as e:
                raise LocalIOError(f"Failed to write {destination_path}: {e}") from e
