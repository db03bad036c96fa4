from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory backend implementing the Source interface.
3. Shared trees and a silent logger for core tests.
"""

import logging
import os
import sys
from typing import Dict, List, Optional, Set, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from superscan.domain.errors import BackendUnavailable, LocalIOError, NotFound  # noqa: E402
from superscan.domain.tree_models import ListingEntry, TreeNode  # noqa: E402
from superscan.infra.logging import get_silent_logger  # noqa: E402
from superscan.infra.sources.base import Source  # noqa: E402


# -----------------------------------------------------------------------------
# In-memory backend
# -----------------------------------------------------------------------------
class FakeSource(Source):
    """
    Backend serving a nested dict: directories are dicts, files are bytes.

    Identifiers are '/'-joined paths relative to the fake root ('' is the
    root). Every list and download call is recorded for assertions.
    """

    name = "fake"
    description = "In-memory test backend"

    def __init__(
            self,
            layout: Dict,
            skip_hidden: bool = False,
            failing_dirs: Optional[Set[str]] = None,
            failing_files: Optional[Set[str]] = None,
            missing_files: Optional[Set[str]] = None,
    ) -> None:
        self.layout = layout
        self.skip_hidden = skip_hidden
        self.failing_dirs = failing_dirs or set()
        self.failing_files = failing_files or set()
        self.missing_files = missing_files or set()
        self.list_calls: List[str] = []
        self.download_calls: List[Tuple[str, str]] = []

    def resolve_root(self, path: str) -> Tuple[str, str]:
        key = (path or "").strip("/")
        self._lookup(key)
        return key, key.split("/")[-1] if key else "root"

    def list_entries(self, identifier: str) -> List[ListingEntry]:
        self.list_calls.append(identifier)
        if identifier in self.failing_dirs:
            raise BackendUnavailable(f"listing failed: {identifier}")
        node = self._lookup(identifier)
        entries = []
        for name, value in node.items():
            child_id = f"{identifier}/{name}" if identifier else name
            is_dir = isinstance(value, dict)
            entries.append(ListingEntry(name, is_dir, 0 if is_dir else len(value), child_id))
        return entries

    def download_file(self, source_path: str, destination_path: str) -> None:
        self.download_calls.append((source_path, destination_path))
        if source_path in self.missing_files:
            raise NotFound(f"missing: {source_path}")
        if source_path in self.failing_files:
            raise BackendUnavailable(f"download failed: {source_path}")
        content = self._lookup(source_path)
        try:
            with open(destination_path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise LocalIOError(f"cannot write {destination_path}: {e}") from e

    def _lookup(self, key: str):
        node = self.layout
        for part in [p for p in key.split("/") if p]:
            if not isinstance(node, dict) or part not in node:
                raise NotFound(f"no such path: {key}")
            node = node[part]
        return node


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def silent_logger() -> logging.Logger:
    return get_silent_logger()


@pytest.fixture
def proj_layout() -> Dict:
    """Layout behind the 'proj' scenario: src/main.txt (10 bytes) and empty docs/."""
    return {
        "proj": {
            "src": {"main.txt": b"0123456789"},
            "docs": {},
        }
    }


@pytest.fixture
def proj_tree() -> TreeNode:
    """
    Structure:
    proj/
      src/
        main.txt (10 B)
      docs/
    """
    return TreeNode("proj", True, children=[
        TreeNode("src", True, children=[TreeNode("main.txt", False, 10)]),
        TreeNode("docs", True),
    ])


@pytest.fixture
def wide_layout() -> Dict:
    """Ten files spread over nested directories, for sampling tests."""
    return {
        "data": {
            "a.txt": b"a",
            "b.txt": b"bb",
            "nested": {
                "c.txt": b"ccc",
                "d.txt": b"dddd",
                "deeper": {"e.txt": b"e", "f.txt": b"f"},
            },
            "other": {"g.txt": b"g", "h.txt": b"h", "i.txt": b"i"},
            "j.txt": b"j",
        }
    }


@pytest.fixture
def fake_source_cls():
    """The in-memory backend class, for tests that build or subclass it."""
    return FakeSource
