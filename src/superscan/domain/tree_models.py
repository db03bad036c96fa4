from __future__ import annotations

"""
File Tree Data Models.

Provides the in-memory tree representation shared by every backend, the
raw listing record backends hand to the tree builder, and the result
objects returned by the mirror and sampling operations.
"""

from dataclasses import dataclass, field
from typing import Iterator, List

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass
class TreeNode:
    """
    One file or directory entry and the entries it owns.

    The node stores only its own segment name. Full paths are rebuilt by
    joining ancestor names during traversal.

    Attributes:
        name: Entry name (a single path segment).
        is_dir: Whether the entry is a directory.
        size: Byte length for files; 0 for directories.
        children: Owned child nodes, in backend listing order.
    """
    name: str
    is_dir: bool
    size: int = 0
    children: List["TreeNode"] = field(default_factory=list)

    def add_child(self, child: "TreeNode") -> "TreeNode":
        """Attach a child node and return it. Files cannot own children."""
        if not self.is_dir:
            raise ValueError(f"File node '{self.name}' cannot have children")
        self.children.append(child)
        return child

    def walk(self) -> Iterator["TreeNode"]:
        """Yield this node and every descendant, depth-first in tree order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def count_nodes(self) -> int:
        return sum(1 for _ in self.walk())

    def count_files(self) -> int:
        return sum(1 for node in self.walk() if not node.is_dir)


@dataclass(frozen=True)
class ListingEntry:
    """
    Immediate child reported by a backend listing call.

    Attributes:
        name: Entry name.
        is_dir: Whether the entry can be expanded further.
        size: Byte length (ignored for directories).
        identifier: Backend handle used to list this entry's own children
            (absolute path, key prefix or folder id).
    """
    name: str
    is_dir: bool
    size: int
    identifier: str


@dataclass(frozen=True)
class FileEntry:
    """
    A leaf resolved against the scan root and the mirror root.

    Attributes:
        source_path: Backend path, always joined with forward slashes.
        destination_path: Local path, joined with host separators.
    """
    source_path: str
    destination_path: str

# -----------------------------------------------------------------------------
# OPERATION RESULTS
# -----------------------------------------------------------------------------

@dataclass
class MirrorResult:
    """
    Counters accumulated by a full mirror run.

    Attributes:
        directories_created: Directory nodes materialized (or already present).
        directories_failed: Directory nodes whose creation failed.
        files_downloaded: Leaves fetched successfully.
        files_failed: Leaves whose download failed.
    """
    directories_created: int = 0
    directories_failed: int = 0
    files_downloaded: int = 0
    files_failed: int = 0

    @property
    def ok(self) -> bool:
        return self.directories_failed == 0 and self.files_failed == 0


@dataclass
class SampleResult:
    """
    Counters accumulated by a sampled download run.

    Attributes:
        population: Number of leaves in the tree.
        selected: Number of leaves chosen for download.
        files_downloaded: Selected leaves fetched successfully.
        files_failed: Selected leaves whose download failed.
        directories_created: Directory nodes materialized before sampling.
        directories_failed: Directory nodes whose creation failed.
    """
    population: int = 0
    selected: int = 0
    files_downloaded: int = 0
    files_failed: int = 0
    directories_created: int = 0
    directories_failed: int = 0

    @property
    def ok(self) -> bool:
        return self.directories_failed == 0 and self.files_failed == 0
