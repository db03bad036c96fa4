from __future__ import annotations

"""
File Tree Builder.

Constructs the in-memory TreeNode hierarchy from a backend. Directory
backends are expanded with an explicit pending list rather than recursion,
since remote namespaces have no depth bound. Object stores that list every
key in one paginated call are folded into a tree by synthesizing the
directories implied by key prefixes.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from superscan.domain.errors import SuperscanError
from superscan.domain.tree_models import TreeNode
from superscan.infra.sources.base import Source

logger = logging.getLogger(__name__)

HIDDEN_PREFIX = "."

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build_tree(
        source: Source,
        source_path: str,
        log: Optional[logging.Logger] = None,
) -> TreeNode:
    """
    Build the file tree rooted at a backend path.

    Listing failures at the root propagate. A failure on a deeper directory
    is logged and leaves that directory without children, so a partial
    tree is a valid result.

    Args:
        source: Backend providing the listing primitives.
        source_path: Path, prefix or folder path to scan.
        log: Logger receiving progress and failures.

    Returns:
        TreeNode: Root directory node.

    Raises:
        BackendUnavailable: The root could not be resolved or listed.
    """
    log = log or logger
    identifier, root_name = source.resolve_root(source_path)
    log.info(f"Building file tree from {source.name}: {identifier or root_name}")

    if source.flat_listing:
        tree = build_tree_from_keys(root_name, source.iter_objects(identifier))
    else:
        tree = _expand_directories(source, identifier, root_name, log)

    log.debug(f"File tree built: {tree.count_nodes()} nodes, {tree.count_files()} files")
    return tree


def build_tree_from_keys(root_name: str, objects: Iterable[Tuple[str, int]]) -> TreeNode:
    """
    Fold a flat object listing into a tree.

    Keys are relative to the scanned prefix. Every intermediate segment
    becomes a directory node, memoized by (parent path, name) so shared
    prefixes collapse into a single node. Keys ending in '/' are directory
    markers and produce no file node.

    Empty and '.' segments are dropped, so 'a//b.txt' and 'a/./b.txt' land
    at a/b.txt. This is lossy: such objects are later requested under the
    folded key, which does not exist, and count as failed downloads.

    Args:
        root_name: Name given to the root node.
        objects: (relative key, size) pairs in listing order.

    Returns:
        TreeNode: Root directory node.
    """
    root = TreeNode(name=root_name, is_dir=True)
    directories: Dict[Tuple[Tuple[str, ...], str], TreeNode] = {}

    for key, size in objects:
        parts = [p for p in key.split("/") if p and p != "."]
        if not parts:
            continue

        is_marker = key.endswith("/")
        dir_parts = parts if is_marker else parts[:-1]

        parent = root
        parent_path: Tuple[str, ...] = ()
        for part in dir_parts:
            memo_key = (parent_path, part)
            node = directories.get(memo_key)
            if node is None:
                node = parent.add_child(TreeNode(name=part, is_dir=True))
                directories[memo_key] = node
            parent = node
            parent_path = parent_path + (part,)

        if not is_marker:
            parent.add_child(TreeNode(name=parts[-1], is_dir=False, size=int(size or 0)))

    return root

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _expand_directories(
        source: Source,
        root_identifier: str,
        root_name: str,
        log: logging.Logger,
) -> TreeNode:
    """
    Iteratively list directories until none are pending.

    The pending list is LIFO, so listing calls run depth-first with the
    last discovered sibling expanded first. Children are always appended to
    their own parent in listing order, so the finished tree keeps backend
    order whatever the expansion order.
    """
    root = TreeNode(name=root_name, is_dir=True)
    pending: List[Tuple[str, TreeNode]] = [(root_identifier, root)]

    while pending:
        identifier, parent = pending.pop()

        try:
            entries = source.list_entries(identifier)
        except SuperscanError as e:
            if parent is root:
                raise
            log.error(f"Failed to list directory {identifier}: {e}")
            continue

        for entry in entries:
            if source.skip_hidden and entry.name.startswith(HIDDEN_PREFIX):
                continue

            node = parent.add_child(TreeNode(
                name=entry.name,
                is_dir=entry.is_dir,
                size=0 if entry.is_dir else int(entry.size or 0),
            ))
            if entry.is_dir:
                pending.append((entry.identifier, node))

    return root
