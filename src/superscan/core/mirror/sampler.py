from __future__ import annotations

"""
Random Sample Downloader.

Flattens a tree into its file leaves, picks a bounded set of distinct
leaves uniformly at random and downloads only those. The whole tree is
visited before anything is chosen, so every leaf has the same chance.
"""

import logging
import random
import time
from typing import List, Optional, Sequence, TypeVar

from superscan.core.mirror.engine import create_directories, download_one
from superscan.core.mirror.paths import join_destination, join_source
from superscan.domain.tree_models import FileEntry, SampleResult, TreeNode
from superscan.infra.sources.base import Source

logger = logging.getLogger(__name__)

T = TypeVar("T")

# -----------------------------------------------------------------------------
# SELECTION
# -----------------------------------------------------------------------------

def new_rng() -> random.Random:
    """Random source seeded from the wall clock, created per call."""
    return random.Random(time.time_ns())


def select_random(items: Sequence[T], n: int, rng: Optional[random.Random] = None) -> List[T]:
    """
    Pick up to n distinct items uniformly without replacement.

    Uses a partial shuffle, so the cost stays linear even when n is close
    to len(items). n is a ceiling: asking for more items than exist returns
    all of them in their original order.

    Args:
        items: Population to draw from.
        n: Maximum number of items to return.
        rng: Random source; a time-seeded one is created when omitted.

    Returns:
        List[T]: Selected items, in population order.
    """
    if n <= 0:
        return []
    if len(items) <= n:
        return list(items)

    rng = rng or new_rng()
    pool = list(range(len(items)))
    for i in range(n):
        j = rng.randrange(i, len(pool))
        pool[i], pool[j] = pool[j], pool[i]
    return [items[i] for i in sorted(pool[:n])]


def flatten_tree(root: TreeNode, destination_root: str, source_base: str = "") -> List[FileEntry]:
    """
    Resolve every leaf of a tree to its source and destination paths.

    The root node maps onto source_base and destination_root. Entries are
    returned depth-first in tree order.
    """
    entries: List[FileEntry] = []
    if root.is_dir:
        _collect_files(root, source_base, destination_root, entries)
    else:
        entries.append(FileEntry(
            source_path=join_source(source_base, root.name),
            destination_path=join_destination(destination_root, root.name),
        ))
    return entries


def select_sample(
        root: TreeNode,
        destination_root: str,
        k: int,
        rng: Optional[random.Random] = None,
        source_base: str = "",
) -> List[FileEntry]:
    """Flatten a tree and select at most k distinct leaves from it."""
    return select_random(flatten_tree(root, destination_root, source_base), k, rng)

# -----------------------------------------------------------------------------
# DOWNLOAD
# -----------------------------------------------------------------------------

def sample_and_download(
        root: TreeNode,
        destination_root: str,
        k: int,
        source: Source,
        rng: Optional[random.Random] = None,
        source_base: str = "",
        log: Optional[logging.Logger] = None,
) -> SampleResult:
    """
    Download a random sample of at most k files from a tree.

    The full directory skeleton is created first, as for a complete
    mirror. A failed download is counted and not replaced by another
    leaf, so fewer than k files may end up on disk.

    Args:
        root: Tree produced by build_tree.
        destination_root: Local directory receiving the sample.
        k: Maximum number of files to download.
        source: Backend used to fetch file contents.
        rng: Random source; inject a seeded one for reproducible runs.
        source_base: Backend path of the root node.
        log: Logger receiving progress and failures.

    Returns:
        SampleResult: Population, selection and download counters.
    """
    log = log or logger
    result = SampleResult()

    log.info("Creating directory structure...")
    create_directories(root, destination_root, result, log)

    entries = flatten_tree(root, destination_root, source_base)
    result.population = len(entries)

    selected = select_random(entries, k, rng)
    result.selected = len(selected)

    if result.selected == result.population:
        log.info(f"Found {result.population} files, downloading all")
    else:
        log.info(f"Found {result.population} files, randomly selecting {result.selected} files")

    for i, entry in enumerate(selected, start=1):
        log.debug(f"Sample file {i}/{result.selected}")
        if download_one(source, entry.source_path, entry.destination_path, log):
            result.files_downloaded += 1
        else:
            result.files_failed += 1

    log.info(f"Completed downloading {result.files_downloaded} of {result.selected} sampled files")
    return result

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _collect_files(node: TreeNode, source_path: str, dest_path: str, entries: List[FileEntry]) -> None:
    for child in node.children:
        child_source = join_source(source_path, child.name)
        child_dest = join_destination(dest_path, child.name)
        if child.is_dir:
            _collect_files(child, child_source, child_dest, entries)
        else:
            entries.append(FileEntry(source_path=child_source, destination_path=child_dest))
