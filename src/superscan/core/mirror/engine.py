from __future__ import annotations

"""
Mirror Engine.

Reproduces a built tree under a local destination root in two passes: the
full directory skeleton first, then file contents through the backend's
single-file download primitive. Running the directory pass to completion
first means downloads never have to create parent directories.

Both passes are best effort. A failing directory aborts only its own
subtree for the directory pass; a failing file is logged, counted and
skipped.
"""

import logging
import os
from typing import Optional, Union

from superscan.core.mirror.paths import join_destination, join_source
from superscan.domain.errors import SuperscanError
from superscan.domain.tree_models import MirrorResult, SampleResult, TreeNode
from superscan.infra.sources.base import Source

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def mirror_tree(
        root: TreeNode,
        destination_root: str,
        source: Source,
        source_base: str = "",
        log: Optional[logging.Logger] = None,
) -> MirrorResult:
    """
    Mirror every directory and file of a tree under destination_root.

    The root node maps onto destination_root itself (and onto source_base
    on the backend side); descendants map onto their joined names.

    Args:
        root: Tree produced by build_tree.
        destination_root: Local directory receiving the mirror.
        source: Backend used to fetch file contents.
        source_base: Backend path of the root node.
        log: Logger receiving progress and failures.

    Returns:
        MirrorResult: Directory and file counters.
    """
    log = log or logger
    result = MirrorResult()

    log.info("Creating directory structure...")
    create_directories(root, destination_root, result, log)

    log.info("Starting file downloads...")
    download_files(root, source_base, destination_root, source, result, log)

    log.info(
        f"Mirror finished: {result.directories_created} directories, "
        f"{result.files_downloaded} files downloaded, {result.files_failed} failed"
    )
    return result


def create_directories(
        node: TreeNode,
        dest_path: str,
        result: Union[MirrorResult, SampleResult],
        log: logging.Logger,
) -> None:
    """
    Depth-first creation of dest_path for every directory node.

    Creation is idempotent. A failure is counted and that node's subtree is
    skipped; sibling subtrees continue.
    """
    if not node.is_dir:
        return

    try:
        os.makedirs(dest_path, exist_ok=True)
    except OSError as e:
        log.error(f"Failed to create directory {dest_path}: {e}")
        result.directories_failed += 1
        return

    result.directories_created += 1
    log.debug(f"Created directory: {dest_path}")

    for child in node.children:
        if child.is_dir:
            create_directories(child, join_destination(dest_path, child.name), result, log)


def download_files(
        node: TreeNode,
        source_path: str,
        dest_path: str,
        source: Source,
        result: MirrorResult,
        log: logging.Logger,
) -> None:
    """
    Depth-first download of every leaf below node.

    source_path and dest_path are the already resolved locations of node.
    Each failing file is counted and skipped.
    """
    if not node.is_dir:
        if download_one(source, source_path, dest_path, log):
            result.files_downloaded += 1
        else:
            result.files_failed += 1
        return

    for child in node.children:
        download_files(
            child,
            join_source(source_path, child.name),
            join_destination(dest_path, child.name),
            source,
            result,
            log,
        )


def download_one(source: Source, source_path: str, dest_path: str, log: logging.Logger) -> bool:
    """Fetch a single file, logging rather than raising on failure."""
    log.info(f"Downloading: {source_path}")
    try:
        source.download_file(source_path, dest_path)
    except SuperscanError as e:
        log.error(f"Failed to download {source_path}: {e}")
        return False
    log.debug(f"Successfully downloaded: {source_path} -> {dest_path}")
    return True

