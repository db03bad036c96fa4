from __future__ import annotations

"""
Mirror Orchestration Service.

Single entry point used by the interfaces: build the tree of a backend
path, log its listing, then mirror it completely or as a random sample.
"""

import logging
import random
from typing import Optional, Union

from superscan.core.analysis.tree_builder import build_tree
from superscan.core.analysis.tree_renderer import BRANCH_STYLE, render_tree
from superscan.core.mirror.engine import mirror_tree
from superscan.core.mirror.sampler import sample_and_download
from superscan.domain.tree_models import MirrorResult, SampleResult
from superscan.infra.sources.base import Source

logger = logging.getLogger(__name__)


def download_tree(
        source: Source,
        source_path: str,
        destination_root: str,
        sample_size: int = 0,
        log: Optional[logging.Logger] = None,
        rng: Optional[random.Random] = None,
        style: str = BRANCH_STYLE,
) -> Union[MirrorResult, SampleResult]:
    """
    Build, display and mirror a backend tree.

    Args:
        source: Backend to read from.
        source_path: Path, prefix or folder path to mirror.
        destination_root: Local directory receiving the mirror.
        sample_size: When positive, download only that many random files.
        log: Logger receiving the tree listing and progress.
        rng: Random source for sampling.
        style: Rendering style of the logged preview.

    Returns:
        Union[MirrorResult, SampleResult]: Counters of the executed mode.

    Raises:
        BackendUnavailable: The tree could not be built.
    """
    log = log or logger
    tree = build_tree(source, source_path, log)
    source_base = source.source_base(source_path)

    log.info("Directory structure to be downloaded:\n" + render_tree(tree, style=style))

    if sample_size > 0:
        log.info(f"Downloading sample of {sample_size} files")
        return sample_and_download(
            tree, destination_root, sample_size, source,
            rng=rng, source_base=source_base, log=log,
        )
    return mirror_tree(tree, destination_root, source, source_base=source_base, log=log)
