from __future__ import annotations

"""
Unit tests for the Random Sample Downloader.

Covers the selection bounds, distinctness, uniformity across seeds and
download failure accounting (a failed pick is never replaced).
"""

import random
from collections import Counter
from pathlib import Path

import pytest

from superscan.core.analysis.tree_builder import build_tree
from superscan.core.mirror.sampler import (
    flatten_tree,
    sample_and_download,
    select_random,
    select_sample,
)
from superscan.domain.tree_models import TreeNode


@pytest.fixture
def ten_leaf_tree() -> TreeNode:
    """Ten files, three of them nested, so leaves span several depths."""
    return TreeNode("r", True, children=[
        TreeNode("d1", True, children=[TreeNode(f"f{i}", False, i) for i in range(3)]),
        TreeNode("d2", True, children=[
            TreeNode("d3", True, children=[TreeNode(f"g{i}", False, i) for i in range(4)]),
        ]),
        *[TreeNode(f"h{i}", False, i) for i in range(3)],
    ])


# -----------------------------------------------------------------------------
# SELECTION
# -----------------------------------------------------------------------------

def test_select_random_bounds() -> None:
    items = list("abcdef")
    assert select_random(items, 0) == []
    assert select_random(items, -3) == []
    assert select_random(items, 6) == items
    assert select_random(items, 100) == items


def test_select_random_distinct_and_in_population_order() -> None:
    items = list(range(50))
    picked = select_random(items, 7, random.Random(3))
    assert len(picked) == 7
    assert len(set(picked)) == 7
    assert picked == sorted(picked)


def test_select_random_is_reproducible_with_seed() -> None:
    items = list(range(30))
    assert select_random(items, 5, random.Random(42)) == select_random(items, 5, random.Random(42))


def test_flatten_tree_maps_root_onto_bases(ten_leaf_tree: TreeNode, tmp_path: Path) -> None:
    entries = flatten_tree(ten_leaf_tree, str(tmp_path), source_base="bucket/prefix")

    assert len(entries) == 10
    assert entries[0].source_path == "bucket/prefix/d1/f0"
    assert entries[0].destination_path == str(tmp_path / "d1" / "f0")
    assert entries[3].source_path == "bucket/prefix/d2/d3/g0"
    assert entries[-1].source_path == "bucket/prefix/h2"


def test_select_sample_when_k_exceeds_leaves(ten_leaf_tree: TreeNode, tmp_path: Path) -> None:
    assert len(select_sample(ten_leaf_tree, str(tmp_path), 25)) == 10


def test_select_sample_without_leaves(tmp_path: Path) -> None:
    empty = TreeNode("r", True, children=[TreeNode("d", True)])
    assert select_sample(empty, str(tmp_path), 5) == []


def test_selection_is_uniform_across_seeds(ten_leaf_tree: TreeNode, tmp_path: Path) -> None:
    """Chi-square goodness of fit, 9 degrees of freedom, p = 0.001."""
    trials, k = 2000, 3
    counts: Counter = Counter()
    for seed in range(trials):
        for entry in select_sample(ten_leaf_tree, str(tmp_path), k, random.Random(seed)):
            counts[entry.source_path] += 1

    assert len(counts) == 10
    expected = trials * k / 10
    chi_square = sum((observed - expected) ** 2 / expected for observed in counts.values())
    assert chi_square < 27.88

# -----------------------------------------------------------------------------
# DOWNLOAD
# -----------------------------------------------------------------------------

def test_sample_downloads_everything_when_k_equals_leaf_count(
        fake_source_cls, silent_logger, tmp_path: Path
) -> None:
    layout = {"r": {"x": {"a.txt": b"a"}, "b.txt": b"b", "empty": {}}}
    source = fake_source_cls(layout)
    tree = build_tree(source, "r", silent_logger)

    result = sample_and_download(tree, str(tmp_path), 2, source, source_base="r", log=silent_logger)

    assert result.population == 2
    assert result.selected == 2
    assert result.files_downloaded == 2
    assert (tmp_path / "x" / "a.txt").read_bytes() == b"a"
    assert (tmp_path / "b.txt").read_bytes() == b"b"
    assert (tmp_path / "empty").is_dir()


def test_sample_of_three_downloads_three_distinct_files(
        fake_source_cls, wide_layout, silent_logger, tmp_path: Path
) -> None:
    source = fake_source_cls(wide_layout)
    tree = build_tree(source, "data", silent_logger)

    result = sample_and_download(
        tree, str(tmp_path), 3, source, rng=random.Random(11), source_base="data", log=silent_logger
    )

    requested = [src for src, _ in source.download_calls]
    assert len(requested) == 3
    assert len(set(requested)) == 3
    assert result.files_downloaded == 3
    assert sum(1 for p in tmp_path.rglob("*") if p.is_file()) == 3


def test_sample_creates_full_directory_skeleton(
        fake_source_cls, wide_layout, silent_logger, tmp_path: Path
) -> None:
    source = fake_source_cls(wide_layout)
    tree = build_tree(source, "data", silent_logger)

    sample_and_download(tree, str(tmp_path), 1, source, rng=random.Random(0), source_base="data", log=silent_logger)

    assert (tmp_path / "nested" / "deeper").is_dir()
    assert (tmp_path / "other").is_dir()


def test_missing_sampled_file_is_not_backfilled(
        fake_source_cls, wide_layout, silent_logger, tmp_path: Path
) -> None:
    all_files = {
        "data/a.txt", "data/b.txt", "data/j.txt",
        "data/nested/c.txt", "data/nested/d.txt",
        "data/nested/deeper/e.txt", "data/nested/deeper/f.txt",
        "data/other/g.txt", "data/other/h.txt", "data/other/i.txt",
    }
    # Whatever gets picked, the first pick in tree order is missing.
    rng_seed = 5
    tree = build_tree(fake_source_cls(wide_layout), "data", silent_logger)
    picks = select_sample(tree, str(tmp_path), 4, random.Random(rng_seed), source_base="data")
    missing = {picks[0].source_path}
    assert missing <= all_files

    source = fake_source_cls(wide_layout, missing_files=missing)
    result = sample_and_download(
        tree, str(tmp_path), 4, source, rng=random.Random(rng_seed), source_base="data", log=silent_logger
    )

    assert result.selected == 4
    assert result.files_downloaded == 3
    assert result.files_failed == 1
    assert len(source.download_calls) == 4
    assert not result.ok
