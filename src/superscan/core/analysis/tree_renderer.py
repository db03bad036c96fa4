from __future__ import annotations

"""
Tree Renderer.

Converts a TreeNode hierarchy into a human readable listing. Directories
carry a trailing '/', files their size in binary units. Node order is the
tree's own order; nothing is sorted here.
"""

from typing import List

from superscan.domain.tree_models import TreeNode

BRANCH_STYLE = "branch"
INDENT_STYLE = "indent"
STYLES = (BRANCH_STYLE, INDENT_STYLE)

_SIZE_UNIT = 1024
_SIZE_PREFIXES = "KMGTPE"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_tree(root: TreeNode, style: str = BRANCH_STYLE) -> str:
    """
    Render a tree as text, one line per node, root first.

    Args:
        root: Tree to render.
        style: 'branch' for ├──/└── connectors with │ continuation bars,
            'indent' for two spaces per depth level.

    Returns:
        str: Newline separated listing.
    """
    return "\n".join(render_tree_lines(root, style=style))


def render_tree_lines(root: TreeNode, style: str = BRANCH_STYLE) -> List[str]:
    if style not in STYLES:
        raise ValueError(f"Unknown tree style: {style}")

    lines: List[str] = [format_node(root)]
    if style == BRANCH_STYLE:
        _render_branches(root, lines, prefix="")
    else:
        _render_indented(root, lines, level=1)
    return lines


def format_node(node: TreeNode) -> str:
    """Label a node: 'name/' for directories, 'name (size)' for files."""
    if node.is_dir:
        return f"{node.name}/"
    return f"{node.name} ({format_size(node.size)})"


def format_size(size: int) -> str:
    """
    Format a byte count with binary prefixes.

    Values below 1024 are shown as whole bytes ('512 B'); larger values are
    divided by 1024 until they fit and shown with one decimal ('1.5 KB').
    """
    if size < _SIZE_UNIT:
        return f"{size} B"

    div, exp = _SIZE_UNIT, 0
    n = size // _SIZE_UNIT
    while n >= _SIZE_UNIT and exp < len(_SIZE_PREFIXES) - 1:
        div *= _SIZE_UNIT
        exp += 1
        n //= _SIZE_UNIT
    return f"{size / div:.1f} {_SIZE_PREFIXES[exp]}B"

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _render_branches(node: TreeNode, lines: List[str], prefix: str) -> None:
    total = len(node.children)
    for i, child in enumerate(node.children):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "
        lines.append(f"{prefix}{connector}{format_node(child)}")

        if child.is_dir:
            _render_branches(child, lines, prefix + ("    " if is_last else "│   "))


def _render_indented(node: TreeNode, lines: List[str], level: int) -> None:
    indent = "  " * level
    for child in node.children:
        lines.append(f"{indent}{format_node(child)}")
        if child.is_dir:
            _render_indented(child, lines, level + 1)
