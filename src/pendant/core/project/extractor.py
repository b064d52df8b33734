from __future__ import annotations

"""
Path Glob Extraction.

Turns classified tree nodes into recursive directory globs. Extraction is a
flat pre-order walk; duplicates across branches are left for the
consolidator to remove.
"""

import logging
from typing import AbstractSet, List, Tuple

from pendant.domain.analysis_models import ClassificationResult, PathMap, empty_path_map
from pendant.domain.constants import GLOB_SUFFIX
from pendant.domain.tree_models import NodeId, TreeEntry

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# GLOB HELPERS
# -----------------------------------------------------------------------------

def normalize_path(path: str) -> str:
    """Use forward slashes and drop a leading './' and trailing '/'."""
    p = path.replace("\\", "/").strip()
    while p.startswith("./"):
        p = p[2:]
    return p.rstrip("/")


def to_glob(path: str) -> str:
    """Render a directory path as a recursive glob ('dir/**')."""
    base = normalize_path(path)
    if base in ("", "."):
        return "**"
    return f"{base}{GLOB_SUFFIX}"


def glob_base(glob: str) -> str:
    """Strip the recursive suffix from a glob ('dir/**' -> 'dir')."""
    p = normalize_path(glob)
    if p.endswith(GLOB_SUFFIX):
        p = p[: -len(GLOB_SUFFIX)]
    elif p == "**":
        p = ""
    return p.rstrip("/")


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def extract_paths(
        entry: TreeEntry,
        *,
        node_id: NodeId = (),
        stop: AbstractSet[NodeId] = frozenset(),
) -> List[str]:
    """
    Collect the recursive globs mapped by a node and its descendants.

    The node's own path comes first, followed by its children's paths in
    declaration order. A node with both a path and nested paths yields all
    of them.

    Args:
        entry: Starting node.
        node_id: Key path of the starting node.
        stop: Descendant node ids that belong to a separate classification
              and must not be extracted here.

    Returns:
        List[str]: Globs in pre-order (duplicates permitted).
    """
    out: List[str] = []
    # Explicit stack so tree depth is bounded only by memory
    stack: List[Tuple[NodeId, TreeEntry]] = [(node_id, entry)]
    while stack:
        current_id, current = stack.pop()
        if current.path:
            out.append(to_glob(current.path))
        for key, child in reversed(current.children):
            child_id = current_id + (key,)
            if child_id not in stop:
                stack.append((child_id, child))
    return out


def collect_paths(result: ClassificationResult) -> PathMap:
    """
    Extract the globs of every classified node into a per-context map.

    Each classified node only contributes the paths not owned by a
    separately classified descendant, so every path is reported once.
    """
    owned = frozenset(result.node_ids())
    paths = empty_path_map()
    for context, nodes in result.entries.items():
        for node in nodes:
            paths[context].extend(
                extract_paths(node.entry, node_id=node.node_id, stop=owned - {node.node_id})
            )
    return paths

