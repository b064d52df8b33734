from __future__ import annotations

"""
Rojo Project Tree Classifier.

Assigns every informative node of a project tree to a runtime context using
a layered rule set:
1. Explicit configuration (node key, class name, or mapped path).
2. Roblox service metadata (class name).
3. Structural fallback (inherit the parent's context, else Unknown).

Contexts flow top-down; a descendant's own configuration or metadata match
always overrides the inherited context.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from pendant.core.project.extractor import glob_base, normalize_path
from pendant.domain.analysis_models import (
    REASON_CONFIGURATION,
    REASON_INHERITED,
    REASON_METADATA,
    REASON_UNKNOWN,
    ClassificationResult,
    ClassifiedNode,
)
from pendant.domain.constants import CONTEXT_BY_CONFIG_KEY, SERVICE_METADATA, RuntimeContext
from pendant.domain.tree_models import NodeId, TreeEntry

logger = logging.getLogger(__name__)

ConfiguredPaths = Mapping[RuntimeContext, Iterable[str]]


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def configured_paths_from_files(files: Optional[Mapping[str, Iterable[str]]]) -> Dict[RuntimeContext, Set[str]]:
    """
    Translate the configuration 'files' table into classifier input.

    Args:
        files: Mapping of configuration key ('client', 'server', ...) to
               service names, node keys, or paths.

    Returns:
        Dict[RuntimeContext, Set[str]]: Identifiers per runtime context.
    """
    out: Dict[RuntimeContext, Set[str]] = {}
    for key, values in (files or {}).items():
        context = CONTEXT_BY_CONFIG_KEY.get(key)
        if context is None:
            logger.warning(f"Ignoring unexpected configuration key 'files.{key}'")
            continue
        out[context] = {v for v in values if v}
    return out


def classify(root: TreeEntry, configured_paths: Optional[ConfiguredPaths] = None) -> ClassificationResult:
    """
    Partition a project tree into runtime contexts.

    Traversal is depth-first pre-order over the root's children in declared
    order, so identical input always yields identical output ordering. Each
    node is listed in at most one context.

    Args:
        root: Tree root (its own class and path are not classified).
        configured_paths: Identifiers configured per runtime context.

    Returns:
        ClassificationResult: Classified nodes per runtime context.
    """
    index = _build_index(configured_paths or {})
    claimed_classes = _claim_class_names(root, index)

    entries: Dict[RuntimeContext, List[ClassifiedNode]] = {context: [] for context in RuntimeContext}
    claimed: Set[NodeId] = set()

    # Explicit stack keeps deep trees clear of the recursion limit
    stack: List[Tuple[NodeId, TreeEntry, Optional[RuntimeContext]]] = [
        ((key,), child, None) for key, child in reversed(root.children)
    ]

    while stack:
        node_id, entry, inherited = stack.pop()
        if node_id in claimed:
            continue

        context, reason = _resolve(node_id[-1], entry, inherited, index, claimed_classes)
        if context is not None and reason is not None:
            claimed.add(node_id)
            entries[context].append(ClassifiedNode(node_id, entry, reason))
            logger.debug(f"{'/'.join(node_id)} -> {context.value} ({reason})")

        for key, child in reversed(entry.children):
            stack.append((node_id + (key,), child, context))

    return ClassificationResult(entries)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _build_index(configured_paths: ConfiguredPaths) -> Dict[str, RuntimeContext]:
    """Map each configured identifier to its context; the first claim wins."""
    index: Dict[str, RuntimeContext] = {}
    for context, values in configured_paths.items():
        for raw in values:
            for ident in {raw, glob_base(raw)}:
                if not ident:
                    continue
                previous = index.setdefault(ident, context)
                if previous is not context:
                    logger.warning(
                        f"'{ident}' is configured for both {previous.value} and {context.value}; "
                        f"keeping {previous.value}"
                    )
    return index


def _match_configuration(key: str, entry: TreeEntry, index: Mapping[str, RuntimeContext]) -> Optional[RuntimeContext]:
    candidates = [key]
    if entry.class_name:
        candidates.append(entry.class_name)
    if entry.path:
        candidates.append(normalize_path(entry.path))
    for ident in candidates:
        if ident in index:
            return index[ident]
    return None


def _claim_class_names(root: TreeEntry, index: Mapping[str, RuntimeContext]) -> Dict[str, RuntimeContext]:
    """
    Pre-pass: class names of configured top-level services resolve to the
    claiming context.

    Nested nodes never claim their class, so configuring one nested Folder
    leaves every other Folder to its own parent.
    """
    claimed: Dict[str, RuntimeContext] = {}
    for key, entry in root.children:
        context = _match_configuration(key, entry, index)
        if context is not None and entry.class_name:
            claimed.setdefault(entry.class_name, context)
    return claimed


def _resolve(
        key: str,
        entry: TreeEntry,
        inherited: Optional[RuntimeContext],
        index: Mapping[str, RuntimeContext],
        claimed_classes: Mapping[str, RuntimeContext],
) -> Tuple[Optional[RuntimeContext], Optional[str]]:
    """
    Apply the rule hierarchy to one node.

    Returns the resolved context and the reason it was listed. A node with no
    class name and no path returns the inherited context with no reason: it
    is not listed but still passes its context on.
    """
    context = _match_configuration(key, entry, index)
    if context is not None:
        return context, REASON_CONFIGURATION

    class_name = entry.class_name
    if class_name:
        if class_name in claimed_classes:
            return claimed_classes[class_name], REASON_CONFIGURATION
        if class_name in SERVICE_METADATA:
            return SERVICE_METADATA[class_name], REASON_METADATA
        if inherited is not None:
            return inherited, REASON_INHERITED
        return RuntimeContext.UNKNOWN, REASON_UNKNOWN

    if entry.path:
        if inherited is not None:
            return inherited, REASON_INHERITED
        return RuntimeContext.UNKNOWN, REASON_UNKNOWN

    return inherited, None
