from __future__ import annotations

"""
Core path-map pipeline.

Composes the classification stages into the per-context glob map handed to
the analyzer:
1. Translates the configuration 'files' table into classifier input.
2. Classifies the project tree into runtime contexts.
3. Extracts the globs of every classified node.
4. Consolidates each context independently.
5. Drops globs matched by the ignore filter.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from pendant.core.components.filters import IgnoreFilter, is_ignored_glob
from pendant.core.project.classifier import classify, configured_paths_from_files
from pendant.core.project.consolidator import consolidate
from pendant.core.project.extractor import collect_paths
from pendant.domain.analysis_models import ClassificationResult, PathMap
from pendant.domain.constants import DEFAULT_GROUPABLE_ROOTS
from pendant.domain.tree_models import TreeEntry

logger = logging.getLogger(__name__)


def build_path_map(
        tree: TreeEntry,
        config: Optional[Dict[str, Any]] = None,
        *,
        ignore_filter: Optional[IgnoreFilter] = None,
) -> PathMap:
    """
    Run classify -> extract -> consolidate -> filter over a project tree.

    Args:
        tree: Root of the Rojo project tree.
        config: Validated configuration ('files' and 'groupableRoots' are
                read); None means no configuration.
        ignore_filter: Optional filter removing ignored globs.

    Returns:
        PathMap: Final globs per runtime context.
    """
    cfg = config or {}
    configured = configured_paths_from_files(cfg.get("files"))
    groupable_roots: Iterable[str] = cfg.get("groupableRoots") or DEFAULT_GROUPABLE_ROOTS

    result: ClassificationResult = classify(tree, configured)
    raw_paths = collect_paths(result)

    final: PathMap = {}
    for context, paths in raw_paths.items():
        consolidated = consolidate(paths, groupable_roots)
        if ignore_filter is not None:
            kept = [p for p in consolidated if not is_ignored_glob(p, ignore_filter)]
            dropped = len(consolidated) - len(kept)
            if dropped:
                logger.debug(f"{context.value}: {dropped} ignored glob(s) dropped")
            consolidated = kept
        final[context] = consolidated
        if consolidated:
            logger.debug(f"{context.value}: {consolidated}")

    return final
