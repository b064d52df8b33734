from __future__ import annotations

"""
Glob Consolidation.

Reduces the globs of one runtime context to a minimal set. Consolidation may
widen the analyzed set but never narrows it: a glob is only dropped when a
surviving glob provably covers it.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set

from pendant.core.project.extractor import glob_base, to_glob
from pendant.domain.constants import DEFAULT_GROUPABLE_ROOTS

logger = logging.getLogger(__name__)


def consolidate(paths: Sequence[str], groupable_roots: Iterable[str] = DEFAULT_GROUPABLE_ROOTS) -> List[str]:
    """
    Remove dominated globs and merge sibling groups under groupable roots.

    Steps:
    1. Prefix domination: globs are visited shortest first; a glob whose base
       equals, or lies beneath, an accepted base is dropped.
    2. Sibling grouping: survivors below a groupable root ('Root/Sub/...')
       are grouped by 'Root/Sub'. Groups of two or more collapse into
       'Root/Sub/**', placed where the first member was.

    Survivors keep their input order, which makes the operation idempotent.

    Args:
        paths: Globs of a single runtime context.
        groupable_roots: Top-level directories eligible for sibling grouping.

    Returns:
        List[str]: Consolidated globs.
    """
    if len(paths) <= 1:
        return list(paths)

    survivors = _drop_dominated(paths)
    roots = {r.strip("/") for r in groupable_roots if r.strip("/")}

    groups: Dict[str, List[str]] = {}
    for path in survivors:
        parent = _group_key(path, roots)
        if parent is not None:
            groups.setdefault(parent, []).append(path)

    out: List[str] = []
    emitted: Set[str] = set()
    for path in survivors:
        parent = _group_key(path, roots)
        if parent is None or len(groups[parent]) == 1:
            out.append(path)
        elif parent not in emitted:
            logger.debug(f"Grouping {len(groups[parent])} globs under {parent}")
            emitted.add(parent)
            out.append(to_glob(parent))
    return out


def _group_key(path: str, roots: Set[str]) -> Optional[str]:
    parts = glob_base(path).split("/")
    if len(parts) >= 2 and parts[0] in roots:
        return "/".join(parts[:2])
    return None


def _drop_dominated(paths: Sequence[str]) -> List[str]:
    """Keep only globs not covered by a shorter accepted glob, in input order."""
    bases = [glob_base(p) for p in paths]
    accepted: Set[int] = set()
    accepted_bases: List[str] = []
    # Shortest normalized base first, so './a/**' still dominates 'a/b/**'
    for index in sorted(range(len(paths)), key=lambda i: len(bases[i])):
        base = bases[index]
        if any(_covers(other, base) for other in accepted_bases):
            continue
        accepted.add(index)
        accepted_bases.append(base)
    return [p for i, p in enumerate(paths) if i in accepted]


def _covers(parent: str, child: str) -> bool:
    if parent == "":
        return True
    return child == parent or child.startswith(parent + "/")
