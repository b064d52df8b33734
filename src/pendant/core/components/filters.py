from __future__ import annotations

"""
Ignore-File Filtering Engine.

Implements the ignore-file mini-language used by .gitignore style files:
comments, directory patterns, anchored patterns, and '*', '?', '**'
wildcards. Negated patterns are not supported by the analyzer invocation and
are skipped with a warning. Patterns are translated to regular expressions
once, when the filter is built.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from pendant.domain.constants import GLOB_SUFFIX

logger = logging.getLogger(__name__)

_COMMENT_PREFIX = "#"
_NEGATION_PREFIX = "!"


# -----------------------------------------------------------------------------
# PATTERN COMPILATION
# -----------------------------------------------------------------------------

def _pattern_lines(patterns: Iterable[str]) -> List[str]:
    """Drop blanks and comments; skip negations with a warning."""
    out: List[str] = []
    for raw in patterns:
        line = raw.strip()
        if not line or line.startswith(_COMMENT_PREFIX):
            continue
        if line.startswith(_NEGATION_PREFIX):
            logger.warning(f"Negated ignore pattern '{line}' is not supported and was skipped")
            continue
        out.append(line)
    return out


def _glob_to_regex(pattern: str) -> str:
    """
    Translate one ignore pattern into an anchored regex.

    '**' crosses separators, '*' and '?' do not, every other character is
    literal. The result matches the path itself or anything beneath it.

    Args:
        pattern: A non-comment, non-negated ignore line.

    Returns:
        str: Regex source.
    """
    body = pattern.lstrip("/")
    directory_only = body.endswith("/")
    body = body.rstrip("/")

    parts: List[str] = []
    i = 0
    while i < len(body):
        if body.startswith("**/", i):
            # Zero or more leading directories
            parts.append("(?:.*/)?")
            i += 3
        elif body.startswith("**", i):
            parts.append(".*")
            i += 2
        elif body[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif body[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(body[i]))
            i += 1

    rx = "".join(parts)
    if directory_only:
        # Only the directory form 'dir/' or anything beneath it
        return f"^{rx}/.*$"
    return f"^{rx}(?:/.*)?$"


# -----------------------------------------------------------------------------
# FILTER
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class IgnoreFilter:
    """
    Immutable compiled ignore pattern set.

    Attributes:
        patterns: Source patterns that were compiled.
        root: Optional directory that incoming paths are made relative to.
    """
    patterns: Tuple[str, ...]
    compiled: Tuple[re.Pattern, ...]
    root: Optional[str] = None

    @classmethod
    def build(cls, patterns: Iterable[str], root: Optional[str] = None) -> "IgnoreFilter":
        """
        Compile ignore patterns.

        Args:
            patterns: Raw ignore-file lines and/or user globs.
            root: Directory used to relativize absolute paths.

        Returns:
            IgnoreFilter: The compiled filter.
        """
        lines = _pattern_lines(patterns)
        compiled: List[re.Pattern] = []
        for line in lines:
            try:
                compiled.append(re.compile(_glob_to_regex(line)))
            except re.error as e:
                logger.warning(f"Invalid ignore pattern '{line}' skipped: {e}")
        return cls(patterns=tuple(lines), compiled=tuple(compiled), root=root)

    def ignores(self, path: str) -> bool:
        """
        Check whether a path is ignored.

        Both the plain form and the directory form ('path/') are tested so
        that directory patterns match the directory itself.
        """
        candidate = self._relativize(path)
        if not candidate:
            return False
        directory_form = candidate + "/"
        return any(rx.match(candidate) or rx.match(directory_form) for rx in self.compiled)

    def _relativize(self, path: str) -> str:
        p = path.replace("\\", "/")
        if self.root and os.path.isabs(path):
            p = os.path.relpath(path, self.root).replace("\\", "/")
        while p.startswith("../"):
            p = p[3:]
        while p.startswith("./"):
            p = p[2:]
        return p.lstrip("/").rstrip("/")


# -----------------------------------------------------------------------------
# IGNORE FILE INTEGRATION
# -----------------------------------------------------------------------------

def read_ignore_file(path: str) -> List[str]:
    """
    Read raw lines from an ignore file.

    Args:
        path: Ignore file path (typically '<root>/.gitignore').

    Returns:
        List[str]: Raw lines; empty when the file does not exist.
    """
    if not os.path.isfile(path):
        logger.debug(f"No ignore file at {path}")
        return []
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


def ignore_file_to_globs(lines: Iterable[str]) -> List[str]:
    """
    Convert ignore-file lines into analyzer '--ignore' globs.

    'dir/' becomes 'dir/**'; a leading '/' is stripped.
    """
    globs: List[str] = []
    for line in _pattern_lines(lines):
        glob = line.lstrip("/")
        if glob.endswith("/"):
            glob = glob.rstrip("/") + GLOB_SUFFIX
        if glob and glob not in globs:
            globs.append(glob)
    return globs


def is_ignored_glob(glob: str, ignore_filter: IgnoreFilter) -> bool:
    """Test the directory behind a recursive glob against the filter."""
    base = glob[: -len(GLOB_SUFFIX)] if glob.endswith(GLOB_SUFFIX) else glob
    return ignore_filter.ignores(base) or ignore_filter.ignores(base + "/")
