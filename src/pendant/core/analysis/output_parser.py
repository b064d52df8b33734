from __future__ import annotations

"""
Analyzer Output Parser.

Extracts diagnostics from the line-oriented 'path(line,col): message' output
of luau-lsp. Lines that do not match the pattern continue the previous
diagnostic until the next match or a blank line.
"""

import re
from typing import List, Optional

from pendant.core.components.filters import IgnoreFilter
from pendant.domain.analysis_models import AnalysisIssue

_ISSUE_RX = re.compile(r"^(.+?)\((\d+),(\d+)\):\s+(.+)$")
_SLASHES_RX = re.compile(r"/+")


def parse_luau_lsp_output(output: str, ignore_filter: Optional[IgnoreFilter] = None) -> List[AnalysisIssue]:
    """
    Parse raw analyzer output into issues.

    Args:
        output: Combined analyzer output.
        ignore_filter: Optional filter; issues in ignored files are dropped.

    Returns:
        List[AnalysisIssue]: Issues in output order.
    """
    issues: List[AnalysisIssue] = []
    current: Optional[List] = None

    def flush() -> None:
        if current is None:
            return
        file_path, line, column, message_lines = current
        message = "\n".join(message_lines)
        if ignore_filter is not None and ignore_filter.ignores(file_path):
            return
        issues.append(AnalysisIssue(
            file_path=file_path,
            line=line,
            column=column,
            message=message,
            severity=_severity(message),
        ))

    for raw_line in output.splitlines():
        line = raw_line.rstrip()
        if not line.strip():
            flush()
            current = None
            continue

        match = _ISSUE_RX.match(line)
        if match:
            flush()
            raw_path, line_no, column, message = match.groups()
            file_path = _SLASHES_RX.sub("/", raw_path.replace("\\", "/")).lstrip("/")
            current = [file_path, int(line_no), int(column), [message]]
        elif current is not None:
            current[3].append(line.strip())

    flush()
    return issues


def _severity(message: str) -> str:
    lowered = message.lower()
    if "error" in lowered:
        return "error"
    if lowered.startswith("info"):
        return "info"
    return "warning"
