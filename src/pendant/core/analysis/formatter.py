from __future__ import annotations

"""
Analysis Result Formatter.

Renders per-context analyzer results into the terminal summary and the
plain-text problems file consumed by external tools.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from pendant.domain.analysis_models import (
    AnalysisIssue,
    ContextAnalysisResult,
    FormattedAnalysisResult,
)
from pendant.domain.constants import RUNTIME_CONTEXT_META, RuntimeContext


def pluralize(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def format_duration(duration_ms: float) -> str:
    """Render a duration as '123ms' below one second, else '1.23s'."""
    if duration_ms < 1000:
        return f"{round(duration_ms)}ms"
    return f"{duration_ms / 1000:.2f}s"


def format_issue_line(issue: AnalysisIssue) -> str:
    return f"{issue.file_path} [{issue.line}:{issue.column}] {issue.message}"


def format_analysis_results(
        results: Sequence[ContextAnalysisResult],
        watch_mode: bool = False,
        now: Optional[datetime] = None,
) -> FormattedAnalysisResult:
    """
    Summarize analyzer results.

    Args:
        results: One result per analyzed context, in context order.
        watch_mode: Use the watch-mode status line.
        now: Timestamp for the status line (defaults to the current time).

    Returns:
        FormattedAnalysisResult: Summary lines, counts, and problems file text.
    """
    issues_by_context: Dict[RuntimeContext, int] = {}
    all_issues: List[AnalysisIssue] = []

    for result in results:
        issues_by_context[result.context] = len(result.issues)
        all_issues.extend(result.issues)

    total = len(all_issues)
    stamp = (now or datetime.now()).strftime("%H:%M:%S")
    noun = pluralize(total, "issue")

    if watch_mode:
        status = f"[{stamp}] Found {total} {noun}. Watching for file changes."
    else:
        status = f"[{stamp}] Analysis complete. Found {total} {noun}."

    lines = [status]
    for context, count in issues_by_context.items():
        if count > 0:
            meta = RUNTIME_CONTEXT_META[context]
            lines.append(f"\t{meta.emoji} {meta.name}: {count} {pluralize(count, 'issue')}")

    return FormattedAnalysisResult(
        lines=lines,
        issues_by_context=issues_by_context,
        problems_file_content="\n".join(format_issue_line(i) for i in all_issues),
        total_issues=total,
        issues=all_issues,
    )


def with_duration(lines: List[str], duration_ms: float, watch_mode: bool = False) -> List[str]:
    """Append 'Completed in ...' (or 'Finished in ...') to the status line."""
    if not lines:
        return lines
    verb = "Finished" if watch_mode else "Completed"
    return [f"{lines[0]} {verb} in {format_duration(duration_ms)}.", *lines[1:]]
