from __future__ import annotations

"""
Analysis Domain Data Models.

Defines the data structures exchanged between the classification core, the
analyzer runner, the output parser, and the interface layer.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pendant.domain.constants import RuntimeContext
from pendant.domain.tree_models import NodeId, TreeEntry

PathMap = Dict[RuntimeContext, List[str]]

# -----------------------------------------------------------------------------
# CLASSIFICATION MODELS
# -----------------------------------------------------------------------------

REASON_CONFIGURATION = "configuration"
REASON_METADATA = "metadata"
REASON_UNKNOWN = "unknown"
REASON_INHERITED = "inherited"


@dataclass(frozen=True)
class ClassifiedNode:
    """
    A tree node assigned to a runtime context.

    Attributes:
        node_id: Key path from the tree root.
        entry: The node itself (a reference, not a copy).
        reason: Rule that decided the context.
    """
    node_id: NodeId
    entry: TreeEntry
    reason: str


@dataclass(frozen=True)
class ClassificationResult:
    """
    Runtime context partition of a project tree.

    Every classified node appears in exactly one context list.

    Attributes:
        entries: Classified nodes per context in traversal order.
    """
    entries: Dict[RuntimeContext, List[ClassifiedNode]]

    def node_ids(self) -> Dict[NodeId, RuntimeContext]:
        """Map every classified node id to its context."""
        return {
            node.node_id: context
            for context, nodes in self.entries.items()
            for node in nodes
        }


def empty_path_map() -> PathMap:
    """Return a path map with an empty list for every context."""
    return {context: [] for context in RuntimeContext}

# -----------------------------------------------------------------------------
# ANALYZER MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalyzerResult:
    """
    Outcome of a single luau-lsp process.

    Attributes:
        exit_code: Process exit code (-1 when the process could not run).
        stdout: Captured standard output.
        stderr: Captured standard error.
    """
    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class AnalysisIssue:
    """
    A single diagnostic reported by the analyzer.

    Attributes:
        file_path: Normalized path of the offending file.
        line: 1-based line number.
        column: 1-based column number.
        message: Diagnostic text, continuation lines joined by newlines.
        severity: One of 'error', 'warning', 'info'.
    """
    file_path: str
    line: int
    column: int
    message: str
    severity: str


@dataclass(frozen=True)
class ContextAnalysisResult:
    """Issues produced by the analyzer run of one runtime context."""
    context: RuntimeContext
    issues: Tuple[AnalysisIssue, ...]
    raw_output: str
    exit_code: int = 0


@dataclass(frozen=True)
class FormattedAnalysisResult:
    """
    Rendered view of a complete analysis run.

    Attributes:
        lines: Terminal summary lines (status line first).
        issues_by_context: Issue count per analyzed context.
        problems_file_content: Plain text dump for external tools.
        total_issues: Sum of all issues.
    """
    lines: List[str]
    issues_by_context: Dict[RuntimeContext, int]
    problems_file_content: str
    total_issues: int
    issues: List[AnalysisIssue] = field(default_factory=list)

    @property
    def formatted_output(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True)
class AnalysisOptions:
    """
    Parameters of a single analysis run.

    Attributes:
        paths: Consolidated globs per runtime context.
        output_file: Problems file destination.
        project_file: Rojo project used to generate the sourcemap.
        ignore_patterns: Extra --ignore globs for the analyzer.
        timeout: Optional per-process timeout in seconds.
        verbose: Emit progress information.
        watch_mode: Render the watch-mode status line.
    """
    paths: PathMap
    output_file: str
    project_file: str
    ignore_patterns: Tuple[str, ...] = ()
    timeout: Optional[float] = None
    verbose: bool = False
    watch_mode: bool = False
