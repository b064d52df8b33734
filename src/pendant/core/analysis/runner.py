from __future__ import annotations

"""
luau-lsp Process Runner.

Builds the 'luau-lsp analyze' command line for one runtime context and runs
it as a subprocess. Also wraps 'rojo sourcemap', which the analyzer needs to
resolve instance paths.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from pendant.domain.analysis_models import AnalyzerResult
from pendant.domain.constants import (
    DEFAULT_ANALYZER_IGNORES,
    DEFAULT_PROJECT_FILE,
    GLOB_SUFFIX,
    GLOBAL_TYPES_FILE,
    SOURCEMAP_FILE,
)
from pendant.domain.errors import AnalyzerError

logger = logging.getLogger(__name__)

LUAU_LSP_EXECUTABLE = "luau-lsp"
ROJO_EXECUTABLE = "rojo"


@dataclass(frozen=True)
class LuauLspAnalysisOptions:
    """
    Arguments of a single analyzer invocation.

    Attributes:
        paths: Globs (or directories) to analyze.
        ignore_patterns: Extra '--ignore' globs appended after the defaults.
        definitions_path: Definitions file (globalTypes.d.luau).
        base_config_path: Base .luaurc file.
        sourcemap_path: Rojo sourcemap.
        settings_path: Editor settings with luau-lsp options.
        timeout: Optional timeout in seconds.
    """
    paths: Sequence[str]
    ignore_patterns: Sequence[str] = ()
    definitions_path: str = GLOBAL_TYPES_FILE
    base_config_path: str = ".luaurc"
    sourcemap_path: str = SOURCEMAP_FILE
    settings_path: str = ".vscode/settings.json"
    timeout: Optional[float] = None


class LuauLspRunner:
    """Runs 'luau-lsp analyze' from a fixed working directory."""

    def __init__(self, cwd: Optional[str] = None, executable: str = LUAU_LSP_EXECUTABLE):
        self.cwd = cwd or os.getcwd()
        self.executable = executable

    def build_command(self, options: LuauLspAnalysisOptions) -> List[str]:
        """
        Assemble the analyzer argument vector.

        Positional paths are the globs without their '/**' suffix since the
        analyzer expands directories itself.
        """
        command = [
            self.executable,
            "analyze",
            f"--definitions={options.definitions_path}",
            f"--base-luaurc={options.base_config_path}",
            f"--sourcemap={options.sourcemap_path}",
            f"--settings={options.settings_path}",
            "--no-strict-dm-types",
        ]

        for pattern in [*DEFAULT_ANALYZER_IGNORES, *options.ignore_patterns]:
            command.append(f"--ignore={pattern}")

        for path in options.paths:
            command.append(_glob_to_target(path))

        return command

    def execute_analysis(self, options: LuauLspAnalysisOptions) -> AnalyzerResult:
        """
        Run the analyzer and capture its output.

        A missing executable or an expired timeout is reported as exit code
        -1 with the error text in stderr rather than raised.

        Args:
            options: Invocation arguments.

        Returns:
            AnalyzerResult: Exit code and captured streams.
        """
        command = self.build_command(options)
        logger.debug(f"Executing: {' '.join(command)}")

        try:
            completed = subprocess.run(
                command,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=options.timeout,
            )
        except FileNotFoundError as e:
            logger.error(f"Failed to execute {self.executable}: {e}")
            return AnalyzerResult(exit_code=-1, stdout="", stderr=str(e))
        except subprocess.TimeoutExpired as e:
            logger.error(f"{self.executable} timed out after {options.timeout}s")
            return AnalyzerResult(exit_code=-1, stdout=_as_text(e.stdout), stderr=f"Timed out: {e}")

        return AnalyzerResult(
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


def generate_sourcemap(
        project_file: str = DEFAULT_PROJECT_FILE,
        output_path: str = SOURCEMAP_FILE,
        cwd: Optional[str] = None,
) -> None:
    """
    Generate the Rojo sourcemap consumed by the analyzer.

    Raises:
        AnalyzerError: rojo is missing or exited with a non-zero code.
    """
    command = [ROJO_EXECUTABLE, "sourcemap", "--output", output_path, project_file]
    logger.debug(f"Generating sourcemap from {project_file}...")
    try:
        completed = subprocess.run(command, cwd=cwd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise AnalyzerError(f"Rojo is not installed or not on PATH: {e}") from e

    if completed.returncode != 0:
        raise AnalyzerError(f"Rojo sourcemap generation failed: {completed.stderr.strip()}")
    logger.debug("Sourcemap generated successfully")


def _glob_to_target(path: str) -> str:
    if path.endswith(GLOB_SUFFIX):
        return path[: -len(GLOB_SUFFIX)] or "."
    if path == "**":
        return "."
    return path


def _as_text(value: object) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value if isinstance(value, str) else ""
