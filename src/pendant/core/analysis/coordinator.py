from __future__ import annotations

"""
Analysis Coordinator.

Orchestrates a complete analysis run:
1. Ensures globalTypes.d.luau is present.
2. Generates the Rojo sourcemap.
3. Runs luau-lsp once per non-empty runtime context in parallel threads.
4. Parses, formats, and persists the diagnostics.

Watch mode re-runs the analysis after file changes settle, using a watchdog
observer with a debounce thread.
"""

import dataclasses
import logging
import os
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from pendant.core.analysis.formatter import format_analysis_results, format_duration, with_duration
from pendant.core.analysis.output_parser import parse_luau_lsp_output
from pendant.core.analysis.runner import LuauLspAnalysisOptions, LuauLspRunner, generate_sourcemap
from pendant.core.components.filters import IgnoreFilter
from pendant.domain.analysis_models import (
    AnalysisOptions,
    ContextAnalysisResult,
    FormattedAnalysisResult,
)
from pendant.domain.constants import GLOBAL_TYPES_FILE, RuntimeContext
from pendant.domain.errors import DownloadError
from pendant.infra.fs import write_text_if_changed
from pendant.infra.network import download_global_types

logger = logging.getLogger(__name__)

DEBOUNCE_DELAY = 0.5
_DOT_FILE_RX = re.compile(r"(^|[/\\])\.")


# -----------------------------------------------------------------------------
# WATCH MODE EVENT HANDLING
# -----------------------------------------------------------------------------

class DebouncedChangeHandler(FileSystemEventHandler):
    """
    Collapse bursts of filesystem events into a single callback.

    The callback fires once the tree has been quiet for DEBOUNCE_DELAY
    seconds. Dot files and dot directories are ignored.
    """

    def __init__(self, on_change: Callable[[], None], delay: float = DEBOUNCE_DELAY):
        super().__init__()
        self._on_change = on_change
        self._delay = delay
        self._last_event: Optional[float] = None
        self._lock = threading.Lock()
        self._running = True
        self._debounce_thread = threading.Thread(
            target=self._debounce_loop, name="PendantDebounce", daemon=True
        )
        self._debounce_thread.start()

    def stop(self) -> None:
        self._running = False
        self._debounce_thread.join(timeout=2)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in ("created", "modified", "deleted", "moved"):
            return
        if event.is_directory and event.event_type == "modified":
            return
        src_path = event.src_path if isinstance(event.src_path, str) else event.src_path.decode()
        if _DOT_FILE_RX.search(src_path):
            return
        with self._lock:
            self._last_event = time.monotonic()

    def _debounce_loop(self) -> None:
        while self._running:
            fire = False
            with self._lock:
                if self._last_event is not None and time.monotonic() - self._last_event >= self._delay:
                    self._last_event = None
                    fire = True
            if fire:
                self._on_change()
            time.sleep(0.1)


# -----------------------------------------------------------------------------
# COORDINATOR
# -----------------------------------------------------------------------------

class AnalysisCoordinator:
    """
    Runs analyzer passes for every runtime context.

    Args:
        cwd: Working directory for rojo and luau-lsp.
        source_directory: Directory watched in watch mode (default '<cwd>/src').
        runner: Analyzer runner (defaults to a LuauLspRunner in cwd).
    """

    def __init__(
            self,
            cwd: Optional[str] = None,
            source_directory: Optional[str] = None,
            runner: Optional[LuauLspRunner] = None,
    ):
        self.cwd = cwd or os.getcwd()
        self.source_directory = source_directory or os.path.join(self.cwd, "src")
        self.runner = runner or LuauLspRunner(self.cwd)
        self._last_problems_content: Optional[str] = None
        self._run_lock = threading.Lock()
        self._stop_event = threading.Event()

    # -------------------------------------------------------------------------
    # PREREQUISITES
    # -------------------------------------------------------------------------

    def ensure_prerequisites(self, grab: bool = False) -> None:
        """
        Download globalTypes.d.luau when it is missing or when grab is set.

        Raises:
            DownloadError: No download method succeeded.
        """
        global_types_path = os.path.join(self.cwd, GLOBAL_TYPES_FILE)
        if not grab and os.path.isfile(global_types_path):
            logger.debug(f"{GLOBAL_TYPES_FILE} already present")
            return

        try:
            download_global_types(global_types_path)
        except DownloadError as e:
            logger.error(f"Failed to download {GLOBAL_TYPES_FILE}: {e}")
            raise

    # -------------------------------------------------------------------------
    # SINGLE RUN
    # -------------------------------------------------------------------------

    def run_analysis(self, options: AnalysisOptions) -> FormattedAnalysisResult:
        """
        Execute one analysis pass.

        Args:
            options: Paths per context and output settings.

        Returns:
            FormattedAnalysisResult: The rendered results (status line
                                     includes the duration).

        Raises:
            AnalyzerError: Sourcemap generation failed.
        """
        with self._run_lock:
            start = time.perf_counter()

            if options.verbose:
                logger.info("Generating sourcemap...")
            generate_sourcemap(options.project_file, cwd=self.cwd)

            ignore_filter = IgnoreFilter.build(options.ignore_patterns) if options.ignore_patterns else None
            contexts = [(ctx, paths) for ctx, paths in options.paths.items() if paths]

            results: Dict[RuntimeContext, ContextAnalysisResult] = {}
            if contexts:
                with ThreadPoolExecutor(max_workers=len(contexts), thread_name_prefix="PendantAnalyzer") as executor:
                    futures = {
                        ctx: executor.submit(self._analyze_context, ctx, paths, options, ignore_filter)
                        for ctx, paths in contexts
                    }
                    for ctx, future in futures.items():
                        results[ctx] = future.result()

            ordered = [results[ctx] for ctx in RuntimeContext if ctx in results]
            formatted = format_analysis_results(ordered, watch_mode=options.watch_mode)
            duration_ms = (time.perf_counter() - start) * 1000

            if formatted.problems_file_content != self._last_problems_content:
                output_path = os.path.join(self.cwd, options.output_file)
                write_text_if_changed(output_path, formatted.problems_file_content)
                self._last_problems_content = formatted.problems_file_content

            formatted = dataclasses.replace(
                formatted, lines=with_duration(formatted.lines, duration_ms, options.watch_mode)
            )
            logger.debug(f"Analysis finished in {format_duration(duration_ms)}")
            return formatted

    def _analyze_context(
            self,
            context: RuntimeContext,
            paths: List[str],
            options: AnalysisOptions,
            ignore_filter: Optional[IgnoreFilter],
    ) -> ContextAnalysisResult:
        if options.verbose:
            logger.info(f"Analyzing {context.value} context: {len(paths)} path(s)")

        result = self.runner.execute_analysis(LuauLspAnalysisOptions(
            paths=paths,
            ignore_patterns=options.ignore_patterns,
            timeout=options.timeout,
        ))

        output = result.stdout or result.stderr
        if not result.success and options.verbose:
            logger.warning(f"Analysis failed for {context.value} context (exit code: {result.exit_code})")

        return ContextAnalysisResult(
            context=context,
            issues=tuple(parse_luau_lsp_output(output, ignore_filter)),
            raw_output=output,
            exit_code=result.exit_code,
        )

    # -------------------------------------------------------------------------
    # WATCH MODE
    # -------------------------------------------------------------------------

    def start_watch_mode(
            self,
            options: AnalysisOptions,
            on_result: Callable[[FormattedAnalysisResult], None] = lambda r: print(r.formatted_output),
            refresh: Optional[Callable[[], AnalysisOptions]] = None,
    ) -> None:
        """
        Analyze once, then re-analyze whenever the source directory settles.

        Blocks until stop() is called or Ctrl+C is pressed.

        Args:
            options: Analysis options of the initial run.
            on_result: Receives every formatted result.
            refresh: Optional callback rebuilding the options (path map)
                     before each re-run.
        """
        options = dataclasses.replace(options, watch_mode=True)

        def run_once() -> None:
            nonlocal options
            try:
                if refresh is not None:
                    # A failed rebuild keeps the last good options
                    options = dataclasses.replace(refresh(), watch_mode=True)
                on_result(self.run_analysis(options))
            except Exception as e:
                logger.error(f"Watch mode analysis failed: {e}")

        run_once()

        handler = DebouncedChangeHandler(run_once)
        observer = Observer()
        observer.schedule(handler, self.source_directory, recursive=True)
        observer.start()
        logger.info(f"Watching for changes in {self.source_directory}")

        try:
            while not self._stop_event.wait(0.5):
                pass
        except KeyboardInterrupt:
            logger.info("Shutting down watcher...")
        finally:
            handler.stop()
            observer.stop()
            observer.join(timeout=5)
            logger.info("Watcher stopped.")

    def stop(self) -> None:
        """Request watch mode to exit."""
        self._stop_event.set()
