from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging initialization, configuration
resolution (discovered file, explicit file, or defaults, plus command line
overrides), routing to the subcommand handlers, and result rendering.
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any, Callable, Dict, Iterable, List, Optional

from pendant.core.analysis.coordinator import AnalysisCoordinator
from pendant.core.components.filters import IgnoreFilter, ignore_file_to_globs, read_ignore_file
from pendant.core.pipeline.engine import build_path_map
from pendant.core.pipeline.validator import find_configuration, load_configuration, validate_config
from pendant.core.project.loader import load_project
from pendant.core.services.initializer import add_to_gitignore, generate_schema, smart_initialize
from pendant.domain.analysis_models import AnalysisOptions, FormattedAnalysisResult, PathMap
from pendant.domain.config import get_default_config
from pendant.domain.errors import (
    AnalyzerError,
    ConfigurationError,
    ConfigurationNotFoundError,
    DownloadError,
    ProjectFileError,
)
from pendant.infra.logging import (
    LoggingConfig,
    clean_log_files,
    configure_logging,
    get_default_log_path,
    shutdown_logging,
)
from pendant.interface.cli import args as cli_args

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 ok, 1 failure, 2 input error, 130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (stderr plus persistent file)
    logging_conf = LoggingConfig(
        level=cli_args.log_level(args),
        console=True,
        log_file=get_default_log_path(),
    )
    configure_logging(logging_conf)
    logger.debug(f"CLI execution initiated: {args.command}")

    handlers: Dict[str, Callable[[argparse.Namespace], int]] = {
        "analyze": _run_analyze,
        "init": _run_init,
        "generate-schema": _run_generate_schema,
        "clean-logs": _run_clean_logs,
    }

    try:
        return handlers[args.command](args)
    except KeyboardInterrupt:
        logger.warning("Execution interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

# -----------------------------------------------------------------------------
# ANALYZE
# -----------------------------------------------------------------------------

def _run_analyze(args: argparse.Namespace) -> int:
    cwd = os.getcwd()

    # 1. Configuration resolution
    try:
        base_conf = _resolve_configuration(args.config_file, cwd)
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    raw_conf = dict(base_conf)
    raw_conf.update(cli_args.args_to_overrides(args))
    config, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.verbose:
        logger.info(f"Output file: {config['outputFileName']}")
        logger.info(f"Project file: {config['projectFile']}")

    # 2. Project loading and path map
    gitignore_lines = [] if args.no_gitignore else read_ignore_file(os.path.join(cwd, ".gitignore"))
    project_path = os.path.join(cwd, config["projectFile"])

    def build_options() -> AnalysisOptions:
        project = load_project(project_path)
        ignore_globs = _ignore_globs(config, project.glob_ignore_paths)
        path_filter = IgnoreFilter.build(gitignore_lines + ignore_globs, root=cwd)
        paths = build_path_map(project.tree, config, ignore_filter=path_filter)
        if args.verbose:
            logger.info(f"Project name: {project.name}")
            for context, globs in paths.items():
                if globs:
                    logger.info(f"{context.value} paths: {globs}")
        return AnalysisOptions(
            paths=paths,
            output_file=config["outputFileName"],
            project_file=config["projectFile"],
            ignore_patterns=tuple(_dedupe(ignore_globs + ignore_file_to_globs(gitignore_lines))),
            timeout=args.timeout,
            verbose=args.verbose,
            watch_mode=args.watch,
        )

    try:
        options = build_options()
    except ProjectFileError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    # 3. Analysis execution
    coordinator = AnalysisCoordinator(cwd=cwd)
    try:
        coordinator.ensure_prerequisites(grab=args.grab)
        if args.watch:
            coordinator.start_watch_mode(options, refresh=build_options)
            return EXIT_OK
        result = coordinator.run_analysis(options)
    except (AnalyzerError, DownloadError) as e:
        logger.error(f"Analysis failed: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

    # 4. Output rendering
    if args.json_output:
        print(json.dumps(_json_report(options.paths, result), ensure_ascii=False, indent=2))
    else:
        print(result.formatted_output)

    if args.fail_on_issues and result.total_issues > 0:
        return EXIT_FAILURE
    return EXIT_OK


def _resolve_configuration(config_file: Optional[str], cwd: str) -> Dict[str, Any]:
    """
    Load the explicit configuration file, else discover one, else defaults.

    Raises:
        ConfigurationError: The explicit file exists but is invalid.
    """
    if config_file:
        if os.path.isfile(config_file):
            return load_configuration(config_file)
        logger.warning(f"Configuration file '{config_file}' not found. Searching defaults.")

    try:
        config, path = find_configuration(cwd)
    except ConfigurationNotFoundError as e:
        logger.warning(f"{e}. Falling back to service metadata only.")
        return get_default_config()

    logger.debug(f"Using configuration {path}")
    return config


def _ignore_globs(config: Dict[str, Any], project_globs: Iterable[str]) -> List[str]:
    """Configured ignore globs, known problematic files, then the project's globIgnorePaths."""
    return _dedupe(list(config["ignoreGlobs"]) + list(config["knownProblematicFiles"]) + list(project_globs))


def _dedupe(items: Iterable[str]) -> List[str]:
    out: List[str] = []
    for item in items:
        if item not in out:
            out.append(item)
    return out


def _json_report(paths: PathMap, result: FormattedAnalysisResult) -> Dict[str, Any]:
    return {
        "paths": {context.value: globs for context, globs in paths.items()},
        "issues_by_context": {context.value: n for context, n in result.issues_by_context.items()},
        "total_issues": result.total_issues,
        "issues": [asdict(issue) for issue in result.issues],
    }

# -----------------------------------------------------------------------------
# INIT / SCHEMA / LOGS
# -----------------------------------------------------------------------------

def _run_init(args: argparse.Namespace) -> int:
    cwd = os.getcwd()
    try:
        generate_schema(args.schema_path, cwd)
        add_to_gitignore(cwd, args.output_file_name)
        config_path = smart_initialize(
            os.path.join(cwd, args.codebase_root),
            cwd,
            output_file_name=args.output_file_name,
            project_file=args.rojo_project,
            schema_path=args.schema_path,
        )
    except ProjectFileError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except OSError as e:
        logger.error(f"Initialization failed: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

    print(f"Generated {config_path}")
    return EXIT_OK


def _run_generate_schema(args: argparse.Namespace) -> int:
    try:
        path = generate_schema(args.schema_path, os.getcwd())
    except OSError as e:
        logger.error(f"Schema generation failed: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE
    print(f"Schema written to {path}")
    return EXIT_OK


def _run_clean_logs(args: argparse.Namespace) -> int:
    # The file handler holds the current log open
    shutdown_logging()
    removed = clean_log_files()
    if args.verbose:
        for path in removed:
            print(f"  - {path}")
    print(f"Removed {len(removed)} log file(s).")
    return EXIT_OK

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
