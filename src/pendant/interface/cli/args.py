from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface: subcommands, help messages, argument
types, and defaults. Provides the translation from raw argparse namespaces
into configuration overrides.
"""

import argparse
from typing import Any, Dict

from pendant.domain.constants import (
    DEFAULT_OUTPUT_FILE_NAME,
    DEFAULT_PROJECT_FILE,
    DEFAULT_SCHEMA_PATH,
    PROJECT_FILE_SUFFIX,
)

SCHEMA_FILE_SUFFIX = ".schema.json"

# -----------------------------------------------------------------------------
# ARGUMENT TYPES
# -----------------------------------------------------------------------------

def positive_float(value: str) -> float:
    """Parse a strictly positive number of seconds."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: '{value}'") from None
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")
    return number


def project_file(value: str) -> str:
    if not value.endswith(PROJECT_FILE_SUFFIX):
        raise argparse.ArgumentTypeError(f"must end with '{PROJECT_FILE_SUFFIX}'")
    return value


def schema_file(value: str) -> str:
    if not value.endswith(SCHEMA_FILE_SUFFIX):
        raise argparse.ArgumentTypeError(f"must end with '{SCHEMA_FILE_SUFFIX}'")
    return value

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def _add_verbose(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-V", "--verbose",
        action="store_true",
        help="Outputs more information.",
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the pendant CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="pendant",
        description="Runtime-context aware luau-lsp analysis for Rojo projects.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    sub = p.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    # --- analyze ---
    analyze = sub.add_parser(
        "analyze",
        help="Analyzes the project using luau-lsp with runtime context awareness.",
    )
    analyze.add_argument(
        "-c", "--config",
        dest="config_file",
        default=None,
        help="The configuration file to use for the analysis.",
    )
    analyze.add_argument(
        "-g", "--grab",
        action="store_true",
        help="Grabs the latest globalTypes.d.luau file.",
    )
    analyze.add_argument(
        "--output-file",
        dest="output_file",
        default=None,
        help="The output file to use. Usually read from the pendant configuration.",
    )
    analyze.add_argument(
        "--rojo-project",
        dest="rojo_project",
        type=project_file,
        default=None,
        help="The Rojo project file to use. Usually read from the pendant configuration.",
    )
    analyze.add_argument(
        "-t", "--timeout",
        type=positive_float,
        default=None,
        help="Timeout in seconds for each luau-lsp process.",
    )
    analyze.add_argument(
        "-w", "--watch",
        action="store_true",
        help="Watches for file changes.",
    )
    analyze.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Do not apply the local .gitignore rules to analyzed paths and analyzer ignores.",
    )
    analyze.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the resolved path map and issues as JSON.",
    )
    analyze.add_argument(
        "--fail-on-issues",
        action="store_true",
        help="Exit with code 1 when issues are found.",
    )
    _add_verbose(analyze)

    # --- init ---
    init = sub.add_parser(
        "init",
        help="Initializes the pendant environment by generating the necessary files.",
    )
    init.add_argument(
        "-c", "--codebase-root",
        dest="codebase_root",
        required=True,
        help="The root directory of the codebase to initialize (for example 'src').",
    )
    init.add_argument(
        "-o", "--output-file-name",
        dest="output_file_name",
        default=DEFAULT_OUTPUT_FILE_NAME,
        help="The name of the output file.",
    )
    init.add_argument(
        "-p", "--schema-path",
        dest="schema_path",
        type=schema_file,
        default=DEFAULT_SCHEMA_PATH,
        help="The path for the schema file.",
    )
    init.add_argument(
        "-R", "--rojo-project",
        dest="rojo_project",
        type=project_file,
        default=DEFAULT_PROJECT_FILE,
        help="The Rojo project file to use for initialization.",
    )
    _add_verbose(init)

    # --- generate-schema ---
    schema = sub.add_parser(
        "generate-schema",
        help="Generates the JSON Schema of the pendant configuration.",
    )
    schema.add_argument(
        "-p", "--path",
        dest="schema_path",
        type=schema_file,
        default=DEFAULT_SCHEMA_PATH,
        help="The path for the schema file.",
    )
    _add_verbose(schema)

    # --- clean-logs ---
    clean = sub.add_parser(
        "clean-logs",
        help="Deletes the persisted pendant log files.",
    )
    _add_verbose(clean)

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the analyze namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    if getattr(args, "output_file", None):
        overrides["outputFileName"] = args.output_file
    if getattr(args, "rojo_project", None):
        overrides["projectFile"] = args.rojo_project

    return overrides


def log_level(args: argparse.Namespace) -> str:
    """DEBUG for --debug or --verbose, INFO otherwise."""
    if args.debug or getattr(args, "verbose", False):
        return "DEBUG"
    return "INFO"
