from __future__ import annotations

"""
Configuration Domain Management.

Defines the pendant configuration defaults, the configuration file naming
conventions, the per-format parsers (JSON, JSON with comments, TOML, YAML),
and the JSON Schema published for editor integration.
"""

import json
import logging
import os
import re
import tomllib
from typing import Any, Callable, Dict, Iterator, List

import yaml

from pendant.domain.constants import (
    DEFAULT_GROUPABLE_ROOTS,
    DEFAULT_OUTPUT_FILE_NAME,
    DEFAULT_PROJECT_FILE,
)
from pendant.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAMES: List[str] = [
    ".pendant",
    "pendant",
    ".pendant-config",
    "pendant-config",
    ".pendant-configuration",
    "pendant-configuration",
    ".pendant.config",
    "pendant.config",
    ".pendant.configuration",
    "pendant.configuration",
]

FILES_KEYS: List[str] = ["client", "server", "shared", "testing"]
REQUIRED_FILES_KEYS: List[str] = ["client", "server", "shared"]

_LINE_COMMENT_RX = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA_RX = re.compile(r'("(?:\\.|[^"\\])*")|,(\s*[}\]])')


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default configuration used when no file is found.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        "files": {key: [] for key in FILES_KEYS},
        "ignoreGlobs": [],
        "knownProblematicFiles": [],
        "outputFileName": DEFAULT_OUTPUT_FILE_NAME,
        "projectFile": DEFAULT_PROJECT_FILE,
        "groupableRoots": list(DEFAULT_GROUPABLE_ROOTS),
    }

# -----------------------------------------------------------------------------
# Format Parsers
# -----------------------------------------------------------------------------

def _strip_json_comments(source: str) -> str:
    """Remove // and /* */ comments plus trailing commas outside strings."""
    without_comments = _LINE_COMMENT_RX.sub(lambda m: m.group(1) or "", source)
    return _TRAILING_COMMA_RX.sub(lambda m: m.group(1) or m.group(2), without_comments)


def _parse_json(source: str) -> Any:
    return json.loads(source)


def _parse_jsonc(source: str) -> Any:
    return json.loads(_strip_json_comments(source))


def _parse_toml(source: str) -> Any:
    return tomllib.loads(source)


def _parse_yaml(source: str) -> Any:
    return yaml.safe_load(source)


PARSERS_BY_EXTENSION: Dict[str, Callable[[str], Any]] = {
    "json": _parse_json,
    "jsonc": _parse_jsonc,
    "toml": _parse_toml,
    "yaml": _parse_yaml,
    "yml": _parse_yaml,
}

CONFIG_FILE_EXTENSIONS: List[str] = list(PARSERS_BY_EXTENSION)


def parse_config_text(source: str, extension: str) -> Any:
    """
    Parse configuration text according to its file extension.

    Args:
        source: Raw file content.
        extension: Extension without the leading dot.

    Returns:
        Any: Parsed document (usually a dict).

    Raises:
        ConfigurationError: Unsupported extension or malformed content.
    """
    ext = extension.lower().lstrip(".")
    parser = PARSERS_BY_EXTENSION.get(ext)
    if parser is None:
        raise ConfigurationError(f"Unsupported configuration file extension: {extension}")
    try:
        return parser(source)
    except (ValueError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to parse configuration file: {e}") from e


def read_config_file(path: str) -> Any:
    """Read and parse a configuration file from disk."""
    _, ext = os.path.splitext(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
    except OSError as e:
        raise ConfigurationError(f"Unable to read configuration file '{path}': {e}") from e
    return parse_config_text(source, ext)


def iter_candidate_files(search_dir: str) -> Iterator[str]:
    """
    Yield existing configuration files in discovery order.

    Every configured name is tried with every supported extension; names take
    precedence over extensions.
    """
    for name in CONFIG_FILE_NAMES:
        for ext in CONFIG_FILE_EXTENSIONS:
            candidate = os.path.join(search_dir, f"{name}.{ext}")
            if os.path.isfile(candidate):
                yield candidate

# -----------------------------------------------------------------------------
# JSON Schema
# -----------------------------------------------------------------------------

def build_json_schema() -> Dict[str, Any]:
    """
    Describe the configuration file as a draft-07 JSON Schema.

    Returns:
        Dict[str, Any]: The schema document.
    """
    string_list = {"type": "array", "items": {"type": "string"}}

    def described(description: str) -> Dict[str, Any]:
        return dict(string_list, description=description)

    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "title": "PendantConfiguration",
        "description": "A configuration for the pendant tool.",
        "type": "object",
        "properties": {
            "$schema": {"type": "string", "description": "JSON Schema URI (editor hint)"},
            "files": {
                "type": "object",
                "description": "Services, keys, or paths assigned to each runtime context.",
                "properties": {
                    "client": described("The files to include for the client context."),
                    "server": described("The files to include for the server context."),
                    "shared": described("The files to include for the shared context."),
                    "testing": described("The files to include for the testing context."),
                },
                "required": list(REQUIRED_FILES_KEYS),
                "additionalProperties": False,
            },
            "ignoreGlobs": described("Globs passed to the analyzer as --ignore and dropped from the analyzed paths."),
            "knownProblematicFiles": described("Files that are known to be problems. These will be ignored."),
            "outputFileName": {
                "type": "string",
                "default": DEFAULT_OUTPUT_FILE_NAME,
                "description": "The name of the file to output the analysis results to.",
            },
            "projectFile": {
                "type": "string",
                "pattern": r"^.*\.project\.json$",
                "default": DEFAULT_PROJECT_FILE,
                "description": "The Rojo project file to use.",
            },
            "groupableRoots": dict(
                described("Directories whose sub-directories are merged into one glob."),
                default=list(DEFAULT_GROUPABLE_ROOTS),
            ),
        },
        "required": ["files"],
    }
