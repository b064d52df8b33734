from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper between configuration files and the classification
pipeline. Handles type coercion, default value injection, and discovery of
the first usable configuration file in a directory.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from pendant.domain.config import (
    FILES_KEYS,
    REQUIRED_FILES_KEYS,
    get_default_config,
    iter_candidate_files,
    read_config_file,
)
from pendant.domain.constants import PROJECT_FILE_SUFFIX
from pendant.domain.errors import ConfigurationError, ConfigurationNotFoundError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a raw configuration document.

    Converts untrusted input into strictly typed parameters and fills missing
    keys with domain defaults. The '$schema' editor hint is dropped.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises ConfigurationError instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and a
                                          list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k != "$schema"})

    unknown = sorted(set(merged) - set(defaults))
    for key in unknown:
        warnings.append(f"Unknown configuration key '{key}' ignored.")
        merged.pop(key)

    # 2. Context Files Table
    merged["files"] = _as_files_table(merged.get("files"), warnings, strict)

    # 3. Scalar & List Fields
    for field in ("outputFileName", "projectFile"):
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in ("ignoreGlobs", "knownProblematicFiles", "groupableRoots"):
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    # 4. Domain-Specific Normalization
    if not merged["projectFile"].endswith(PROJECT_FILE_SUFFIX):
        msg = f"Invalid field 'projectFile': '{merged['projectFile']}' must end with '{PROJECT_FILE_SUFFIX}'."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Using fallback.")
        merged["projectFile"] = defaults["projectFile"]

    merged["groupableRoots"] = [r.strip("/") for r in merged["groupableRoots"] if r.strip("/")]

    return merged, warnings


def load_configuration(path: str, *, strict: bool = True) -> Dict[str, Any]:
    """
    Read, parse, and validate one configuration file.

    Args:
        path: Configuration file path.
        strict: Reject type mismatches instead of coercing them.

    Returns:
        Dict[str, Any]: Normalized configuration.

    Raises:
        ConfigurationError: Unreadable, malformed, or invalid file.
    """
    raw = read_config_file(path)
    config, warnings = validate_config(raw, strict=strict)
    for w in warnings:
        logger.warning(f"{os.path.basename(path)}: {w}")
    return config


def find_configuration(search_dir: Optional[str] = None) -> Tuple[Dict[str, Any], str]:
    """
    Discover the first configuration file that parses and validates.

    Args:
        search_dir: Directory to search (defaults to the working directory).

    Returns:
        Tuple[Dict[str, Any], str]: Normalized configuration and its path.

    Raises:
        ConfigurationNotFoundError: No usable configuration file exists.
    """
    directory = search_dir or os.getcwd()
    for candidate in iter_candidate_files(directory):
        try:
            config = load_configuration(candidate)
        except ConfigurationError as e:
            logger.debug(f"Skipping configuration candidate {candidate}: {e}")
            continue
        logger.debug(f"Configuration loaded from {candidate}")
        return config, candidate

    raise ConfigurationNotFoundError(f"No pendant configuration file found in {directory}")


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_files_table(value: Any, warnings: List[str], strict: bool) -> Dict[str, List[str]]:
    """Normalize the context -> entries table."""
    if value is None:
        value = {}
    if not isinstance(value, dict):
        msg = f"Invalid field 'files': expected object, received {type(value).__name__}."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Using fallback.")
        value = {}

    if strict:
        missing = [k for k in REQUIRED_FILES_KEYS if k not in value]
        if missing:
            raise ConfigurationError(f"Missing required 'files' keys: {', '.join(missing)}.")

    table: Dict[str, List[str]] = {}
    for key in FILES_KEYS:
        table[key] = _as_list_str(value.get(key), [], f"files.{key}", warnings, strict)

    for key in value:
        if key not in FILES_KEYS:
            msg = f"Unknown context key 'files.{key}'."
            if strict:
                raise ConfigurationError(msg)
            warnings.append(f"{msg} Entry discarded.")
    return table


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    # CSV strings come from command line overrides
    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        if items:
            warnings.append(f"Field '{field}' converted from CSV string to list.")
            return items
        return list(fallback)

    if isinstance(value, list):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise ConfigurationError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)
