from __future__ import annotations

"""
Project Initialization Service.

Bootstraps a pendant setup from an existing Rojo project: writes the
configuration JSON Schema, registers the problems file in .gitignore, and
derives a pendant.json from the classified project tree.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from pendant.core.components.filters import IgnoreFilter, read_ignore_file
from pendant.core.pipeline.engine import build_path_map
from pendant.core.project.consolidator import consolidate
from pendant.core.project.loader import find_project_file, load_project
from pendant.domain.config import build_json_schema
from pendant.domain.constants import (
    DEFAULT_IGNORE_GLOBS,
    DEFAULT_OUTPUT_FILE_NAME,
    DEFAULT_PROJECT_FILE,
    DEFAULT_SCHEMA_PATH,
    RUNTIME_CONTEXT_META,
    RuntimeContext,
)
from pendant.domain.errors import ProjectFileError

logger = logging.getLogger(__name__)

CONFIGURATION_FILE_NAME = "pendant.json"


# -----------------------------------------------------------------------------
# SCHEMA & GITIGNORE
# -----------------------------------------------------------------------------

def generate_schema(path: str = DEFAULT_SCHEMA_PATH, directory: Optional[str] = None) -> str:
    """
    Write the configuration JSON Schema.

    Args:
        path: Schema file path, relative to directory unless absolute.
        directory: Base directory (defaults to the working directory).

    Returns:
        str: Absolute path of the written schema.
    """
    target = os.path.abspath(os.path.join(directory or os.getcwd(), path))
    os.makedirs(os.path.dirname(target), exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        json.dump(build_json_schema(), f, indent="\t")
        f.write("\n")
    logger.info(f"Schema written to {target}")
    return target


def add_to_gitignore(directory: str, entry: str) -> bool:
    """
    Append an entry to '<directory>/.gitignore' unless already listed.

    Returns:
        bool: True if the file was modified.
    """
    gitignore_path = os.path.join(directory, ".gitignore")
    lines = read_ignore_file(gitignore_path)
    if any(line.strip() == entry for line in lines):
        logger.debug(f"'{entry}' already in {gitignore_path}")
        return False

    needs_newline = False
    if os.path.isfile(gitignore_path):
        with open(gitignore_path, "r", encoding="utf-8") as f:
            content = f.read()
        needs_newline = bool(content) and not content.endswith("\n")

    with open(gitignore_path, "a", encoding="utf-8") as f:
        if needs_newline:
            f.write("\n")
        f.write(f"{entry}\n")
    logger.info(f"Added '{entry}' to {gitignore_path}")
    return True


# -----------------------------------------------------------------------------
# SMART INITIALIZATION
# -----------------------------------------------------------------------------

def smart_initialize(
        codebase_root: str,
        directory: Optional[str] = None,
        output_file_name: str = DEFAULT_OUTPUT_FILE_NAME,
        project_file: str = DEFAULT_PROJECT_FILE,
        schema_path: str = DEFAULT_SCHEMA_PATH,
) -> str:
    """
    Generate pendant.json from the Rojo project found in directory.

    Args:
        codebase_root: Source root whose .gitignore filters the globs, along
                       with the project's globIgnorePaths.
        directory: Directory holding the project file (default: cwd).
        output_file_name: Problems file name stored in the configuration.
        project_file: Preferred project file name.
        schema_path: Schema location referenced by '$schema'.

    Returns:
        str: Path of the written configuration file.

    Raises:
        ProjectFileError: No usable project file was found.
    """
    base_dir = directory or os.getcwd()
    project_path = find_project_file(base_dir, project_file)
    if project_path is None:
        raise ProjectFileError(f"No Rojo project files found in directory: {base_dir}")

    project = load_project(project_path)
    logger.info(f"Loaded Rojo project '{project.name}' from {project_path}")

    ignore_lines = read_ignore_file(os.path.join(codebase_root, ".gitignore"))
    ignore_lines.extend(project.glob_ignore_paths)
    ignore_filter = IgnoreFilter.build(ignore_lines) if ignore_lines else None

    path_map = build_path_map(project.tree, None, ignore_filter=ignore_filter)
    files = _files_table(path_map)

    for key, globs in files.items():
        logger.debug(f"{key}: {len(globs)} path(s)")

    configuration: Dict[str, Any] = {
        "$schema": _schema_reference(schema_path),
        "files": files,
        "ignoreGlobs": list(DEFAULT_IGNORE_GLOBS),
        "outputFileName": output_file_name,
        "projectFile": os.path.basename(project_path),
    }

    config_path = os.path.join(base_dir, CONFIGURATION_FILE_NAME)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(configuration, f, indent="\t")
        f.write("\n")

    logger.info(f"Generated {CONFIGURATION_FILE_NAME} for {project.name}")
    return config_path


def _schema_reference(schema_path: str) -> str:
    if os.path.isabs(schema_path):
        return schema_path
    p = schema_path.replace("\\", "/")
    return p if p.startswith("./") else f"./{p}"


def _files_table(path_map: Dict[RuntimeContext, List[str]]) -> Dict[str, List[str]]:
    """Group globs by configuration key; Unknown globs are written as shared."""
    files: Dict[str, List[str]] = {"client": [], "server": [], "shared": []}
    for context, globs in path_map.items():
        key = RUNTIME_CONTEXT_META[context].key_name
        files.setdefault(key, []).extend(globs)

    for key in list(files):
        files[key] = consolidate(files[key])
    if not files.get("testing"):
        files.pop("testing", None)
    return files
