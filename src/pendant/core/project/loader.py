from __future__ import annotations

"""
Rojo Project File Loader.

Reads '*.project.json' files into the immutable tree model and locates the
project file to use inside a directory.
"""

import json
import logging
import os
from typing import Optional

from pendant.domain.constants import DEFAULT_PROJECT_FILE, PROJECT_FILE_SUFFIX
from pendant.domain.errors import ProjectFileError
from pendant.domain.tree_models import RojoProject

logger = logging.getLogger(__name__)


def load_project(path: str) -> RojoProject:
    """
    Load and parse a Rojo project file.

    Args:
        path: Path to a '*.project.json' file.

    Returns:
        RojoProject: The parsed project.

    Raises:
        ProjectFileError: Wrong suffix, missing file, malformed or overly
                          nested JSON, or a document without a 'tree'
                          object.
    """
    if not path.endswith(PROJECT_FILE_SUFFIX):
        raise ProjectFileError(f"Project file must end with '{PROJECT_FILE_SUFFIX}': {path}", path=path)
    if not os.path.isfile(path):
        raise ProjectFileError(f"Project file not found: {path}", path=path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ProjectFileError(f"Malformed project file {path}: {e}", path=path) from e
    except RecursionError as e:
        raise ProjectFileError(f"Project file {path} is nested too deeply to parse", path=path) from e
    except OSError as e:
        raise ProjectFileError(f"Unable to read project file {path}: {e}", path=path) from e

    if not isinstance(data, dict) or not isinstance(data.get("tree"), dict):
        raise ProjectFileError(f"Project file {path} has no 'tree' object", path=path)

    try:
        project = RojoProject.from_dict(data, source_path=path)
    except RecursionError as e:
        raise ProjectFileError(f"Project file {path} is nested too deeply to parse", path=path) from e
    logger.debug(f"Loaded project '{project.name}' from {path}")
    return project


def find_project_file(directory: str, preferred: Optional[str] = None) -> Optional[str]:
    """
    Locate the project file inside a directory.

    Lookup order: the preferred name, 'default.project.json', then the first
    '*.project.json' in sorted order.

    Args:
        directory: Directory to search.
        preferred: Optional file name (or path relative to directory).

    Returns:
        Optional[str]: Absolute path of the project file, or None.
    """
    candidates = [c for c in (preferred, DEFAULT_PROJECT_FILE) if c]
    for name in candidates:
        path = os.path.join(directory, name)
        if os.path.isfile(path):
            return os.path.abspath(path)

    if not os.path.isdir(directory):
        return None

    for name in sorted(os.listdir(directory)):
        if name.endswith(PROJECT_FILE_SUFFIX) and os.path.isfile(os.path.join(directory, name)):
            return os.path.abspath(os.path.join(directory, name))
    return None
