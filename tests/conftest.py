from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for Rojo project documents and configuration dictionaries.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def basic_project_dict() -> Dict[str, Any]:
    """
    Return the minimal two-service project used across tests.

    ReplicatedStorage maps 'src/shared' and 'Packages'; ServerScriptService
    maps 'src/server'.
    """
    return {
        "name": "basic",
        "tree": {
            "$className": "DataModel",
            "ReplicatedStorage": {
                "$className": "ReplicatedStorage",
                "Shared": {"$path": "src/shared"},
                "Packages": {"$path": "Packages"},
            },
            "ServerScriptService": {
                "$className": "ServerScriptService",
                "Server": {"$path": "src/server"},
            },
        },
    }


@pytest.fixture
def full_project_dict() -> Dict[str, Any]:
    """Return a project touching every runtime context."""
    return {
        "name": "full",
        "tree": {
            "$className": "DataModel",
            "ReplicatedFirst": {
                "$className": "ReplicatedFirst",
                "Loader": {"$path": "src/loader"},
            },
            "ReplicatedStorage": {
                "$className": "ReplicatedStorage",
                "Shared": {"$path": "src/shared"},
                "Vendor": {
                    "$path": "Vendor",
                },
            },
            "ServerScriptService": {
                "$className": "ServerScriptService",
                "Server": {"$path": "src/server"},
            },
            "StarterPlayer": {
                "$className": "StarterPlayer",
                "StarterPlayerScripts": {
                    "$className": "StarterPlayerScripts",
                    "Client": {"$path": "src/client"},
                },
            },
            "TestService": {
                "$className": "TestService",
                "Tests": {"$path": "tests"},
            },
            "Custom": {
                "$className": "Folder",
                "$path": "src/custom",
            },
        },
    }


@pytest.fixture
def mock_config_dict() -> Dict[str, Any]:
    """Return a valid, complete pendant configuration dictionary."""
    return {
        "files": {
            "client": ["StarterPlayer"],
            "server": ["ServerScriptService"],
            "shared": ["ReplicatedStorage"],
            "testing": [],
        },
        "ignoreGlobs": ["Packages/**"],
        "knownProblematicFiles": [],
        "outputFileName": "problematic",
        "projectFile": "default.project.json",
        "groupableRoots": ["Vendor"],
    }


@pytest.fixture
def project_dir(tmp_path: Path, basic_project_dict: Dict[str, Any]) -> Path:
    """Write the basic project as default.project.json into a temp directory."""
    (tmp_path / "default.project.json").write_text(json.dumps(basic_project_dict), encoding="utf-8")
    for rel in ("src/shared", "src/server", "Packages"):
        (tmp_path / rel).mkdir(parents=True, exist_ok=True)
    return tmp_path
