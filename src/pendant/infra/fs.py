from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path resolution and small write helpers shared by
the CLI commands. Acts as an abstraction over the 'os' module to keep
behavior uniform across Windows and Unix-like systems.
"""

import os

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "Pendant"
UNIX_APP_DIR_NAME = ".pendant"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/Pendant
    - Linux/Mac: ~/.pendant

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    # Posix fallback (Linux/Mac)
    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    # Idempotent directory creation
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)

# -----------------------------------------------------------------------------
# FILESYSTEM WRITE API
# -----------------------------------------------------------------------------

def write_text_if_changed(path: str, content: str) -> bool:
    """
    Write a text file only when its content differs from what is on disk.

    Args:
        path: Destination file.
        content: New file content.

    Returns:
        bool: True if the file was written.
    """
    if os.path.isfile(path):
        with open(path, "r", encoding="utf-8") as f:
            if f.read() == content:
                return False

    parent = os.path.dirname(os.path.abspath(path))
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return True
