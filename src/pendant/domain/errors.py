from __future__ import annotations

"""
Domain Exception Hierarchy.

Typed errors surfaced by the loaders and external collaborators. The
classification core never raises these; they describe caller input problems
(project and configuration files) or failures of external tools.
"""

from typing import Optional


class PendantError(Exception):
    """Base class for every error raised intentionally by pendant."""


class ProjectFileError(PendantError):
    """
    The Rojo project description could not be used.

    Attributes:
        path: Offending project file path.
    """

    def __init__(self, message: str, *, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ConfigurationError(PendantError):
    """A configuration file exists but is not a valid pendant configuration."""


class ConfigurationNotFoundError(ConfigurationError):
    """No configuration file was discovered in the search directory."""


class AnalyzerError(PendantError):
    """An external tool (rojo, luau-lsp) failed in a way that aborts the run."""


class DownloadError(PendantError):
    """Remote resources (globalTypes.d.luau) could not be fetched."""
