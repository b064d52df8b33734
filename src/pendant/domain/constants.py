from __future__ import annotations

"""
Domain Constants and Static Lookup Tables.

Provides the runtime context enumeration, the Roblox service registry that
maps well-known service classes to their default runtime context, and the
per-context presentation metadata. All tables are read-only views built once
at import time.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple

# -----------------------------------------------------------------------------
# RUNTIME CONTEXTS
# -----------------------------------------------------------------------------

class RuntimeContext(str, Enum):
    """Execution domain a Luau source file belongs to."""

    CLIENT = "Client"
    SERVER = "Server"
    SHARED = "Shared"
    TESTING = "Testing"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class RuntimeContextMetadata:
    """
    Presentation and configuration metadata for a runtime context.

    Attributes:
        name: Human readable context name.
        emoji: Marker used in terminal summaries.
        key_name: Field of the configuration 'files' table for this context.
    """
    name: str
    emoji: str
    key_name: str


RUNTIME_CONTEXT_META: Mapping[RuntimeContext, RuntimeContextMetadata] = MappingProxyType({
    RuntimeContext.CLIENT: RuntimeContextMetadata("Client", "🟢", "client"),
    RuntimeContext.SERVER: RuntimeContextMetadata("Server", "🔵", "server"),
    RuntimeContext.SHARED: RuntimeContextMetadata("Shared", "🟡", "shared"),
    RuntimeContext.TESTING: RuntimeContextMetadata("Testing", "🟣", "testing"),
    # Unknown paths are reported under the shared key
    RuntimeContext.UNKNOWN: RuntimeContextMetadata("Unknown", "⚪", "shared"),
})

# Reverse lookup for configuration keys. Unknown is deliberately absent.
CONTEXT_BY_CONFIG_KEY: Mapping[str, RuntimeContext] = MappingProxyType({
    "client": RuntimeContext.CLIENT,
    "server": RuntimeContext.SERVER,
    "shared": RuntimeContext.SHARED,
    "testing": RuntimeContext.TESTING,
})

# -----------------------------------------------------------------------------
# ROBLOX SERVICE REGISTRY
# -----------------------------------------------------------------------------

SERVICE_METADATA: Mapping[str, RuntimeContext] = MappingProxyType({
    "Chat": RuntimeContext.SHARED,
    "HapticService": RuntimeContext.SHARED,
    "Lighting": RuntimeContext.SHARED,
    "LocalizationService": RuntimeContext.SHARED,
    "Players": RuntimeContext.SHARED,
    "ReplicatedFirst": RuntimeContext.CLIENT,
    "ReplicatedStorage": RuntimeContext.SHARED,
    "RunService": RuntimeContext.SHARED,
    "ServerScriptService": RuntimeContext.SERVER,
    "ServerStorage": RuntimeContext.SERVER,
    "SoundService": RuntimeContext.SHARED,
    "StarterGui": RuntimeContext.CLIENT,
    "StarterPack": RuntimeContext.SHARED,
    "StarterPlayer": RuntimeContext.SHARED,
    "StarterPlayerScripts": RuntimeContext.CLIENT,
    "TestService": RuntimeContext.TESTING,
    "TextChatService": RuntimeContext.SHARED,
    "Workspace": RuntimeContext.SHARED,
})

# -----------------------------------------------------------------------------
# PATH AND GLOB CONVENTIONS
# -----------------------------------------------------------------------------

GLOB_SUFFIX = "/**"
PROJECT_FILE_SUFFIX = ".project.json"
DEFAULT_PROJECT_FILE = "default.project.json"
DEFAULT_OUTPUT_FILE_NAME = "problematic"
DEFAULT_SCHEMA_PATH = ".schemas/pendant-configuration.schema.json"
GLOBAL_TYPES_FILE = "globalTypes.d.luau"
SOURCEMAP_FILE = "sourcemap.json"

# Top-level directories whose sub-directories may be collapsed into one glob
DEFAULT_GROUPABLE_ROOTS: Tuple[str, ...] = ("Vendor",)

# Ignore globs written by 'pendant init'
DEFAULT_IGNORE_GLOBS: Tuple[str, ...] = (
    "Packages/**",
    "ServerPackages/**",
    "DevPackages/**",
    "Vendor/**",
    "VendorServer/**",
)

# Always passed to the analyzer as --ignore
DEFAULT_ANALYZER_IGNORES: Tuple[str, ...] = (
    "DevPackages/**/*.{luau,lua}",
    "Packages/**/*.{luau,lua}",
    "ServerPackages/**/*.{luau,lua}",
    "Vendor/**/*.{luau,lua}",
)
