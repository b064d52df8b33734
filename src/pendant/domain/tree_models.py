from __future__ import annotations

"""
Rojo Project Tree Data Models.

Provides the recursive node type for a Rojo project tree together with the
project wrapper. Nodes are immutable records with explicit optional fields;
the dict parser drops metadata keys, malformed children, and nodes that
carry no information.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Key path from the tree root; the identity of a node during classification
NodeId = Tuple[str, ...]

# Rojo reserves '$'-prefixed keys for node metadata
_METADATA_PREFIX = "$"

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TreeEntry:
    """
    A node of the Rojo project tree.

    Attributes:
        class_name: Roblox class of the instance ($className), if declared.
        path: Filesystem path mapped onto this instance ($path), if any.
        children: Named nested entries in declaration order.
        ignore_unknown_instances: Raw $ignoreUnknownInstances flag.
        properties: Raw $properties table.
    """
    class_name: Optional[str] = None
    path: Optional[str] = None
    children: Tuple[Tuple[str, "TreeEntry"], ...] = ()
    ignore_unknown_instances: Optional[bool] = None
    properties: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_informative(self) -> bool:
        """True if the node names a class, maps a path, or has children."""
        return bool(self.class_name or self.path or self.children)

    def child(self, key: str) -> Optional["TreeEntry"]:
        """Return the child registered under key, or None."""
        for name, entry in self.children:
            if name == key:
                return entry
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TreeEntry":
        """
        Build a tree from the JSON object of a Rojo tree node.

        Non-object children and '$' metadata keys are skipped silently since
        project files may carry incidental non-tree keys.

        Args:
            data: Parsed JSON object of the node.

        Returns:
            TreeEntry: The immutable node with its parsed subtree.
        """
        children: List[Tuple[str, TreeEntry]] = []
        for key, value in data.items():
            if not isinstance(key, str) or key.startswith(_METADATA_PREFIX):
                continue
            if not isinstance(value, dict):
                continue
            entry = cls.from_dict(value)
            if entry.is_informative:
                children.append((key, entry))

        class_name = data.get("$className")
        ignore_unknown = data.get("$ignoreUnknownInstances")
        properties = data.get("$properties")

        return cls(
            class_name=class_name if isinstance(class_name, str) and class_name else None,
            path=_parse_path(data.get("$path")),
            children=tuple(children),
            ignore_unknown_instances=ignore_unknown if isinstance(ignore_unknown, bool) else None,
            properties=MappingProxyType(dict(properties)) if isinstance(properties, dict) else MappingProxyType({}),
        )


@dataclass(frozen=True)
class RojoProject:
    """
    A parsed *.project.json file.

    Attributes:
        name: Project name.
        tree: Root node of the instance tree (usually a DataModel).
        source_path: File the project was loaded from.
        glob_ignore_paths: Rojo-level ignore globs.
        serve_port: Optional development server port.
        place_id: Optional place identifier.
        game_id: Optional game identifier.
    """
    name: str
    tree: TreeEntry
    source_path: str = ""
    glob_ignore_paths: Tuple[str, ...] = ()
    serve_port: Optional[int] = None
    place_id: Optional[int] = None
    game_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source_path: str = "") -> "RojoProject":
        """Build a project from an already validated JSON document."""
        ignore_paths = data.get("globIgnorePaths") or []
        return cls(
            name=str(data.get("name", "")),
            tree=TreeEntry.from_dict(data.get("tree") or {}),
            source_path=source_path,
            glob_ignore_paths=tuple(p for p in ignore_paths if isinstance(p, str)),
            serve_port=_as_int(data.get("servePort")),
            place_id=_as_int(data.get("placeId")),
            game_id=_as_int(data.get("gameId")),
        )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _parse_path(value: Any) -> Optional[str]:
    """Accept both '$path': "dir" and '$path': {"optional": "dir"}."""
    if isinstance(value, dict):
        value = value.get("optional")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    return value if isinstance(value, int) else None
