from __future__ import annotations

"""
Unit tests for the Rojo Project Tree Classifier.

Verifies:
1. Partition invariants (every informative node listed exactly once).
2. Rule precedence: configuration > service metadata > inheritance.
3. Unknown fallback and deterministic ordering.
"""

import logging
from typing import Any, Dict, List

import pytest

from pendant.core.project.classifier import classify, configured_paths_from_files
from pendant.domain.analysis_models import (
    REASON_CONFIGURATION,
    REASON_INHERITED,
    REASON_METADATA,
    REASON_UNKNOWN,
    ClassificationResult,
)
from pendant.domain.constants import RuntimeContext
from pendant.domain.tree_models import NodeId, TreeEntry


def _tree(data: Dict[str, Any]) -> TreeEntry:
    return TreeEntry.from_dict(data)


def _ids(result: ClassificationResult, context: RuntimeContext) -> List[NodeId]:
    return [node.node_id for node in result.entries[context]]


def _reason(result: ClassificationResult, node_id: NodeId) -> str:
    for nodes in result.entries.values():
        for node in nodes:
            if node.node_id == node_id:
                return node.reason
    raise AssertionError(f"{node_id} was not classified")


# -----------------------------------------------------------------------------
# PARTITION INVARIANTS
# -----------------------------------------------------------------------------

def test_basic_project_classification(basic_project_dict: Dict[str, Any]) -> None:
    """TC-01: Services resolve from metadata, mapped children inherit."""
    result = classify(_tree(basic_project_dict["tree"]))

    assert _ids(result, RuntimeContext.SHARED) == [
        ("ReplicatedStorage",),
        ("ReplicatedStorage", "Shared"),
        ("ReplicatedStorage", "Packages"),
    ]
    assert _ids(result, RuntimeContext.SERVER) == [
        ("ServerScriptService",),
        ("ServerScriptService", "Server"),
    ]
    assert _ids(result, RuntimeContext.CLIENT) == []
    assert _reason(result, ("ReplicatedStorage",)) == REASON_METADATA
    assert _reason(result, ("ReplicatedStorage", "Shared")) == REASON_INHERITED


def test_every_context_key_present(basic_project_dict: Dict[str, Any]) -> None:
    """TC-02: The result has a (possibly empty) list for every context."""
    result = classify(_tree(basic_project_dict["tree"]))
    assert set(result.entries) == set(RuntimeContext)


def test_nodes_are_listed_once(full_project_dict: Dict[str, Any]) -> None:
    """TC-03: No node id appears in two contexts or twice in one."""
    result = classify(_tree(full_project_dict["tree"]))
    total = sum(len(nodes) for nodes in result.entries.values())
    assert total == len(result.node_ids())


def test_every_class_or_path_node_is_classified(full_project_dict: Dict[str, Any]) -> None:
    """TC-04: Nodes with a class name or a path are always listed."""
    root = _tree(full_project_dict["tree"])
    result = classify(root)
    classified = result.node_ids()

    stack = [((key,), child) for key, child in root.children]
    while stack:
        node_id, entry = stack.pop()
        if entry.class_name or entry.path:
            assert node_id in classified
        stack.extend((node_id + (k,), c) for k, c in entry.children)


def test_full_project_contexts(full_project_dict: Dict[str, Any]) -> None:
    """TC-05: A descendant's own metadata overrides the inherited context."""
    result = classify(_tree(full_project_dict["tree"]))
    ids = result.node_ids()

    assert ids[("ReplicatedFirst", "Loader")] is RuntimeContext.CLIENT
    assert ids[("StarterPlayer",)] is RuntimeContext.SHARED
    assert ids[("StarterPlayer", "StarterPlayerScripts")] is RuntimeContext.CLIENT
    assert ids[("StarterPlayer", "StarterPlayerScripts", "Client")] is RuntimeContext.CLIENT
    assert ids[("TestService", "Tests")] is RuntimeContext.TESTING
    assert _reason(result, ("StarterPlayer", "StarterPlayerScripts")) == REASON_METADATA


def test_unlisted_top_level_class_is_unknown(full_project_dict: Dict[str, Any]) -> None:
    """TC-06: A top-level node with an unregistered class falls back to Unknown."""
    result = classify(_tree(full_project_dict["tree"]))
    assert _ids(result, RuntimeContext.UNKNOWN) == [("Custom",)]
    assert _reason(result, ("Custom",)) == REASON_UNKNOWN


def test_top_level_path_without_class_is_unknown() -> None:
    """TC-07: A top-level path-only node has nothing to inherit."""
    result = classify(_tree({"Loose": {"$path": "loose"}}))
    assert _ids(result, RuntimeContext.UNKNOWN) == [("Loose",)]


# -----------------------------------------------------------------------------
# STRUCTURAL FALLBACK
# -----------------------------------------------------------------------------

def test_unregistered_class_inherits_parent_context() -> None:
    """TC-08: A 'Folder' below a shared service stays shared."""
    tree = _tree({
        "ReplicatedStorage": {
            "$className": "ReplicatedStorage",
            "Modules": {"$className": "Folder", "$path": "src/modules"},
        },
    })
    result = classify(tree)
    assert result.node_ids()[("ReplicatedStorage", "Modules")] is RuntimeContext.SHARED
    assert _reason(result, ("ReplicatedStorage", "Modules")) == REASON_INHERITED


def test_structural_node_is_transparent() -> None:
    """TC-09: A node with only children is not listed but passes its context on."""
    tree = _tree({
        "ServerStorage": {
            "$className": "ServerStorage",
            "Group": {
                "Inner": {"$path": "src/inner"},
            },
        },
    })
    result = classify(tree)
    ids = result.node_ids()

    assert ("ServerStorage", "Group") not in ids
    assert ids[("ServerStorage", "Group", "Inner")] is RuntimeContext.SERVER


# -----------------------------------------------------------------------------
# CONFIGURATION PRECEDENCE
# -----------------------------------------------------------------------------

def test_configured_key_overrides_metadata(basic_project_dict: Dict[str, Any]) -> None:
    """TC-10: A configured service moves with its whole subtree."""
    configured = {RuntimeContext.CLIENT: ["ReplicatedStorage"]}
    result = classify(_tree(basic_project_dict["tree"]), configured)

    assert _ids(result, RuntimeContext.CLIENT) == [
        ("ReplicatedStorage",),
        ("ReplicatedStorage", "Shared"),
        ("ReplicatedStorage", "Packages"),
    ]
    assert _ids(result, RuntimeContext.SHARED) == []
    assert _reason(result, ("ReplicatedStorage",)) == REASON_CONFIGURATION


def test_configured_path_matches_mapped_node(basic_project_dict: Dict[str, Any]) -> None:
    """TC-11: A configured glob matches the node mapping that directory."""
    configured = {RuntimeContext.TESTING: ["src/shared/**"]}
    result = classify(_tree(basic_project_dict["tree"]), configured)

    assert result.node_ids()[("ReplicatedStorage", "Shared")] is RuntimeContext.TESTING
    assert result.node_ids()[("ReplicatedStorage", "Packages")] is RuntimeContext.SHARED


def test_configured_class_claims_other_instances() -> None:
    """TC-12: Nodes sharing the class of a configured node follow it."""
    tree = _tree({
        "First": {"$className": "Model", "$path": "first"},
        "Second": {"$className": "Model", "$path": "second"},
    })
    result = classify(tree, {RuntimeContext.SERVER: ["First"]})

    assert _ids(result, RuntimeContext.SERVER) == [("First",), ("Second",)]
    assert _reason(result, ("Second",)) == REASON_CONFIGURATION


def test_conflicting_configuration_keeps_first_claim(caplog: pytest.LogCaptureFixture) -> None:
    """TC-13: An identifier configured twice resolves to the first context."""
    tree = _tree({"Workspace": {"$className": "Workspace", "$path": "world"}})
    configured = {
        RuntimeContext.CLIENT: ["Workspace"],
        RuntimeContext.SERVER: ["Workspace"],
    }
    with caplog.at_level(logging.WARNING):
        result = classify(tree, configured)

    assert result.node_ids()[("Workspace",)] is RuntimeContext.CLIENT
    assert "configured for both" in caplog.text


def test_classification_is_deterministic(full_project_dict: Dict[str, Any]) -> None:
    """TC-14: Identical input yields identical ordering."""
    root = _tree(full_project_dict["tree"])
    first = classify(root)
    second = classify(root)
    for context in RuntimeContext:
        assert _ids(first, context) == _ids(second, context)


# -----------------------------------------------------------------------------
# CONFIGURATION TRANSLATION
# -----------------------------------------------------------------------------

def test_configured_paths_from_files(caplog: pytest.LogCaptureFixture) -> None:
    """TC-15: Known keys map to contexts, unknown keys warn, blanks drop."""
    with caplog.at_level(logging.WARNING):
        out = configured_paths_from_files({
            "client": ["StarterPlayer", ""],
            "testing": [],
            "database": ["Nope"],
        })

    assert out == {RuntimeContext.CLIENT: {"StarterPlayer"}, RuntimeContext.TESTING: set()}
    assert "files.database" in caplog.text
    assert configured_paths_from_files(None) == {}


# -----------------------------------------------------------------------------
# CLASS CLAIMS
# -----------------------------------------------------------------------------

def test_nested_configured_class_does_not_claim_other_instances() -> None:
    """TC-16: Configuring a nested Folder leaves other Folders with their parent."""
    tree = _tree({
        "StarterPlayer": {
            "$className": "StarterPlayer",
            "StarterPlayerScripts": {
                "$className": "StarterPlayerScripts",
                "Client": {"$className": "Folder", "$path": "src/client"},
            },
        },
        "ServerScriptService": {
            "$className": "ServerScriptService",
            "Server": {"$className": "Folder", "$path": "src/server"},
        },
    })
    result = classify(tree, {RuntimeContext.CLIENT: ["Client"]})

    nodes = result.node_ids()
    assert nodes[("StarterPlayer", "StarterPlayerScripts", "Client")] is RuntimeContext.CLIENT
    assert nodes[("ServerScriptService", "Server")] is RuntimeContext.SERVER
    assert _reason(result, ("ServerScriptService", "Server")) == REASON_INHERITED
