"""Data models for the dependency graph analyzer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class IgnoreTier(enum.Enum):
    SETTINGS = "settings"
    DEPGRAPHIGNORE = "depgraphignore"
    GITIGNORE = "gitignore"
    DEFAULTS = "defaults"


@dataclass
class ResolvedPatterns:
    """Effective exclusion patterns and the tier they came from."""
    patterns: list[str]
    tier: IgnoreTier
    source: Path | None = None  # ignore file the patterns were read from


@dataclass
class DependencyNode:
    """One analyzed source file."""
    id: str  # workspace-relative, POSIX separators
    file_path: str
    dependencies: list[str] = field(default_factory=list)
    has_cycle: bool = False


@dataclass(frozen=True)
class DependencyEdge:
    source: str  # importing node id
    target: str  # imported node id


@dataclass
class DependencyGraph:
    nodes: list[DependencyNode] = field(default_factory=list)
    edges: list[DependencyEdge] = field(default_factory=list)

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> DependencyNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def cycle_nodes(self) -> list[DependencyNode]:
        return [node for node in self.nodes if node.has_cycle]
