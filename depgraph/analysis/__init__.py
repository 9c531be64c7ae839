"""Graph construction, module resolution and cycle detection."""

from __future__ import annotations

from depgraph.analysis.cycles import annotate_cycles, detect_cycle_nodes
from depgraph.analysis.dependency_graph import DependencyGraphBuilder
from depgraph.analysis.module_resolver import ModuleResolver

__all__ = [
    "DependencyGraphBuilder",
    "ModuleResolver",
    "annotate_cycles",
    "detect_cycle_nodes",
]
