"""depgraph: static import graphs and circular-dependency detection for JS/TS workspaces."""

from __future__ import annotations

from depgraph.cancellation import AnalysisCancelled, CancellationToken
from depgraph.config import AnalyzerConfig, load_config
from depgraph.models import DependencyEdge, DependencyGraph, DependencyNode
from depgraph.pipeline import DependencyGraphAnalyzer, analyze_workspace

__version__ = "0.1.0"

__all__ = [
    "AnalysisCancelled",
    "AnalyzerConfig",
    "CancellationToken",
    "DependencyEdge",
    "DependencyGraph",
    "DependencyGraphAnalyzer",
    "DependencyNode",
    "analyze_workspace",
    "load_config",
]
