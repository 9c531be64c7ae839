"""JSON-friendly views of analysis results for the CLI and web layers."""

from __future__ import annotations

from typing import Any

from depgraph.models import DependencyGraph, ResolvedPatterns


def graph_stats(graph: DependencyGraph) -> dict[str, int]:
    return {
        "nodes": len(graph.nodes),
        "edges": len(graph.edges),
        "cycle_nodes": len(graph.cycle_nodes()),
    }


def graph_to_dict(graph: DependencyGraph) -> dict[str, Any]:
    return {
        "nodes": [
            {
                "id": node.id,
                "filePath": node.file_path,
                "dependencies": list(node.dependencies),
                "hasCycle": node.has_cycle,
            }
            for node in graph.nodes
        ],
        "edges": [{"from": edge.source, "to": edge.target} for edge in graph.edges],
        "stats": graph_stats(graph),
    }


def patterns_to_dict(resolved: ResolvedPatterns) -> dict[str, Any]:
    return {
        "tier": resolved.tier.value,
        "source": str(resolved.source) if resolved.source else None,
        "patterns": list(resolved.patterns),
    }
