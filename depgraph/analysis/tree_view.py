"""Tree-shaped view of a dependency graph for tree widgets and the CLI."""

from __future__ import annotations

from typing import Iterator

from depgraph.models import DependencyGraph, DependencyNode

CYCLE_MARKER = "[cycle]"


def root_nodes(graph: DependencyGraph) -> list[DependencyNode]:
    """Nodes nothing imports; every node when all of them are imported."""
    imported = {edge.target for edge in graph.edges}
    roots = [node for node in graph.nodes if node.id not in imported]
    return roots if roots else list(graph.nodes)


def _child_map(graph: DependencyGraph) -> dict[str, list[DependencyNode]]:
    by_id = {n.id: n for n in graph.nodes}
    result: dict[str, list[DependencyNode]] = {}
    for node in graph.nodes:
        kids: list[DependencyNode] = []
        seen: set[str] = set()
        for dep in node.dependencies:
            if dep in by_id and dep not in seen:
                seen.add(dep)
                kids.append(by_id[dep])
        result.setdefault(node.id, kids)
    return result


def children(graph: DependencyGraph, node_id: str) -> list[DependencyNode]:
    """Known dependencies of *node_id*, once each, in import order."""
    return _child_map(graph).get(node_id, [])


def render_tree(graph: DependencyGraph, max_depth: int | None = None) -> Iterator[str]:
    """Yield indented lines, one per node visit.

    Each node is expanded at most once per render. Later visits of a node
    with hidden children print it with ``...`` instead, so the output stays
    linear in the number of edges.
    """
    kids_of = _child_map(graph)
    expanded: set[str] = set()

    for root in root_nodes(graph):
        stack: list[tuple[DependencyNode, int]] = [(root, 0)]
        while stack:
            node, depth = stack.pop()
            label = "  " * depth + node.id
            if node.has_cycle:
                label = f"{label} {CYCLE_MARKER}"

            kids = kids_of[node.id]
            can_expand = bool(kids) and (max_depth is None or depth < max_depth)
            if can_expand and node.id in expanded:
                yield label + " ..."
                continue
            yield label
            if not can_expand:
                continue

            expanded.add(node.id)
            for kid in reversed(kids):
                stack.append((kid, depth + 1))
