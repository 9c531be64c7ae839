"""Circular-dependency detection over a built graph."""

from __future__ import annotations

from typing import Iterable

from depgraph.models import DependencyNode


def detect_cycle_nodes(nodes: Iterable[DependencyNode]) -> set[str]:
    """Return the ids of every cycle-affected node.

    A node is cycle-affected when it lies on a circular import chain or
    imports, directly or transitively, a node that does. Uses DFS with an
    explicit frame stack, so deep graphs cannot hit the recursion limit.
    """
    adjacency: dict[str, list[str]] = {}
    for node in nodes:
        adjacency.setdefault(node.id, node.dependencies)

    visited: set[str] = set()
    on_stack: set[str] = set()
    affected: set[str] = set()

    for root_id in adjacency:
        if root_id in visited:
            continue

        visited.add(root_id)
        on_stack.add(root_id)
        stack = [(root_id, iter(adjacency[root_id]))]

        while stack:
            node_id, deps = stack[-1]
            descended = False

            for dep in deps:
                if dep not in adjacency:
                    continue
                if dep in on_stack:
                    # Back edge: both ends are on the cycle
                    affected.add(dep)
                    affected.add(node_id)
                elif dep in visited:
                    if dep in affected:
                        affected.add(node_id)
                else:
                    visited.add(dep)
                    on_stack.add(dep)
                    stack.append((dep, iter(adjacency[dep])))
                    descended = True
                    break

            if descended:
                continue

            stack.pop()
            on_stack.discard(node_id)
            if stack and node_id in affected:
                affected.add(stack[-1][0])

    return affected


def annotate_cycles(nodes: list[DependencyNode]) -> None:
    """Set ``has_cycle`` on every cycle-affected node, in place."""
    affected = detect_cycle_nodes(nodes)
    for node in nodes:
        if node.id in affected:
            node.has_cycle = True
