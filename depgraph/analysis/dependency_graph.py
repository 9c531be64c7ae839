"""Dependency graph builder: extracts imports per file, resolves them, builds nodes and edges."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from depgraph.analysis.module_resolver import ModuleResolver
from depgraph.cancellation import CancellationToken, check_cancelled
from depgraph.extractor import ImportExtractor, ImportParseError
from depgraph.models import DependencyEdge, DependencyGraph, DependencyNode

logger = logging.getLogger(__name__)


def relative_id(workspace_root: Path | str, absolute_path: str) -> str:
    """Workspace-relative node id with POSIX separators."""
    return Path(os.path.relpath(absolute_path, str(workspace_root))).as_posix()


class DependencyGraphBuilder:
    """Build a file-level dependency graph for one analysis run."""

    def __init__(
        self,
        workspace_root: Path,
        extractor: ImportExtractor | None = None,
        resolver: ModuleResolver | None = None,
    ):
        self.workspace_root = Path(workspace_root)
        self.extractor = extractor or ImportExtractor()
        self.resolver = resolver or ModuleResolver(self.workspace_root)

    def build(
        self,
        files: list[str],
        cancellation_token: CancellationToken | None = None,
    ) -> DependencyGraph:
        nodes = self.build_nodes(files, cancellation_token)
        return DependencyGraph(nodes=nodes, edges=self.generate_edges(nodes))

    def build_nodes(
        self,
        files: list[str],
        cancellation_token: CancellationToken | None = None,
    ) -> list[DependencyNode]:
        nodes: list[DependencyNode] = []
        seen: set[str] = set()

        for file_path in files:
            check_cancelled(cancellation_token)

            node_id = relative_id(self.workspace_root, file_path)
            if node_id in seen:
                continue

            try:
                specifiers = self.extractor.extract(Path(file_path))
            except ImportParseError as e:
                logger.warning("Failed to analyze file %s: %s", file_path, e.reason)
                continue

            dependencies: list[str] = []
            for specifier in specifiers:
                resolved = self.resolver.resolve(specifier, file_path)
                if resolved is not None:
                    dependencies.append(relative_id(self.workspace_root, resolved))

            seen.add(node_id)
            nodes.append(DependencyNode(
                id=node_id,
                file_path=str(file_path),
                dependencies=dependencies,
            ))

        return nodes

    @staticmethod
    def generate_edges(nodes: list[DependencyNode]) -> list[DependencyEdge]:
        """One edge per distinct (importer, imported) pair between known nodes."""
        known = {node.id for node in nodes}
        edges: list[DependencyEdge] = []
        emitted: set[tuple[str, str]] = set()

        for node in nodes:
            for dep in node.dependencies:
                if dep not in known or (node.id, dep) in emitted:
                    continue
                emitted.add((node.id, dep))
                edges.append(DependencyEdge(source=node.id, target=dep))

        return edges
