"""Analysis orchestrator: resolve ignores -> collect -> extract/resolve -> edges -> cycles."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from depgraph.analysis.cycles import annotate_cycles
from depgraph.analysis.dependency_graph import DependencyGraphBuilder
from depgraph.analysis.module_resolver import ModuleResolver
from depgraph.cancellation import CancellationToken, check_cancelled
from depgraph.config import AnalyzerConfig, load_config
from depgraph.extractor import ImportExtractor
from depgraph.models import DependencyGraph
from depgraph.scanner.file_collector import WarningCallback, collect_files
from depgraph.scanner.ignore_patterns import resolve_exclude_patterns

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


class DependencyGraphAnalyzer:
    """Entry point for analyzing one workspace.

    Every call to :meth:`analyze_workspace` builds its own parse context
    and resolver, so concurrent calls share no mutable state.
    """

    def __init__(
        self,
        workspace_root: Path,
        config: AnalyzerConfig | None = None,
        on_warning: WarningCallback | None = None,
    ):
        self.workspace_root = Path(workspace_root).resolve()
        self.config = config if config is not None else load_config(self.workspace_root)
        self.on_warning = on_warning
        logger.debug("DependencyGraphAnalyzer initialized with workspace root %s", self.workspace_root)

    def collect_files(self, filter_pattern: str | None = None) -> list[str]:
        resolved = resolve_exclude_patterns(self.workspace_root, self.config)
        logger.debug("Exclude patterns from %s: %s", resolved.tier.value, resolved.patterns)
        return collect_files(
            self.workspace_root, filter_pattern, resolved.patterns, self.on_warning,
        )

    def analyze_workspace(
        self,
        filter_pattern: str | None = None,
        cancellation_token: CancellationToken | None = None,
        progress: ProgressCallback | None = None,
    ) -> DependencyGraph:
        logger.info("Starting workspace analysis with filter: %r", filter_pattern)
        check_cancelled(cancellation_token)

        # Stage 1: Collect
        if progress:
            progress("Collecting", 0, 1)
        files = self.collect_files(filter_pattern)
        logger.info("Found %d files to analyze", len(files))
        if progress:
            progress("Collecting", 1, 1)
        check_cancelled(cancellation_token)

        # Stage 2: Extract and resolve
        builder = DependencyGraphBuilder(
            self.workspace_root,
            extractor=ImportExtractor(),
            resolver=ModuleResolver(self.workspace_root),
        )
        if progress:
            progress("Analyzing", 0, len(files))
        nodes = builder.build_nodes(files, cancellation_token)
        logger.info("Generated %d nodes", len(nodes))
        if progress:
            progress("Analyzing", len(files), len(files))
        check_cancelled(cancellation_token)

        # Stage 3: Edges
        edges = builder.generate_edges(nodes)
        logger.info("Generated %d edges", len(edges))

        # Stage 4: Cycles
        check_cancelled(cancellation_token)
        annotate_cycles(nodes)
        logger.info("Detected %d nodes with cycles", sum(1 for n in nodes if n.has_cycle))

        return DependencyGraph(nodes=nodes, edges=edges)


def analyze_workspace(
    workspace_root: Path,
    filter_pattern: str | None = None,
    cancellation_token: CancellationToken | None = None,
    config: AnalyzerConfig | None = None,
    on_warning: WarningCallback | None = None,
    progress: ProgressCallback | None = None,
) -> DependencyGraph:
    """Analyze *workspace_root* and return its dependency graph."""
    analyzer = DependencyGraphAnalyzer(workspace_root, config=config, on_warning=on_warning)
    return analyzer.analyze_workspace(filter_pattern, cancellation_token, progress)
