"""Click CLI with analyze, tree, cycles, patterns, watch and serve subcommands."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

import click

from depgraph import __version__
from depgraph.analysis.tree_view import render_tree
from depgraph.cancellation import AnalysisCancelled
from depgraph.config import AnalyzerConfig, load_config
from depgraph.formatting import graph_stats, graph_to_dict, patterns_to_dict
from depgraph.models import DependencyGraph
from depgraph.pipeline import DependencyGraphAnalyzer
from depgraph.scanner.ignore_patterns import resolve_exclude_patterns

_workspace_argument = click.argument(
    "workspace",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
_filter_option = click.option(
    "--filter", "-f", "filter_pattern",
    help="Comma-separated directories or globs to analyze (e.g. 'src,lib/**/*.ts')",
)
_exclude_option = click.option(
    "--exclude", "-e", multiple=True,
    help="Exclude glob; overrides ignore files and settings. Repeatable.",
)


def _config(workspace: Path, exclude: tuple[str, ...]) -> AnalyzerConfig:
    config = load_config(workspace)
    if exclude:
        config.exclude = list(exclude)
    return config


def _warn(message: str) -> None:
    click.echo(click.style(f"Warning: {message}", fg="yellow"), err=True)


def _analyze(workspace: Path, filter_pattern: str | None, exclude: tuple[str, ...]) -> DependencyGraph:
    analyzer = DependencyGraphAnalyzer(workspace, config=_config(workspace, exclude), on_warning=_warn)
    try:
        return analyzer.analyze_workspace(filter_pattern)
    except AnalysisCancelled:
        click.echo("Analysis cancelled", err=True)
        raise SystemExit(130)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """depgraph: Map imports between JS/TS files and find circular dependencies."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@_workspace_argument
@_filter_option
@_exclude_option
@click.option("--json", "as_json", is_flag=True, help="Print the full graph as JSON")
def analyze(workspace: Path, filter_pattern: str | None, exclude: tuple[str, ...], as_json: bool):
    """Build the dependency graph and print a summary."""
    graph = _analyze(workspace, filter_pattern, exclude)

    if as_json:
        click.echo(json.dumps(graph_to_dict(graph), indent=2))
        return

    if not graph.nodes:
        click.echo("No source files found.")
        return

    stats = graph_stats(graph)
    click.echo(f"\nAnalyzed {stats['nodes']} file(s), {stats['edges']} import edge(s)\n")

    incoming: dict[str, int] = {}
    for edge in graph.edges:
        incoming[edge.target] = incoming.get(edge.target, 0) + 1

    for node in graph.nodes:
        name = click.style(node.id, fg="red" if node.has_cycle else "cyan")
        deps = len(set(node.dependencies))
        click.echo(
            f"  {name}  "
            f"{click.style(f'imports {deps}, imported by {incoming.get(node.id, 0)}', dim=True)}"
        )

    click.echo()
    if stats["cycle_nodes"]:
        click.echo(click.style(f"{stats['cycle_nodes']} file(s) affected by circular dependencies", fg="red"))
    else:
        click.echo(click.style("No circular dependencies", fg="green"))


@cli.command()
@_workspace_argument
@_filter_option
@_exclude_option
@click.option("--depth", "-d", type=int, default=None, help="Maximum depth to expand")
def tree(workspace: Path, filter_pattern: str | None, exclude: tuple[str, ...], depth: int | None):
    """Print the graph as a tree, starting from files nothing imports."""
    graph = _analyze(workspace, filter_pattern, exclude)
    if not graph.nodes:
        click.echo("No source files found.")
        return
    for line in render_tree(graph, max_depth=depth):
        click.echo(line)


@cli.command()
@_workspace_argument
@_filter_option
@_exclude_option
def cycles(workspace: Path, filter_pattern: str | None, exclude: tuple[str, ...]):
    """List files affected by circular dependencies. Exits 1 if any are found."""
    graph = _analyze(workspace, filter_pattern, exclude)
    flagged = graph.cycle_nodes()
    if not flagged:
        click.echo("No circular dependencies found.")
        return
    click.echo(f"Found {len(flagged)} file(s) affected by circular dependencies:\n")
    for node in flagged:
        click.echo(f"  {click.style(node.id, fg='red')}")
    raise SystemExit(1)


@cli.command()
@_workspace_argument
@_exclude_option
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
def patterns(workspace: Path, exclude: tuple[str, ...], as_json: bool):
    """Show which exclude patterns apply and where they come from."""
    resolved = resolve_exclude_patterns(workspace, _config(workspace, exclude))
    if as_json:
        click.echo(json.dumps(patterns_to_dict(resolved), indent=2))
        return
    source = f" ({resolved.source})" if resolved.source else ""
    click.echo(f"Exclude patterns from {click.style(resolved.tier.value, fg='cyan')}{source}:")
    for pattern in resolved.patterns:
        click.echo(f"  {pattern}")


@cli.command()
@_workspace_argument
@_filter_option
@_exclude_option
@click.option("--debounce", default=500, show_default=True, help="Milliseconds to collect changes before re-analyzing")
def watch(workspace: Path, filter_pattern: str | None, exclude: tuple[str, ...], debounce: int):
    """Re-analyze whenever source files change."""
    from depgraph.watcher import DependencyWatcher

    analyzer = DependencyGraphAnalyzer(workspace, config=_config(workspace, exclude), on_warning=_warn)

    def report(graph: DependencyGraph):
        stats = graph_stats(graph)
        color = "red" if stats["cycle_nodes"] else "green"
        click.echo(
            f"[{time.strftime('%H:%M:%S')}] {stats['nodes']} files, {stats['edges']} edges, "
            + click.style(f"{stats['cycle_nodes']} in cycles", fg=color)
        )

    watcher = DependencyWatcher(analyzer, report, filter_pattern, debounce_ms=debounce)
    click.echo(f"Watching {analyzer.workspace_root} (Ctrl+C to stop)")
    try:
        watcher.run_forever()
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


@cli.command()
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(port: int, host: str):
    """Start the JSON API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the API server. "
            "Install with: pip install 'depgraph[web]'"
        )

    from depgraph.web import create_app

    click.echo(f"Starting depgraph API at http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
