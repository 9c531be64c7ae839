"""Analysis API — dependency graph and resolved exclude patterns."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from depgraph.cancellation import AnalysisCancelled
from depgraph.config import load_config
from depgraph.formatting import graph_to_dict, patterns_to_dict
from depgraph.pipeline import DependencyGraphAnalyzer
from depgraph.scanner.ignore_patterns import resolve_exclude_patterns
from depgraph.web.state import state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class GraphRequest(BaseModel):
    path: str
    filter: str | None = None


def _validate_workspace(p: str) -> Path:
    """Ensure the workspace exists and is a directory."""
    resolved = Path(p).expanduser().resolve()
    if not resolved.exists():
        raise HTTPException(404, f"Path not found: {resolved}")
    if not resolved.is_dir():
        raise HTTPException(400, f"Not a directory: {resolved}")
    return resolved


@router.post("/graph")
async def build_graph(req: GraphRequest):
    workspace = _validate_workspace(req.path)
    warnings: list[str] = []

    def _analyze(token):
        # Runs in the worker thread: loading config reads from disk
        analyzer = DependencyGraphAnalyzer(workspace, on_warning=warnings.append)
        return analyzer.analyze_workspace(req.filter, token)

    session = state.begin(str(workspace), req.filter)
    try:
        graph = await asyncio.to_thread(state.run, session, _analyze)
    except AnalysisCancelled:
        logger.info("Analysis of %s superseded", workspace)
        raise HTTPException(409, "Analysis superseded by a newer request")

    result = graph_to_dict(graph)
    result["workspace"] = str(workspace)
    result["warnings"] = warnings
    return result


@router.get("/graph")
async def get_latest_graph(path: str = Query(...)):
    workspace = _validate_workspace(path)
    session = state.latest(str(workspace))
    if session is None or session.graph is None:
        raise HTTPException(404, "No completed analysis for this workspace")
    result = graph_to_dict(session.graph)
    result["workspace"] = str(workspace)
    result["filter"] = session.filter_pattern
    result["timestamp"] = session.timestamp
    return result


@router.get("/patterns")
async def get_patterns(path: str = Query(...)):
    workspace = _validate_workspace(path)
    resolved = await asyncio.to_thread(
        lambda: resolve_exclude_patterns(workspace, load_config(workspace)),
    )
    return patterns_to_dict(resolved)
