"""Workspace scanning: exclusion-pattern resolution and file collection."""

from __future__ import annotations

from depgraph.scanner.file_collector import FileCollector, build_include_patterns, collect_files
from depgraph.scanner.ignore_patterns import (
    DEFAULT_EXCLUDE_PATTERNS,
    get_exclude_patterns,
    parse_ignore_lines,
    resolve_exclude_patterns,
)

__all__ = [
    "DEFAULT_EXCLUDE_PATTERNS",
    "FileCollector",
    "build_include_patterns",
    "collect_files",
    "get_exclude_patterns",
    "parse_ignore_lines",
    "resolve_exclude_patterns",
]
