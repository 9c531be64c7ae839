"""Expand inclusion/exclusion globs into the list of files to analyze."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

import pathspec

from depgraph.scanner.language_map import DEFAULT_INCLUDE_PATTERNS, SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)

WarningCallback = Callable[[str], None]

PERMISSION_WARNING = (
    "Permission denied while scanning the workspace for the dependency graph. "
    "Make sure only files inside the workspace are scanned."
)
SCAN_ERROR_WARNING = "Failed to scan the workspace for the dependency graph: {error}"


def build_include_patterns(filter_pattern: str | None = None) -> list[str]:
    """Turn a comma-separated filter into inclusion globs.

    Fragments without ``*.`` are directories and expand to one glob per
    supported extension. A leading ``/`` is dropped so the filter never
    reaches outside the workspace root.
    """
    if not filter_pattern or not filter_pattern.strip():
        return list(DEFAULT_INCLUDE_PATTERNS)

    patterns: list[str] = []
    for fragment in filter_pattern.split(","):
        fragment = fragment.strip()
        if fragment.startswith("/"):
            fragment = fragment[1:]
        if not fragment:
            continue
        if "*." in fragment:
            patterns.append(fragment)
        else:
            fragment = fragment.rstrip("/")
            patterns.extend(f"{fragment}/**/*{ext}" for ext in SOURCE_EXTENSIONS)
    return patterns or list(DEFAULT_INCLUDE_PATTERNS)


def _raise_walk_error(error: OSError) -> None:
    raise error


class FileCollector:
    """Walks a workspace without following symlinks or entering dot directories."""

    def __init__(
        self,
        workspace_root: Path,
        exclude_patterns: list[str],
        on_warning: WarningCallback | None = None,
    ):
        self.workspace_root = Path(workspace_root)
        self.exclude_patterns = list(exclude_patterns)
        self.on_warning = on_warning
        self._exclude = pathspec.GitIgnoreSpec.from_lines(self.exclude_patterns)

    def collect(self, filter_pattern: str | None = None) -> list[str]:
        include_patterns = build_include_patterns(filter_pattern)
        include = pathspec.GitIgnoreSpec.from_lines(include_patterns)

        logger.debug("Collecting files with patterns: %s", include_patterns)
        logger.debug("Exclude patterns: %s", self.exclude_patterns)

        try:
            files = self._walk(include)
        except OSError as e:
            logger.error("Error collecting files under %s: %s", self.workspace_root, e)
            self._warn(e)
            return []

        logger.debug("Collected %d files", len(files))
        return files

    def _walk(self, include: pathspec.PathSpec) -> list[str]:
        found: dict[str, None] = {}
        root = str(self.workspace_root)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error, followlinks=False):
            rel_dir = os.path.relpath(dirpath, root)
            rel_dir = "" if rel_dir == "." else Path(rel_dir).as_posix()

            # Prune in place so os.walk never descends into skipped directories
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith(".")
                and not os.path.islink(os.path.join(dirpath, d))
                and not self._is_excluded_dir(f"{rel_dir}/{d}" if rel_dir else d)
            )

            for name in sorted(filenames):
                if name.startswith("."):
                    continue
                full_path = os.path.join(dirpath, name)
                if os.path.islink(full_path) or not os.path.isfile(full_path):
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if not include.match_file(rel_path):
                    continue
                if self._exclude.match_file(rel_path):
                    continue
                found[os.path.abspath(full_path)] = None

        return sorted(found)

    def _is_excluded_dir(self, rel_dir: str) -> bool:
        return self._exclude.match_file(rel_dir + "/")

    def _warn(self, error: OSError) -> None:
        if self.on_warning is None:
            return
        if isinstance(error, PermissionError):
            self.on_warning(PERMISSION_WARNING)
        else:
            self.on_warning(SCAN_ERROR_WARNING.format(error=error))


def collect_files(
    workspace_root: Path,
    filter_pattern: str | None,
    exclude_patterns: list[str],
    on_warning: WarningCallback | None = None,
) -> list[str]:
    """Return absolute paths of the candidate source files, sorted."""
    return FileCollector(workspace_root, exclude_patterns, on_warning).collect(filter_pattern)
