"""Heuristic module-specifier resolution.

This intentionally does not read tsconfig/jsconfig path mappings or
package.json ``exports``: relative paths, one ``@/`` alias onto ``src/``,
and workspace-root-relative paths are the whole contract.
"""

from __future__ import annotations

import os
from pathlib import Path

from depgraph.scanner.language_map import SOURCE_EXTENSIONS

ALIAS_PREFIX = "@/"
ALIAS_ROOT = "src"


class ModuleResolver:
    """Maps a raw specifier to a file inside (or near) the workspace."""

    def __init__(self, workspace_root: Path):
        self.workspace_root = Path(workspace_root)

    def resolve(self, specifier: str, current_file: Path | str) -> str | None:
        """Return the absolute path *specifier* points at, or ``None``.

        ``None`` covers both third-party packages and paths with no
        matching file; neither is an error.
        """
        if specifier.startswith("."):
            base = os.path.join(os.path.dirname(str(current_file)), specifier)
            return self.find_actual_file(base)

        if specifier.startswith(ALIAS_PREFIX):
            base = os.path.join(str(self.workspace_root), ALIAS_ROOT, specifier[len(ALIAS_PREFIX):])
            return self.find_actual_file(base)

        if "/" not in specifier or specifier.startswith("@"):
            return None

        return self.find_actual_file(os.path.join(str(self.workspace_root), specifier))

    @staticmethod
    def find_actual_file(base_path: str) -> str | None:
        base_path = os.path.normpath(os.path.abspath(base_path))

        for ext in SOURCE_EXTENSIONS:
            candidate = base_path + ext
            if os.path.isfile(candidate):
                return candidate

        for ext in SOURCE_EXTENSIONS:
            candidate = os.path.join(base_path, "index" + ext)
            if os.path.isfile(candidate):
                return candidate

        return None
