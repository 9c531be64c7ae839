"""Supported source extensions and their tree-sitter grammars."""

from __future__ import annotations

# Order matters: the module resolver tries extensions in this order.
SOURCE_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx")

# Maps file extension -> tree-sitter grammar name
EXT_TO_GRAMMAR: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
}

DEFAULT_INCLUDE_PATTERNS: list[str] = [f"**/*{ext}" for ext in SOURCE_EXTENSIONS]
