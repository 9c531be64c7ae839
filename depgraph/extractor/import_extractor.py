"""Tree-sitter based extraction of module specifiers from JS/TS files."""

from __future__ import annotations

import logging
from pathlib import Path

from tree_sitter_language_pack import get_parser

from depgraph.scanner.language_map import EXT_TO_GRAMMAR

logger = logging.getLogger(__name__)


class ImportParseError(Exception):
    """A source file could not be read or parsed."""

    def __init__(self, file_path: Path | str, reason: str):
        self.file_path = str(file_path)
        self.reason = reason
        super().__init__(f"Failed to parse {file_path}: {reason}")


def _string_value(node) -> str | None:
    """Return a string literal's content with the surrounding quotes stripped."""
    if node is None or node.type != "string" or node.text is None:
        return None
    return node.text.decode("utf-8", errors="replace")[1:-1]


class ImportExtractor:
    """Collects raw module specifiers from import, export-from and require().

    One instance is the parse context of a single analysis run: it caches
    parsers per grammar and is discarded when the run ends.
    """

    def __init__(self):
        self._parser_cache: dict[str, object] = {}

    def parse(self, file_path: Path):
        file_path = Path(file_path)
        grammar_name = EXT_TO_GRAMMAR.get(file_path.suffix)
        if grammar_name is None:
            raise ImportParseError(file_path, f"unsupported extension {file_path.suffix!r}")

        try:
            source_bytes = file_path.read_bytes()
        except OSError as e:
            raise ImportParseError(file_path, str(e)) from e

        tree = self._get_parser(grammar_name).parse(source_bytes)
        if tree is None or tree.root_node is None:
            raise ImportParseError(file_path, "parser returned no tree")
        if tree.root_node.has_error:
            logger.debug("Syntax errors in %s, extracting what parsed", file_path)
        return tree

    def extract(self, file_path: Path) -> list[str]:
        """Parse *file_path* and return its raw specifiers (duplicates kept)."""
        tree = self.parse(file_path)
        return self.extract_from_tree(tree, file_path)

    def extract_from_tree(self, tree, file_path: Path | str) -> list[str]:
        root = tree.root_node
        specifiers: list[str] = []

        # Static imports
        for child in root.children:
            if child.type == "import_statement":
                value = _string_value(child.child_by_field_name("source"))
                if value is not None:
                    specifiers.append(value)

        # Re-exports; `export { x }` and `export const` have no source
        for child in root.children:
            if child.type == "export_statement":
                value = _string_value(child.child_by_field_name("source"))
                if value is not None:
                    specifiers.append(value)

        specifiers.extend(self._collect_requires(root))

        logger.debug("%s: %d module specifiers", file_path, len(specifiers))
        return specifiers

    def _collect_requires(self, root) -> list[str]:
        """Find ``require('x')`` calls anywhere in the tree, in document order."""
        found: list[str] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "call_expression":
                callee = node.child_by_field_name("function")
                if (callee is not None and callee.type == "identifier"
                        and callee.text == b"require"):
                    args = node.child_by_field_name("arguments")
                    if args is not None and args.named_children:
                        value = _string_value(args.named_children[0])
                        if value is not None:
                            found.append(value)
            stack.extend(reversed(node.children))
        return found

    def _get_parser(self, grammar_name: str):
        if grammar_name not in self._parser_cache:
            self._parser_cache[grammar_name] = get_parser(grammar_name)
        return self._parser_cache[grammar_name]
