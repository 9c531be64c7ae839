"""Import extraction from parsed source files."""

from __future__ import annotations

from depgraph.extractor.import_extractor import ImportExtractor, ImportParseError

__all__ = ["ImportExtractor", "ImportParseError"]
