"""Resolve the effective exclusion patterns for a workspace.

Four sources are consulted in order and the first one that yields patterns
wins outright; tiers are never merged:

1. the explicit ``exclude`` setting,
2. ``.depgraphignore`` in the workspace root,
3. ``.gitignore`` in the workspace root,
4. the built-in defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path

from depgraph.config import AnalyzerConfig
from depgraph.models import IgnoreTier, ResolvedPatterns

logger = logging.getLogger(__name__)

DEPGRAPHIGNORE_NAME = ".depgraphignore"
GITIGNORE_NAME = ".gitignore"

DEFAULT_EXCLUDE_PATTERNS: list[str] = [
    "**/node_modules/**",
    "**/out/**",
    "**/dist/**",
    "**/*.d.ts",
    "**/coverage/**",
    "**/*.spec.ts",
    "**/*.spec.tsx",
    "**/*.spec.js",
    "**/*.spec.jsx",
    "**/*.test.ts",
    "**/*.test.tsx",
    "**/*.test.js",
    "**/*.test.jsx",
    "**/tests/**",
    "**/test/**",
    "**/__tests__/**",
    "**/__mocks__/**",
    "**/.git/**",
    "**/.vscode/**",
    "**/.idea/**",
    "**/build/**",
    "**/temp/**",
    "**/tmp/**",
    "**/*.log",
    "**/.DS_Store",
]


def normalize_pattern(pattern: str) -> str:
    """Rewrite a gitignore-style entry into a glob.

    ``dir/`` becomes ``dir/**`` and a bare name such as ``node_modules``
    becomes ``**/node_modules/**`` so it matches at any depth.
    """
    pattern = pattern.strip()
    if pattern.endswith("/"):
        return pattern + "**"
    if "/" not in pattern and "*" not in pattern:
        return f"**/{pattern}/**"
    return pattern


def _negation_targets(negated: str) -> set[str]:
    targets: set[str] = set()
    for form in (negated, normalize_pattern(negated)):
        targets.add(form)
        targets.add("**/" + form)
    return targets


def parse_ignore_lines(lines) -> list[str]:
    """Parse ignore-file lines top to bottom.

    A ``!pattern`` line removes any earlier pattern equal to it (with or
    without a leading ``**/``) and is never emitted itself.
    """
    patterns: list[str] = []
    for line in lines:
        entry = line.strip()
        if not entry or entry.startswith("#"):
            continue
        if entry.startswith("!"):
            targets = _negation_targets(entry[1:].strip())
            patterns = [p for p in patterns if p not in targets]
            continue
        patterns.append(normalize_pattern(entry))
    return patterns


def parse_ignore_file(path: Path) -> list[str]:
    """Parse an ignore file; an unreadable file yields no patterns."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to parse %s: %s", path, e)
        return []
    return parse_ignore_lines(content.splitlines())


def normalize_settings_patterns(patterns: list[str]) -> list[str]:
    """Normalize the explicit setting. Negations are not supported here.

    A leading ``!`` or ``#`` is escaped so the matcher reads it literally
    instead of as a negation or a comment.
    """
    normalized: list[str] = []
    for p in patterns:
        if not p or not p.strip():
            continue
        p = normalize_pattern(p)
        if p.startswith(("!", "#")):
            p = "\\" + p
        normalized.append(p)
    return normalized


def resolve_exclude_patterns(
    workspace_root: Path,
    config: AnalyzerConfig | None = None,
) -> ResolvedPatterns:
    workspace_root = Path(workspace_root)

    if config is not None:
        settings_patterns = normalize_settings_patterns(config.exclude)
        if settings_patterns:
            logger.debug("Using %d exclude patterns from settings", len(settings_patterns))
            return ResolvedPatterns(settings_patterns, IgnoreTier.SETTINGS)

    for name, tier in (
        (DEPGRAPHIGNORE_NAME, IgnoreTier.DEPGRAPHIGNORE),
        (GITIGNORE_NAME, IgnoreTier.GITIGNORE),
    ):
        ignore_path = workspace_root / name
        if not ignore_path.is_file():
            continue
        patterns = parse_ignore_file(ignore_path)
        if patterns:
            logger.debug("Using %d exclude patterns from %s", len(patterns), ignore_path)
            return ResolvedPatterns(patterns, tier, ignore_path)
        logger.debug("%s yielded no patterns, falling through", ignore_path)

    return ResolvedPatterns(list(DEFAULT_EXCLUDE_PATTERNS), IgnoreTier.DEFAULTS)


def get_exclude_patterns(
    workspace_root: Path,
    config: AnalyzerConfig | None = None,
) -> list[str]:
    return resolve_exclude_patterns(workspace_root, config).patterns
