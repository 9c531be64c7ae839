"""Analyzer configuration: user and workspace settings files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path.home() / ".depgraph"
_CONFIG_FILE = _CONFIG_DIR / "config.json"
WORKSPACE_CONFIG_NAME = ".depgraph.json"


@dataclass
class AnalyzerConfig:
    """Settings consumed by the analyzer.

    ``exclude`` is the explicit exclude-pattern setting: when non-empty it
    wins over every ignore file and the built-in defaults.
    """
    exclude: list[str] = field(default_factory=list)


def _read_settings(path: Path) -> dict:
    """Read one settings file; missing, unreadable or malformed files yield ``{}``."""
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Failed to read settings from %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring settings in %s: expected a JSON object", path)
        return {}
    return data


def load_config(workspace_root: Path | None = None) -> AnalyzerConfig:
    """Load user settings, then overlay workspace settings key by key."""
    settings = _read_settings(_CONFIG_FILE)
    if workspace_root is not None:
        settings.update(_read_settings(Path(workspace_root) / WORKSPACE_CONFIG_NAME))

    config = AnalyzerConfig()

    exclude = settings.get("exclude")
    if isinstance(exclude, list):
        config.exclude = [p for p in exclude if isinstance(p, str) and p.strip()]
    elif exclude is not None:
        logger.warning("Ignoring 'exclude' setting: expected a list of glob strings")

    return config
