"""JSON API over the analyzer."""

from depgraph.web.app import create_app

__all__ = ["create_app"]
