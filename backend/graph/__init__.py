"""
LessWatch Import Graph Package.

Requires Python 3.11+.
"""

from graph.import_graph import ImportGraph

__all__ = ["ImportGraph"]
