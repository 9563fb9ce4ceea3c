"""
LessWatch CLI Package.

Requires Python 3.11+.
"""

from cli.main import build_parser, main

__all__ = ["build_parser", "main"]
