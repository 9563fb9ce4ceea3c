"""
LessWatch Import Scanner.

Lightweight extraction of @import references from Less source text.
Requires Python 3.11+.
"""

import re

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
# A "//" preceded by ':' or a quote belongs to a URL, not a comment
_LINE_COMMENT = re.compile(r"(?<![:\"'])//[^\n]*")

_IMPORT = re.compile(
    r"""@import\s*
        (?:\(\s*[\w\s,-]*\)\s*)?             # options, e.g. (reference, optional)
        (?:
            url\(\s*(?P<q1>["']?)(?P<url>[^"')]+)(?P=q1)\s*\)
          | (?P<q2>["'])(?P<path>[^"']+)(?P=q2)
        )""",
    re.VERBOSE,
)

_REMOTE_PREFIXES = ("http://", "https://", "//")


def strip_comments(text: str) -> str:
    """Remove block and line comments from Less source."""
    return _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", text))


def scan_imports(text: str) -> list[str]:
    """
    Return the raw import references in source order.

    Remote references are skipped since they never map to watched files.
    """
    references: list[str] = []
    for match in _IMPORT.finditer(strip_comments(text)):
        reference = (match.group("path") or match.group("url") or "").strip()
        if not reference or reference.startswith(_REMOTE_PREFIXES):
            continue
        references.append(reference)
    return references
