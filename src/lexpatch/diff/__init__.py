"""Structural section diff.

Exports
-------
diff_markdown
    Normalize, parse and compare two texts.
diff_sections
    Compare two already-parsed section sequences.
match_key
    The key used to pair sections.
"""

from .differ import diff_markdown, diff_sections, match_key

__all__ = [
    "diff_markdown",
    "diff_sections",
    "match_key",
]
