"""Text sanitization and heading-depth normalization.

:func:`normalize` must be applied before structural parsing or diffing.
It strips embedded markup and rewrites heading lines into a gap-free
outline of depth at most three.  ``normalize(normalize(x)) == normalize(x)``
for every input.
"""

from __future__ import annotations

import re

MAX_HEADING_LEVEL = 3

_SCRIPT_RE = re.compile(r"<script[\s\S]*?>[\s\S]*?</script>", re.IGNORECASE)
_TAG_RE = re.compile(r"</?[^>]+>")
_HEADING_LINE_RE = re.compile(r"^(#{1,6})\s+(.*)$")

# CRLF, lone CR and LF all end a line.
LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split *text* into lines, accepting any line-ending convention."""
    return LINE_BREAK_RE.split(text)


def sanitize(text: str) -> str:
    """Remove ``<script>`` regions, then every remaining tag-like substring."""
    without_scripts = _SCRIPT_RE.sub("", text)
    return _TAG_RE.sub("", without_scripts)


def enforce_heading_hierarchy(text: str) -> str:
    """Re-level heading lines so depth never skips a level.

    The first heading becomes depth 1.  Every later heading keeps its
    requested depth (clamped to :data:`MAX_HEADING_LEVEL`) unless that is
    more than one level deeper than the previous heading, in which case it
    is raised to ``previous + 1``.  Headings of depth 4-6 are clamped as
    well; lines with seven or more ``#`` are not headings.
    """
    last_level = 0
    lines: list[str] = []
    for line in split_lines(text):
        match = _HEADING_LINE_RE.match(line)
        if match is None:
            lines.append(line)
            continue
        desired = min(MAX_HEADING_LEVEL, len(match.group(1)))
        level = 1 if last_level == 0 else min(desired, last_level + 1)
        last_level = level
        lines.append(f"{'#' * level} {match.group(2).strip()}")
    return "\n".join(lines)


def normalize(text: str) -> str:
    """Sanitize *text* and enforce the heading hierarchy."""
    return enforce_heading_hierarchy(sanitize(text))
