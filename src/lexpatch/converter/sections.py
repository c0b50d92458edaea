"""Parse flat text into heading and paragraph sections.

A single forward scan over the lines.  Headings (depth 1-3) each produce a
one-line section; consecutive non-blank, non-heading lines are grouped
into one paragraph section; blank lines only separate paragraphs.

Section ids are fingerprints of the section content and its ordinal
position, so two identical paragraphs in one document still get distinct
ids.  They are not stable across edits.
"""

from __future__ import annotations

import re

from lexpatch.converter.normalizer import split_lines
from lexpatch.models import MarkdownSection, SectionType
from lexpatch.utils.hashing import fingerprint

_SECTION_HEADING_RE = re.compile(r"^(#{1,3})\s+(.*)$")


class _ParagraphBuffer:
    """Accumulates paragraph lines until a flush point."""

    __slots__ = ("lines", "start")

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.start = 1

    def add(self, line: str, line_number: int) -> None:
        if not self.lines:
            self.start = line_number
        self.lines.append(line)

    def flush(self, sections: list[MarkdownSection], end_line: int) -> None:
        if not self.lines:
            return
        content = "\n".join(self.lines)
        sections.append(
            MarkdownSection(
                id=fingerprint(f"paragraph-{content}-{len(sections)}"),
                type=SectionType.PARAGRAPH,
                content=content,
                start_line=self.start,
                end_line=end_line,
            )
        )
        self.lines = []


def parse_sections(text: str) -> list[MarkdownSection]:
    """Return the ordered sections of *text*.

    Line numbers are 1-based and inclusive.  Any input is accepted; lines
    that are neither headings nor blank end up in paragraphs.  Callers
    that diff or display outlines should pass normalized text.
    """
    lines = split_lines(text)
    sections: list[MarkdownSection] = []
    buffer = _ParagraphBuffer()

    for index, line in enumerate(lines):
        line_number = index + 1
        match = _SECTION_HEADING_RE.match(line)

        if match is not None:
            buffer.flush(sections, line_number - 1)
            title = match.group(2).strip()
            sections.append(
                MarkdownSection(
                    id=fingerprint(f"heading-{title}-{len(sections)}"),
                    type=SectionType.HEADING,
                    content=title,
                    start_line=line_number,
                    end_line=line_number,
                    level=len(match.group(1)),
                    title=title,
                )
            )
            continue

        if line.strip() == "":
            buffer.flush(sections, line_number - 1)
            continue

        buffer.add(line, line_number)

    buffer.flush(sections, len(lines))
    return sections
