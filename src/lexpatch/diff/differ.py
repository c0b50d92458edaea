"""Structural diff between two text snapshots.

Both texts are normalized and parsed into sections.  Each new section is
matched against the first not-yet-matched old section of the same type
with an equal match key (see :func:`match_key`).  There is no similarity
scoring: with several near-duplicate paragraphs, pairing follows order of
appearance.

Results:

* new sections with no match are **added**;
* matched pairs whose raw content or heading level differ are **modified**;
* identical matched pairs are dropped;
* old sections never matched are **removed**.
"""

from __future__ import annotations

import json
import re
import sys

from lexpatch.converter.normalizer import normalize
from lexpatch.converter.sections import parse_sections
from lexpatch.models import MarkdownDiff, MarkdownSection, SectionChange, SectionType

_WHITESPACE_RUN_RE = re.compile(r"\s+")

# Stripped from the end of paragraph keys.
_TRAILING_PUNCTUATION = ".,;:!?"


def match_key(section: MarkdownSection) -> str:
    """Return the key two sections must share to be paired.

    Headings compare their trimmed, lower-cased titles.  Paragraphs
    compare content trimmed, with whitespace runs collapsed to one space,
    lower-cased, and with trailing punctuation removed.
    """
    if section.type is SectionType.HEADING:
        return (section.title or "").strip().lower()
    collapsed = _WHITESPACE_RUN_RE.sub(" ", section.content.strip()).lower()
    return collapsed.rstrip(_TRAILING_PUNCTUATION).rstrip()


def _is_changed(old: MarkdownSection, new: MarkdownSection) -> bool:
    return old.content != new.content or old.level != new.level


def diff_sections(
    old_sections: list[MarkdownSection],
    new_sections: list[MarkdownSection],
) -> MarkdownDiff:
    """Classify two already-parsed section sequences."""
    result = MarkdownDiff()
    matched_old: set[int] = set()
    old_keys = [match_key(section) for section in old_sections]

    for section in new_sections:
        key = match_key(section)
        match_index = next(
            (
                idx
                for idx, candidate in enumerate(old_sections)
                if idx not in matched_old
                and candidate.type is section.type
                and old_keys[idx] == key
            ),
            None,
        )

        if match_index is None:
            result.added.append(section)
            continue

        matched_old.add(match_index)
        old_section = old_sections[match_index]
        if _is_changed(old_section, section):
            result.modified.append(
                SectionChange(from_section=old_section, to_section=section)
            )

    result.removed.extend(
        section for idx, section in enumerate(old_sections) if idx not in matched_old
    )
    return result


def diff_markdown(old_text: str, new_text: str, *, debug_dump: bool = False) -> MarkdownDiff:
    """Compare *old_text* and *new_text* section by section.

    Parameters
    ----------
    old_text, new_text:
        Raw texts.  Both are normalized before parsing.
    debug_dump:
        Write a summary of the result to *stderr*.

    Returns
    -------
    MarkdownDiff
    """
    result = diff_sections(
        parse_sections(normalize(old_text)),
        parse_sections(normalize(new_text)),
    )
    if debug_dump:
        print(
            "[lexpatch] Diff:",
            json.dumps(
                {
                    "added": [s.content for s in result.added],
                    "removed": [s.content for s in result.removed],
                    "modified": [
                        {"from": c.from_section.content, "to": c.to_section.content}
                        for c in result.modified
                    ],
                },
                indent=2,
                ensure_ascii=False,
            ),
            file=sys.stderr,
        )
    return result
