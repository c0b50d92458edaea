"""Bounded, deduplicated version history and snapshots.

History lists are ordered oldest first.  Every function returns a new
list and leaves its input untouched.
"""

from __future__ import annotations

import dataclasses

from lexpatch.models import (
    Document,
    DocumentSnapshot,
    DocumentVersion,
    MarkdownSection,
    utc_now,
)
from lexpatch.utils.hashing import new_id

MAX_VERSION_HISTORY = 10


def _copy_sections(sections) -> tuple[MarkdownSection, ...]:
    return tuple(dataclasses.replace(section) for section in sections)


def create_snapshot(document: Document) -> DocumentSnapshot:
    """Take an independent, immutable copy of *document*'s current state."""
    return DocumentSnapshot(
        id=new_id(),
        document_id=document.id,
        blocks=tuple(dataclasses.replace(block) for block in document.blocks),
        markdown=document.markdown,
        sections=_copy_sections(document.sections),
        version=document.version,
        timestamp=utc_now(),
    )


def add_version_snapshot(
    history: list[DocumentVersion],
    markdown: str,
    sections: list[MarkdownSection] | tuple[MarkdownSection, ...],
    limit: int = MAX_VERSION_HISTORY,
    version_number: int | None = None,
) -> list[DocumentVersion]:
    """Record *markdown* in *history* unless it repeats the latest entry.

    Parameters
    ----------
    history:
        Existing entries, oldest first.
    markdown:
        Text of the new state.
    sections:
        Sections of the new state; copied into the entry.
    limit:
        Maximum number of entries kept.  The oldest are dropped first.
    version_number:
        Version recorded on the entry.  Defaults to the highest version
        already in *history* plus one.

    Returns
    -------
    list[DocumentVersion]
        The new history, at most *limit* entries long.  When *markdown* is
        byte-identical to the latest entry nothing is appended.
    """
    if limit <= 0:
        return []

    if history and history[-1].markdown == markdown:
        return list(history[-limit:])

    if version_number is None:
        version_number = max((entry.version for entry in history), default=0) + 1

    entry = DocumentVersion(
        id=new_id(),
        markdown=markdown,
        sections=_copy_sections(sections),
        version=version_number,
        timestamp=utc_now(),
    )
    return [*history, entry][-limit:]


def restore_version(history: list[DocumentVersion], version_id: str) -> DocumentVersion | None:
    """Return the entry whose id is *version_id*, or ``None``."""
    for entry in history:
        if entry.id == version_id:
            return entry
    return None
