"""Public data models for the lexpatch engine.

This module contains the block, section, document, history, diff and
patch types shared by every layer.  All types are plain dataclasses; the
ones that must never change after creation (blocks, sections, snapshots,
history entries, patch ops) are frozen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Union

from lexpatch.utils.hashing import fingerprint


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BlockType(str, Enum):
    """Kinds of editable blocks."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST_ITEM = "list"
    """Serialized as ``"list"`` for compatibility with stored documents."""
    CODE = "code"
    QUOTE = "quote"
    DIVIDER = "divider"


class SectionType(str, Enum):
    """Kinds of structural sections derived from flat text."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"


class PatchOpType(str, Enum):
    """Operation tags understood by the patch engine."""

    REPLACE_BLOCK = "replace_block"
    INSERT_AFTER = "insert_after"
    DELETE_BLOCK = "delete_block"


class OpOutcome(str, Enum):
    """Per-operation result reported by the strict patch variant."""

    APPLIED = "applied"
    NOT_FOUND = "not_found"


# ---------------------------------------------------------------------------
# Blocks and sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Block:
    """An atomic editable unit of a document.

    Attributes
    ----------
    id:
        Opaque, caller-unique identifier.  Never derived from content.
    type:
        The :class:`BlockType` of the block.
    content:
        Raw text payload.  Its meaning depends on *type*.
    hash:
        Fingerprint of *content*.  Computed at construction, so it always
        matches the current content.
    """

    id: str
    type: BlockType
    content: str
    hash: str = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", BlockType(self.type))
        object.__setattr__(self, "hash", fingerprint(self.content))

    def with_content(self, content: str) -> Block:
        """Return a copy of this block carrying *content* (same id and type)."""
        return Block(id=self.id, type=self.type, content=content)


@dataclass(frozen=True)
class MarkdownSection:
    """A heading or paragraph run derived from flat text.

    Used for diffing and outline display only.  ``start_line`` and
    ``end_line`` are 1-based and inclusive.  ``level`` and ``title`` are
    set for headings only.
    """

    id: str
    type: SectionType
    content: str
    start_line: int
    end_line: int
    level: int | None = None
    title: str | None = None


# ---------------------------------------------------------------------------
# Document, snapshots and history
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DocumentVersion:
    """One entry of a document's bounded version history."""

    id: str
    markdown: str
    sections: tuple[MarkdownSection, ...]
    version: int
    timestamp: datetime


@dataclass
class Document:
    """The live editable aggregate.

    ``markdown`` and ``sections`` are derived state: they are recomputed
    whenever ``blocks`` change and are never edited on their own.

    Attributes
    ----------
    id:
        Document identifier.
    file_id:
        Reference to the owning external file.
    blocks:
        Ordered blocks; list order is document order.
    markdown:
        Flat text projection of *blocks*.
    sections:
        Structural sections parsed from *markdown*.
    version:
        Monotonically increasing counter, starting at 1.
    versions:
        Bounded history of recorded versions, oldest first.
    created_at, updated_at:
        UTC timestamps.
    """

    id: str
    file_id: str
    blocks: list[Block] = field(default_factory=list)
    markdown: str = ""
    sections: list[MarkdownSection] = field(default_factory=list)
    version: int = 1
    versions: list[DocumentVersion] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class DocumentSnapshot:
    """An immutable point-in-time copy of a document."""

    id: str
    document_id: str
    blocks: tuple[Block, ...]
    markdown: str
    sections: tuple[MarkdownSection, ...]
    version: int
    timestamp: datetime


# ---------------------------------------------------------------------------
# Diff types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SectionChange:
    """A matched section pair whose content or heading level changed."""

    from_section: MarkdownSection
    to_section: MarkdownSection


@dataclass
class MarkdownDiff:
    """Structural comparison of two texts.

    Attributes
    ----------
    added:
        Sections present only in the new text.
    removed:
        Sections present only in the old text.
    modified:
        Matched sections whose raw content or level differ.
    """

    added: list[MarkdownSection] = field(default_factory=list)
    removed: list[MarkdownSection] = field(default_factory=list)
    modified: list[SectionChange] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)


# ---------------------------------------------------------------------------
# Patch operations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReplaceBlock:
    """Overwrite the block identified by ``block_id`` with ``block``."""

    op_type: ClassVar[PatchOpType] = PatchOpType.REPLACE_BLOCK

    block_id: str
    block: Block


@dataclass(frozen=True)
class InsertAfter:
    """Insert ``block`` right after ``block_id``.

    An empty or missing anchor, or one that no longer exists, appends the
    block after the current last block.
    """

    op_type: ClassVar[PatchOpType] = PatchOpType.INSERT_AFTER

    block_id: str | None
    block: Block


@dataclass(frozen=True)
class DeleteBlock:
    """Remove the block identified by ``block_id``."""

    op_type: ClassVar[PatchOpType] = PatchOpType.DELETE_BLOCK

    block_id: str


PatchOp = Union[ReplaceBlock, InsertAfter, DeleteBlock]


@dataclass(frozen=True)
class PendingPatch:
    """A staged set of operations waiting to be applied or discarded."""

    ops: tuple[PatchOp, ...]
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class PatchReport:
    """Result of :func:`lexpatch.patch.apply_patch_with_report`.

    ``outcomes[i]`` describes ``ops[i]`` of the call that produced it.
    """

    document: Document
    outcomes: list[OpOutcome] = field(default_factory=list)

    @property
    def applied_count(self) -> int:
        return sum(1 for o in self.outcomes if o is OpOutcome.APPLIED)

    @property
    def all_applied(self) -> bool:
        return all(o is OpOutcome.APPLIED for o in self.outcomes)
