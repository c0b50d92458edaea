"""Apply block-level edit operations to a document.

Operations run strictly in order against a working copy of the block
list, each one seeing the result of the previous ones.  After the last op
the derived state is rebuilt from the blocks (text via the block codec,
sections via the section parser), ``version`` goes up by exactly one and
``updated_at`` is refreshed.  The input document is never mutated.

Ops that name a block id which does not exist are skipped, except
``insert_after`` which falls back to appending.  :func:`apply_patch`
reports nothing about skips; :func:`apply_patch_with_report` returns one
:class:`OpOutcome` per op for callers that must know.
"""

from __future__ import annotations

import dataclasses

from lexpatch.converter.block_codec import blocks_to_text, text_to_blocks
from lexpatch.converter.sections import parse_sections
from lexpatch.models import (
    Block,
    DeleteBlock,
    Document,
    InsertAfter,
    OpOutcome,
    PatchOp,
    PatchReport,
    ReplaceBlock,
    utc_now,
)
from lexpatch.utils.hashing import new_id


def _find_index(blocks: list[Block], block_id: str | None) -> int:
    if not block_id:
        return -1
    for index, block in enumerate(blocks):
        if block.id == block_id:
            return index
    return -1


def _apply_op(blocks: list[Block], op: PatchOp) -> OpOutcome:
    """Apply one op to *blocks* in place and report whether it took effect."""
    if isinstance(op, ReplaceBlock):
        index = _find_index(blocks, op.block_id)
        if index == -1:
            return OpOutcome.NOT_FOUND
        blocks[index] = op.block
        return OpOutcome.APPLIED

    if isinstance(op, InsertAfter):
        index = _find_index(blocks, op.block_id)
        if index == -1:
            blocks.append(op.block)
        else:
            blocks.insert(index + 1, op.block)
        return OpOutcome.APPLIED

    if isinstance(op, DeleteBlock):
        index = _find_index(blocks, op.block_id)
        if index == -1:
            return OpOutcome.NOT_FOUND
        del blocks[index]
        return OpOutcome.APPLIED

    # Unknown payloads are ignored like dangling ids.
    return OpOutcome.NOT_FOUND


def apply_patch_with_report(document: Document, ops: list[PatchOp]) -> PatchReport:
    """Apply *ops* and report the outcome of each one.

    The returned document is identical to what :func:`apply_patch` would
    produce for the same input.
    """
    blocks = list(document.blocks)
    outcomes = [_apply_op(blocks, op) for op in ops]

    markdown = blocks_to_text(blocks)
    patched = dataclasses.replace(
        document,
        blocks=blocks,
        markdown=markdown,
        sections=parse_sections(markdown),
        version=document.version + 1,
        versions=list(document.versions),
        updated_at=utc_now(),
    )
    return PatchReport(document=patched, outcomes=outcomes)


def apply_patch(document: Document, ops: list[PatchOp]) -> Document:
    """Apply *ops* in order and return the new document.

    Never raises.  Unknown block ids make ``replace_block`` and
    ``delete_block`` no-ops; ``insert_after`` with an unknown or empty
    anchor appends.  The version is incremented by one even when *ops* is
    empty or nothing applied.
    """
    return apply_patch_with_report(document, ops).document


def create_document(file_id: str, initial_content: str | None = None) -> Document:
    """Create a version-1 document for *file_id*.

    Without *initial_content* the document holds a single empty paragraph.
    """
    blocks = text_to_blocks(initial_content or "")
    markdown = blocks_to_text(blocks)
    now = utc_now()
    return Document(
        id=new_id(),
        file_id=file_id,
        blocks=blocks,
        markdown=markdown,
        sections=parse_sections(markdown),
        version=1,
        versions=[],
        created_at=now,
        updated_at=now,
    )
