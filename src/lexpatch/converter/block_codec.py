"""Flat text <-> block sequence conversion.

One block per input line, classified by a fixed prefix grammar.  The
mapping is deliberately lossy: every heading depth collapses to a single
heading block type, and code fences keep only the opening marker's tail.
A sequence produced by :func:`text_to_blocks` survives a trip through
:func:`blocks_to_text` and back unchanged (ids aside).
"""

from __future__ import annotations

from lexpatch.models import Block, BlockType
from lexpatch.utils.hashing import new_id

_FENCE = "```"
_DIVIDER = "---"

# Checked in order; the first matching prefix wins.
_LINE_PREFIXES: tuple[tuple[str, BlockType], ...] = (
    ("# ", BlockType.HEADING),
    ("## ", BlockType.HEADING),
    ("### ", BlockType.HEADING),
    ("- ", BlockType.LIST_ITEM),
    ("* ", BlockType.LIST_ITEM),
    (_FENCE, BlockType.CODE),
    ("> ", BlockType.QUOTE),
)

_OUTPUT_PREFIXES: dict[BlockType, str] = {
    BlockType.HEADING: "# ",
    BlockType.LIST_ITEM: "- ",
    BlockType.CODE: _FENCE,
    BlockType.QUOTE: "> ",
}


def create_block(block_type: BlockType | str, content: str) -> Block:
    """Build a block with a fresh id; its hash is derived from *content*."""
    return Block(id=new_id(), type=BlockType(block_type), content=content)


def classify_line(line: str) -> tuple[BlockType, str]:
    """Return the block type of *line* and its content with the prefix removed."""
    if line.strip() == "":
        return BlockType.PARAGRAPH, ""
    for prefix, block_type in _LINE_PREFIXES:
        if line.startswith(prefix):
            return block_type, line[len(prefix):]
    if line == _DIVIDER:
        return BlockType.DIVIDER, _DIVIDER
    return BlockType.PARAGRAPH, line


def text_to_blocks(text: str) -> list[Block]:
    """Split *text* on ``\\n`` and turn every line into one block.

    Never fails: any line that matches no prefix becomes a paragraph.
    The empty string yields a single empty paragraph.
    """
    blocks: list[Block] = []
    for line in text.split("\n"):
        block_type, content = classify_line(line)
        blocks.append(create_block(block_type, content))
    return blocks


def block_to_line(block: Block) -> str:
    """Render a single block back to its line of text."""
    if block.type is BlockType.DIVIDER:
        return _DIVIDER
    prefix = _OUTPUT_PREFIXES.get(block.type, "")
    return f"{prefix}{block.content}"


def blocks_to_text(blocks: list[Block] | tuple[Block, ...]) -> str:
    """Join the line rendering of every block with newlines."""
    return "\n".join(block_to_line(block) for block in blocks)
