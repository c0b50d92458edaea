"""Text conversion layer.

Exports
-------
text_to_blocks, blocks_to_text, create_block
    Flat text <-> block sequence codec.
sanitize, enforce_heading_hierarchy, normalize
    Markup stripping and heading-depth normalization.
parse_sections
    Structural heading/paragraph sections for diffing and outlines.
render_html, render_outline
    Preview helpers.
"""

from .block_codec import blocks_to_text, create_block, text_to_blocks
from .normalizer import enforce_heading_hierarchy, normalize, sanitize
from .preview import PreviewRenderer, render_html, render_outline
from .sections import parse_sections

__all__ = [
    "PreviewRenderer",
    "blocks_to_text",
    "create_block",
    "enforce_heading_hierarchy",
    "normalize",
    "parse_sections",
    "render_html",
    "render_outline",
    "sanitize",
    "text_to_blocks",
]
