"""Read-only preview rendering.

Renders a document's text to HTML for a preview pane and extracts a
heading outline from parsed sections.  Rendering goes through mistune with
raw HTML escaped, after :func:`normalize` has already stripped tags.
"""

from __future__ import annotations

from collections.abc import Iterable

import mistune

from lexpatch.converter.normalizer import normalize
from lexpatch.models import MarkdownSection, SectionType


class PreviewRenderer:
    """Render normalized Markdown to HTML."""

    def __init__(self) -> None:
        self._markdown = mistune.create_markdown(
            escape=True,
            plugins=["strikethrough", "table"],
        )

    def render(self, text: str) -> str:
        html = self._markdown(normalize(text))
        if not isinstance(html, str):
            return ""
        return html


_default_renderer: PreviewRenderer | None = None


def render_html(text: str) -> str:
    """Normalize *text* and render it to an HTML fragment."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = PreviewRenderer()
    return _default_renderer.render(text)


def render_outline(sections: Iterable[MarkdownSection]) -> list[tuple[int, str]]:
    """Return ``(level, title)`` for every heading section, in order."""
    return [
        (section.level or 1, section.title or "")
        for section in sections
        if section.type is SectionType.HEADING
    ]
