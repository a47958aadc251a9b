from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt


@dataclass(slots=True)
class MarkdownItRenderer:
    """
    CommonMark renderer with tables and strikethrough (GFM-ish, as posts use them).
    Raw HTML in posts is passed through.
    """
    _md: MarkdownIt = field(
        default_factory=lambda: MarkdownIt("commonmark", {"html": True, "breaks": True}).enable(
            ["table", "strikethrough"]
        )
    )

    def render(self, markdown: str) -> str:
        if not markdown:
            return ""
        return self._md.render(markdown).strip()
