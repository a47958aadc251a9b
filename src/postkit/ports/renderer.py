from __future__ import annotations

from typing import Protocol


class MarkdownRenderer(Protocol):
    """
    Renders a Markdown body to HTML (used for feed content).
    """

    def render(self, markdown: str) -> str:
        ...
