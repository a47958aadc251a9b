from __future__ import annotations

import re
from typing import Any

import yaml

from postkit.domain.errors import FrontmatterError
from postkit.domain.models import Heading
from postkit.utils.slugs import heading_anchor

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)(?:\s+#+)?\s*$")
_WORD_RE = re.compile(r"\S+")

WORDS_PER_MINUTE = 200

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class FrontmatterLoader(yaml.SafeLoader):
    """SafeLoader that leaves unquoted dates as strings for the timestamps rule."""


FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, rx) for tag, rx in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def split_frontmatter(text: str) -> tuple[dict[str, Any], str, bool]:
    """
    Split a Markdown document into (frontmatter, body, has_frontmatter).

    The block must open with '---' on the first line and close with '---' on its own
    line; otherwise the whole text is body. Raises FrontmatterError when the block is
    not valid YAML or does not hold a mapping.
    """
    s = text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")

    lines = s.split("\n")
    if not lines or lines[0].rstrip() != "---":
        return {}, s, False

    end_idx = None
    for i in range(1, len(lines)):
        if lines[i].rstrip() == "---":
            end_idx = i
            break

    if end_idx is None:
        return {}, s, False

    fm_text = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1:]).lstrip("\n")

    if not fm_text.strip():
        return {}, body, True

    try:
        loaded = yaml.load(fm_text, Loader=FrontmatterLoader)
    except (yaml.YAMLError, ValueError) as e:
        raise FrontmatterError(f"invalid YAML in frontmatter: {e}") from e

    if loaded is None:
        return {}, body, True
    if not isinstance(loaded, dict):
        raise FrontmatterError(
            f"frontmatter must be a mapping, got {type(loaded).__name__}"
        )
    return loaded, body, True


def normalize_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        # Allow "a, b" or "a"
        parts = [p.strip() for p in value.split(",")]
        return [p for p in parts if p]
    if isinstance(value, list):
        return [x.strip() for x in value if isinstance(x, str) and x.strip()]
    return []


def split_fenced_code_blocks(text: str) -> list[tuple[str, bool]]:
    """
    Splits text into segments: (segment_text, is_code_block).
    Fence lines (```) belong to the code segment they open or close.
    """
    lines = text.splitlines(keepends=True)
    segs: list[tuple[str, bool]] = []
    buf: list[str] = []
    in_code = False

    def flush(is_code: bool) -> None:
        if buf:
            segs.append(("".join(buf), is_code))
            buf.clear()

    for line in lines:
        if line.lstrip().startswith("```"):
            if in_code:
                buf.append(line)
                flush(True)
            else:
                flush(False)
                buf.append(line)
            in_code = not in_code
            continue
        buf.append(line)

    flush(in_code)
    return segs


def extract_headings(body: str) -> list[Heading]:
    """ATX headings outside fenced code blocks, in document order."""
    headings: list[Heading] = []
    for seg, is_code in split_fenced_code_blocks(body):
        if is_code:
            continue
        for line in seg.splitlines():
            m = _HEADING_RE.match(line)
            if not m:
                continue
            level = len(m.group(1))
            text = m.group(2).strip()
            headings.append(Heading(level=level, text=text, anchor=heading_anchor(text, level)))
    return headings


def estimate_reading_time(body: str, words_per_minute: int = WORDS_PER_MINUTE) -> str:
    words = len(_WORD_RE.findall(body))
    minutes = max(1, -(-words // words_per_minute))
    return f"{minutes} min read"
