from __future__ import annotations

import re

_URL_SAFE_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

_WS_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w-]+", re.ASCII)
_NON_WORD_SPACE_RE = re.compile(r"[^\w\s-]", re.ASCII)
_MULTI_DASH_RE = re.compile(r"-{2,}")


def is_url_safe_slug(value: object) -> bool:
    """Lowercase alphanumerics separated by single hyphens."""
    return isinstance(value, str) and bool(_URL_SAFE_SLUG_RE.match(value))


def tag_to_slug(tag: str) -> str:
    """
    'Docker Compose' -> 'docker-compose', 'CI/CD' -> 'cicd'.
    """
    s = tag.lower()
    s = _WS_RE.sub("-", s)
    s = _NON_WORD_RE.sub("", s)
    s = _MULTI_DASH_RE.sub("-", s)
    return s.strip("-")


def slug_to_tag(slug: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def heading_anchor(text: str, level: int) -> str:
    """
    Anchor id for a heading, prefixed with its level so an h2 and h3 with the same
    text do not collide: ('Install Docker', 2) -> 'h2-install-docker'.
    """
    s = text.lower().strip()
    s = _NON_WORD_SPACE_RE.sub("", s)
    s = _WS_RE.sub("-", s)
    s = re.sub(r"-+", "-", s)
    s = s.strip("-")
    return f"h{level}-{s}"
