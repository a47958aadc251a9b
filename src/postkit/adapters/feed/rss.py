from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence
from xml.sax.saxutils import escape, quoteattr

from postkit.adapters.feed.rendering import MarkdownItRenderer
from postkit.domain.models import Post
from postkit.ports import MarkdownRenderer
from postkit.taxonomy import sort_posts
from postkit.utils.dates import to_rfc822

DEFAULT_ITEM_LIMIT = 50

# C0 controls XML 1.0 does not allow, even inside CDATA
_INVALID_XML_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def xml_safe(text: str) -> str:
    return _INVALID_XML_CHARS_RE.sub("", text)


def cdata(text: str) -> str:
    """Wrap text in CDATA; an embedded ']]>' is split across two sections."""
    return "<![CDATA[" + xml_safe(text).replace("]]>", "]]]]><![CDATA[>") + "]]>"


@dataclass(frozen=True, slots=True)
class FeedChannel:
    site_url: str
    title: str = "DevOps Daily"
    description: str = "The latest DevOps news, tutorials, and guides"
    language: str = "en"

    @property
    def base_url(self) -> str:
        return self.site_url.rstrip("/")


@dataclass(slots=True)
class RssFeedBuilder:
    """
    Builds an RSS 2.0 document (with atom self-link and content:encoded) for the
    newest `limit` posts.
    """
    channel: FeedChannel
    renderer: MarkdownRenderer = field(default_factory=MarkdownItRenderer)
    limit: int = DEFAULT_ITEM_LIMIT

    def build(self, posts: Sequence[Post], *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        base = self.channel.base_url
        items = sort_posts(posts)[: max(0, self.limit)]

        parts = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom" '
            'xmlns:content="http://purl.org/rss/1.0/modules/content/">',
            "  <channel>",
            f"    <title>{escape(xml_safe(self.channel.title))}</title>",
            f"    <link>{escape(base)}</link>",
            f"    <description>{escape(xml_safe(self.channel.description))}</description>",
            f"    <language>{escape(xml_safe(self.channel.language))}</language>",
            f"    <lastBuildDate>{to_rfc822(now)}</lastBuildDate>",
            f'    <atom:link href={quoteattr(base + "/feed.xml")} rel="self" type="application/rss+xml"/>',
        ]
        parts.extend(self._item(post, now=now) for post in items)
        parts.append("  </channel>")
        parts.append("</rss>")
        return "\n".join(parts) + "\n"

    def _item(self, post: Post, *, now: datetime) -> str:
        url = f"{self.channel.base_url}/posts/{post.slug}"
        excerpt = post.excerpt or ""
        content = self.renderer.render(post.content) if post.content.strip() else excerpt

        lines = [
            "    <item>",
            f"      <title>{cdata(post.title)}</title>",
            f"      <link>{escape(url)}</link>",
            f"      <description>{cdata(excerpt)}</description>",
            f"      <pubDate>{to_rfc822(post.sort_date or now)}</pubDate>",
            f'      <guid isPermaLink="true">{escape(url)}</guid>',
        ]
        if post.category is not None and post.category.name:
            lines.append(f"      <category>{cdata(post.category.name)}</category>")
        if post.author is not None and post.author.name:
            lines.append(f"      <author>{cdata(post.author.name)}</author>")
        lines.extend(f"      <category>{cdata(tag)}</category>" for tag in post.tags)
        lines.append(f"      <content:encoded>{cdata(content)}</content:encoded>")
        lines.append("    </item>")
        return "\n".join(lines)
