import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path

from postkit.adapters.feed.rendering import MarkdownItRenderer
from postkit.adapters.feed.rss import FeedChannel, RssFeedBuilder, cdata, xml_safe
from postkit.domain.models import Post, Ref

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
CONTENT_NS = "{http://purl.org/rss/1.0/modules/content/}"
ATOM_NS = "{http://www.w3.org/2005/Atom}"


def post(slug, day, **kw):
    return Post(
        slug=slug,
        title=kw.pop("title", slug),
        path=Path(f"{slug}.md"),
        content=kw.pop("content", "Hello **world**"),
        content_hash="",
        published_at=datetime(2024, 1, day, tzinfo=timezone.utc),
        **kw,
    )


def test_cdata_splits_terminator():
    assert cdata("a]]>b") == "<![CDATA[a]]]]><![CDATA[>b]]>"


def test_markdown_renderer():
    assert MarkdownItRenderer().render("Hello **world**") == "<p>Hello <strong>world</strong></p>"
    assert MarkdownItRenderer().render("") == ""


def test_feed_structure_and_order():
    builder = RssFeedBuilder(channel=FeedChannel(site_url="https://example.com/"), limit=2)
    posts = [
        post("old", 1),
        post(
            "newest",
            20,
            title="Tips & <Tricks>",
            excerpt="Short ]]> excerpt",
            category=Ref("Docker", "docker"),
            author=Ref("Jane", "jane"),
            tags=("Docker", "CI/CD"),
        ),
        post("middle", 10),
    ]
    xml = builder.build(posts, now=NOW)
    root = ET.fromstring(xml)
    channel = root.find("channel")

    assert root.get("version") == "2.0"
    assert channel.findtext("link") == "https://example.com"
    assert channel.findtext("lastBuildDate") == "Sat, 01 Jun 2024 12:00:00 GMT"
    assert channel.find(f"{ATOM_NS}link").get("href") == "https://example.com/feed.xml"

    items = channel.findall("item")
    assert [i.findtext("link") for i in items] == [
        "https://example.com/posts/newest",
        "https://example.com/posts/middle",
    ]

    first = items[0]
    assert first.findtext("title") == "Tips & <Tricks>"
    assert first.findtext("description") == "Short ]]> excerpt"
    assert first.findtext("pubDate") == "Sat, 20 Jan 2024 00:00:00 GMT"
    assert first.find("guid").get("isPermaLink") == "true"
    assert [c.text for c in first.findall("category")] == ["Docker", "Docker", "CI/CD"]
    assert first.findtext("author") == "Jane"
    assert first.findtext(f"{CONTENT_NS}encoded") == "<p>Hello <strong>world</strong></p>"


def test_empty_body_falls_back_to_excerpt():
    builder = RssFeedBuilder(channel=FeedChannel(site_url="https://example.com"))
    xml = builder.build([post("a", 1, content="  ", excerpt="Just the excerpt")], now=NOW)
    item = ET.fromstring(xml).find("channel/item")
    assert item.findtext(f"{CONTENT_NS}encoded") == "Just the excerpt"


def test_control_characters_are_dropped():
    assert xml_safe("a\x1bb\tc\n") == "ab\tc\n"
    body = "```bash\necho -e '\x1b[31mred'\n```\n"
    builder = RssFeedBuilder(channel=FeedChannel(site_url="https://example.com", title="Dev\x07Ops"))
    root = ET.fromstring(builder.build([post("ansi", 2, title="Colours\x1b", content=body)], now=NOW))
    assert root.find("channel/title").text == "DevOps"
    item = root.find("channel/item")
    assert item.find("title").text == "Colours"
    assert "echo -e '[31mred'" in item.find(f"{CONTENT_NS}encoded").text
